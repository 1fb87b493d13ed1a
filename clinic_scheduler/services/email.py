from typing import Dict, Any, Optional

from loguru import logger

from clinic_scheduler.infrastructure.notifications import send_notification

SUBJECTS = {
    "created": "Your appointment has been booked",
    "updated": "Your appointment has been changed",
    "cancelled": "Your appointment has been cancelled",
    "reminder": "Appointment reminder",
}

INTROS = {
    "created": "a new appointment has been booked for you.",
    "updated": "one of your appointments has been changed.",
    "cancelled": "one of your appointments has been cancelled.",
    "reminder": "this is a reminder about your upcoming appointment.",
}


def render_appointment_email(
    user_name: str,
    kind: str,
    date: str,
    time: str,
    doctor_name: Optional[str] = None,
    patient_name: Optional[str] = None
) -> Dict[str, str]:
    """Build subject and plain-text body for an appointment email"""
    if kind not in SUBJECTS:
        raise ValueError(f"Unknown appointment email kind: {kind}")

    lines = [f"Hello {user_name},", "", INTROS[kind], "", f"Date: {date}", f"Time: {time}"]
    if doctor_name:
        lines.append(f"Doctor: {doctor_name}")
    if patient_name:
        lines.append(f"Patient: {patient_name}")
    return {"subject": SUBJECTS[kind], "body": "\n".join(lines)}


def send_appointment_email(
    email: str,
    user_name: str,
    kind: str,
    context: Dict[str, Any]
) -> Dict[str, Any]:
    """Render and deliver an appointment email"""
    message = render_appointment_email(
        user_name,
        kind,
        date=context.get("date", ""),
        time=context.get("time", ""),
        doctor_name=context.get("doctor_name"),
        patient_name=context.get("patient_name"),
    )
    logger.info(f"Sending {kind} appointment email to {email}")
    return send_notification(email, message["subject"], message["body"], channel="email")
