from typing import Optional, List
import uuid

from clinic_scheduler.domain.suggestions.models import AppointmentSuggestion


class SuggestionRepository:
    """Repository for appointment suggestion data access operations"""

    def __init__(self, db):
        self.db = db

    def create(self, suggestion_data: dict) -> AppointmentSuggestion:
        suggestion = AppointmentSuggestion(**suggestion_data)
        self.db.add(suggestion)
        self.db.flush()
        return suggestion

    def get_by_id(self, suggestion_id: uuid.UUID) -> Optional[AppointmentSuggestion]:
        return self.db.query(AppointmentSuggestion).filter(
            AppointmentSuggestion.id == suggestion_id
        ).first()

    def lock(self, suggestion_id: uuid.UUID) -> Optional[AppointmentSuggestion]:
        """Load a suggestion with a row lock held until the transaction ends"""
        return self.db.query(AppointmentSuggestion).filter(
            AppointmentSuggestion.id == suggestion_id
        ).with_for_update().populate_existing().first()

    def get_all(self, doctor_id: Optional[uuid.UUID] = None) -> List[AppointmentSuggestion]:
        """Get suggestions, newest first"""
        query = self.db.query(AppointmentSuggestion)
        if doctor_id:
            query = query.filter(AppointmentSuggestion.doctor_id == doctor_id)
        return query.order_by(AppointmentSuggestion.created_at.desc()).all()

    def update(self, suggestion: AppointmentSuggestion, update_data: dict) -> AppointmentSuggestion:
        for key, value in update_data.items():
            if hasattr(suggestion, key):
                setattr(suggestion, key, value)
        self.db.flush()
        return suggestion
