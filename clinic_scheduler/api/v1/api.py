from fastapi import APIRouter
from clinic_scheduler.api.v1.auth import routes as auth
from clinic_scheduler.api.v1.users import routes as users
from clinic_scheduler.api.v1.appointments import routes as appointments
from clinic_scheduler.api.v1.suggestions import routes as suggestions
from clinic_scheduler.api.v1.notifications import routes as notifications
from clinic_scheduler.api.v1.workplaces import routes as workplaces
from clinic_scheduler.api.v1.medical_records import routes as medical_records

api_router = APIRouter()
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(appointments.router)
api_router.include_router(suggestions.router)
api_router.include_router(notifications.router)
api_router.include_router(workplaces.router)
api_router.include_router(medical_records.router)
