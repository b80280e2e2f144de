# app/models/__init__.py
# Import every model so Base.metadata is complete for Alembic and create_all.
from app.models.base import Base
from app.models.user import User
from app.models.patient import Patient
from app.models.doctor import Doctor, Specialty
from app.models.appointment import Appointment
from app.models.notification import NotificationLog
from app.models.lab_result import LabResult

__all__ = [
    "Base",
    "User",
    "Patient",
    "Doctor",
    "Specialty",
    "Appointment",
    "NotificationLog",
    "LabResult",
]
