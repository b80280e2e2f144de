# app/api/v1/router.py
from fastapi import APIRouter, Depends

from app.api.v1.endpoints import (
    analytics,
    appointments,
    auth,
    doctors,
    patients,
)
from app.dependencies.authz import get_current_user

api_router = APIRouter()

# Session endpoints (register / login / logout are public, /user checks the session itself)
api_router.include_router(auth.router)

# Everything else requires a signed-in user
protected = [Depends(get_current_user)]
api_router.include_router(
    appointments.router, prefix="/appointments", tags=["appointments"], dependencies=protected
)
api_router.include_router(patients.router, prefix="/patients", tags=["patients"], dependencies=protected)
api_router.include_router(doctors.router, prefix="/doctors", tags=["doctors"], dependencies=protected)
api_router.include_router(
    doctors.specialties_router, prefix="/specialties", tags=["specialties"], dependencies=protected
)
api_router.include_router(analytics.router, prefix="/analytics", tags=["analytics"], dependencies=protected)
