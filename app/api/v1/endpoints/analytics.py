# app/api/v1/endpoints/analytics.py
import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import get_db
from app.models.appointment import Appointment
from app.models.patient import Patient
from app.schemas.analytics import DashboardResponse
from app.services.cache_service import CacheResource, ResourceCache, get_resource_cache
from app.services.reporting_service import TimeRange, build_dashboard

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/dashboard", response_model=DashboardResponse, tags=["analytics"])
def get_dashboard(
    time_range: TimeRange = Query(TimeRange.MONTHLY, alias="range"),
    months: int = Query(6, ge=1, le=24),
    db: Session = Depends(get_db),
    cache: ResourceCache = Depends(get_resource_cache),
):
    """
    Reporting rollups over all appointments and patients.
    Cached for ANALYTICS_CACHE_TTL_SECONDS; any write to the underlying data invalidates it.
    """

    def compute() -> dict:
        appointments = db.query(Appointment).all()
        patients = db.query(Patient).all()
        logger.debug(
            "Computing dashboard over %s appointments / %s patients", len(appointments), len(patients)
        )
        dashboard = build_dashboard(appointments, patients, time_range=time_range, months=months)
        return DashboardResponse.model_validate(dashboard).model_dump(mode="json", by_alias=True)

    return cache.get_or_set(
        CacheResource.ANALYTICS,
        f"dashboard:{time_range.value}:{months}",
        compute,
        ttl=get_settings().analytics_cache_ttl_seconds,
    )
