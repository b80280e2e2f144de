# app/api/v1/endpoints/doctors.py
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.schemas.doctor import (
    DoctorCreate,
    DoctorResponse,
    DoctorUpdate,
    SpecialtyCreate,
    SpecialtyResponse,
)
from app.services import doctor_service
from app.services.cache_service import CacheResource, ResourceCache, get_resource_cache
from app.services.doctor_service import (
    DoctorNotFoundError,
    DuplicateSpecialtyError,
    SpecialtyNotFoundError,
)

router = APIRouter()
specialties_router = APIRouter()


# -------------------------
# Doctors
# -------------------------


@router.get("", response_model=list[DoctorResponse])
def list_doctors(
    db: Session = Depends(get_db),
    cache: ResourceCache = Depends(get_resource_cache),
):
    return cache.get_or_set(
        CacheResource.DOCTORS,
        "list",
        lambda: [
            DoctorResponse.model_validate(d).model_dump(mode="json", by_alias=True)
            for d in doctor_service.list_doctors(db)
        ],
    )


@router.post("", response_model=DoctorResponse, status_code=status.HTTP_201_CREATED)
def create_doctor(
    payload: DoctorCreate,
    db: Session = Depends(get_db),
    cache: ResourceCache = Depends(get_resource_cache),
) -> DoctorResponse:
    try:
        doctor = doctor_service.create_doctor(db, payload)
    except SpecialtyNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    cache.invalidate_for(CacheResource.DOCTORS)
    return DoctorResponse.model_validate(doctor)


@router.get("/{doctor_id}", response_model=DoctorResponse)
def get_doctor(doctor_id: int, db: Session = Depends(get_db)) -> DoctorResponse:
    try:
        doctor = doctor_service.get_doctor(db, doctor_id)
    except DoctorNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return DoctorResponse.model_validate(doctor)


@router.put("/{doctor_id}", response_model=DoctorResponse)
def update_doctor(
    doctor_id: int,
    payload: DoctorUpdate,
    db: Session = Depends(get_db),
    cache: ResourceCache = Depends(get_resource_cache),
) -> DoctorResponse:
    try:
        doctor = doctor_service.update_doctor(db, doctor_id, payload)
    except (DoctorNotFoundError, SpecialtyNotFoundError) as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    cache.invalidate_for(CacheResource.DOCTORS)
    return DoctorResponse.model_validate(doctor)


@router.delete("/{doctor_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_doctor(
    doctor_id: int,
    db: Session = Depends(get_db),
    cache: ResourceCache = Depends(get_resource_cache),
) -> Response:
    """
    Delete a doctor; their appointments remain, unassigned.
    """
    try:
        doctor_service.delete_doctor(db, doctor_id)
    except DoctorNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    # Appointment rows changed too (doctor_id cleared)
    cache.invalidate_for(CacheResource.DOCTORS)
    cache.invalidate(CacheResource.APPOINTMENTS)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# -------------------------
# Specialties
# -------------------------


@specialties_router.get("", response_model=list[SpecialtyResponse])
def list_specialties(db: Session = Depends(get_db)) -> list[SpecialtyResponse]:
    return [SpecialtyResponse.model_validate(s) for s in doctor_service.list_specialties(db)]


@specialties_router.post("", response_model=SpecialtyResponse, status_code=status.HTTP_201_CREATED)
def create_specialty(payload: SpecialtyCreate, db: Session = Depends(get_db)) -> SpecialtyResponse:
    try:
        specialty = doctor_service.create_specialty(db, payload)
    except DuplicateSpecialtyError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return SpecialtyResponse.model_validate(specialty)
