# app/api/v1/endpoints/patients.py
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.schemas.appointment import AppointmentResponse
from app.schemas.lab_result import LabResultCreate, LabResultResponse
from app.schemas.patient import PatientCreate, PatientResponse, PatientUpdate
from app.services import patient_service
from app.services.cache_service import CacheResource, ResourceCache, get_resource_cache
from app.services.patient_service import PatientNotFoundError

router = APIRouter()


def _not_found(exc: PatientNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


@router.get("", response_model=list[PatientResponse])
def list_patients(
    db: Session = Depends(get_db),
    cache: ResourceCache = Depends(get_resource_cache),
):
    return cache.get_or_set(
        CacheResource.PATIENTS,
        "list",
        lambda: [
            PatientResponse.model_validate(p).model_dump(mode="json", by_alias=True)
            for p in patient_service.list_patients(db)
        ],
    )


@router.post("", response_model=PatientResponse, status_code=status.HTTP_201_CREATED)
def create_patient(
    payload: PatientCreate,
    db: Session = Depends(get_db),
    cache: ResourceCache = Depends(get_resource_cache),
) -> PatientResponse:
    patient = patient_service.create_patient(db, payload)
    cache.invalidate_for(CacheResource.PATIENTS)
    return PatientResponse.model_validate(patient)


@router.get("/{patient_id}", response_model=PatientResponse)
def get_patient(patient_id: int, db: Session = Depends(get_db)) -> PatientResponse:
    try:
        patient = patient_service.get_patient(db, patient_id)
    except PatientNotFoundError as exc:
        raise _not_found(exc) from exc
    return PatientResponse.model_validate(patient)


@router.put("/{patient_id}", response_model=PatientResponse)
def update_patient(
    patient_id: int,
    payload: PatientUpdate,
    db: Session = Depends(get_db),
    cache: ResourceCache = Depends(get_resource_cache),
) -> PatientResponse:
    try:
        patient = patient_service.update_patient(db, patient_id, payload)
    except PatientNotFoundError as exc:
        raise _not_found(exc) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    cache.invalidate_for(CacheResource.PATIENTS)
    return PatientResponse.model_validate(patient)


@router.delete("/{patient_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_patient(
    patient_id: int,
    db: Session = Depends(get_db),
    cache: ResourceCache = Depends(get_resource_cache),
) -> Response:
    """
    Hard delete; the patient's appointments and lab results go with it.
    """
    try:
        patient_service.delete_patient(db, patient_id)
    except PatientNotFoundError as exc:
        raise _not_found(exc) from exc

    cache.invalidate_for(CacheResource.PATIENTS)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{patient_id}/appointments", response_model=list[AppointmentResponse])
def list_patient_appointments(patient_id: int, db: Session = Depends(get_db)) -> list[AppointmentResponse]:
    try:
        appointments = patient_service.list_patient_appointments(db, patient_id)
    except PatientNotFoundError as exc:
        raise _not_found(exc) from exc
    return [AppointmentResponse.model_validate(a) for a in appointments]


@router.get("/{patient_id}/lab-results", response_model=list[LabResultResponse])
def list_lab_results(patient_id: int, db: Session = Depends(get_db)) -> list[LabResultResponse]:
    try:
        lab_results = patient_service.list_lab_results(db, patient_id)
    except PatientNotFoundError as exc:
        raise _not_found(exc) from exc
    return [LabResultResponse.model_validate(r) for r in lab_results]


@router.post(
    "/{patient_id}/lab-results",
    response_model=LabResultResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_lab_result(
    patient_id: int,
    payload: LabResultCreate,
    db: Session = Depends(get_db),
) -> LabResultResponse:
    try:
        lab_result = patient_service.create_lab_result(db, patient_id, payload)
    except PatientNotFoundError as exc:
        raise _not_found(exc) from exc
    return LabResultResponse.model_validate(lab_result)
