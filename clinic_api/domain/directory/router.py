"""Directory router - doctor and patient listings"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_actor
from ...database import get_db
from ..scheduling.roles import Actor
from ..scheduling.schemas import DoctorSummary, PatientSummary
from .schemas import DoctorListResponse, PatientListResponse
from .service import DirectoryService

router = APIRouter(tags=["Directory"])


def get_directory_service(db: Session = Depends(get_db)) -> DirectoryService:
    return DirectoryService(db)


@router.get("/doctors", response_model=DoctorListResponse)
async def get_doctors(
    actor: Actor = Depends(get_current_actor),
    service: DirectoryService = Depends(get_directory_service),
):
    """Doctors available for booking"""
    doctors = service.get_doctors(actor)
    return DoctorListResponse(doctors=[DoctorSummary.from_user(d) for d in doctors])


@router.get("/patients", response_model=PatientListResponse)
async def get_patients(
    actor: Actor = Depends(get_current_actor),
    service: DirectoryService = Depends(get_directory_service),
):
    """Patients that can be booked, newest first"""
    patients = service.get_patients(actor)
    return PatientListResponse(patients=[PatientSummary.from_user(p) for p in patients])
