"""Appointment router - FastAPI endpoints for scheduling"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_actor
from ...database import get_db
from .roles import Actor, AppointmentStatus
from .schemas import (
    AppointmentCreate,
    AppointmentEnvelope,
    AppointmentFilters,
    AppointmentListResponse,
    AppointmentResponse,
    AppointmentUpdate,
    DeleteResponse,
)
from .service import AppointmentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["Appointments"])


def get_appointment_service(db: Session = Depends(get_db)) -> AppointmentService:
    """Dependency injection for AppointmentService"""
    return AppointmentService(db)


@router.get("", response_model=AppointmentListResponse)
async def list_appointments(
    actor: Actor = Depends(get_current_actor),
    service: AppointmentService = Depends(get_appointment_service),
    doctor_id: Optional[str] = Query(None),
    patient_id: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    status: Optional[AppointmentStatus] = Query(None),
):
    """List appointments visible to the current user, ordered by start time"""
    filters = AppointmentFilters(
        doctor_id=doctor_id,
        patient_id=patient_id,
        start_date=start_date,
        end_date=end_date,
        status=status,
    )
    appointments = service.list_appointments(actor, filters)
    return AppointmentListResponse(
        appointments=[AppointmentResponse.from_model(a) for a in appointments]
    )


@router.get("/{appointment_id}", response_model=AppointmentEnvelope)
async def get_appointment(
    appointment_id: str,
    actor: Actor = Depends(get_current_actor),
    service: AppointmentService = Depends(get_appointment_service),
):
    appointment = service.get_appointment(appointment_id, actor)
    return AppointmentEnvelope(appointment=AppointmentResponse.from_model(appointment))


@router.post("", response_model=AppointmentEnvelope, status_code=201)
async def create_appointment(
    data: AppointmentCreate,
    actor: Actor = Depends(get_current_actor),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Book an appointment; rejected with 409 if the doctor is already booked"""
    appointment = service.create_appointment(data, actor)
    return AppointmentEnvelope(appointment=AppointmentResponse.from_model(appointment))


@router.put("/{appointment_id}", response_model=AppointmentEnvelope)
async def update_appointment(
    appointment_id: str,
    data: AppointmentUpdate,
    actor: Actor = Depends(get_current_actor),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Partially update an appointment; omitted fields keep their value"""
    appointment = service.update_appointment(appointment_id, data, actor)
    return AppointmentEnvelope(appointment=AppointmentResponse.from_model(appointment))


@router.delete("/{appointment_id}", response_model=DeleteResponse)
async def delete_appointment(
    appointment_id: str,
    actor: Actor = Depends(get_current_actor),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.delete_appointment(appointment_id, actor)
