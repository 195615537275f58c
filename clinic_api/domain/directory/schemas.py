"""Directory schemas"""

from pydantic import BaseModel

from ..scheduling.schemas import DoctorSummary, PatientSummary


class DoctorListResponse(BaseModel):
    doctors: list[DoctorSummary]


class PatientListResponse(BaseModel):
    patients: list[PatientSummary]
