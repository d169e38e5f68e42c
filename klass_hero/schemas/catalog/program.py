"""
Program catalog schemas.
"""

from datetime import date
from decimal import Decimal
from typing import List, Optional, Union

from pydantic import Field, model_validator

from klass_hero.models.base.enums import EligibilityReference, Gender, RegistrationStatus
from klass_hero.schemas.common.base import BaseDBSchema, BaseSchema, Money

__all__ = [
    "ProgramCreate",
    "ProgramResponse",
    "RegistrationStatusResponse",
    "EnrollmentPolicyUpdate",
    "EnrollmentPolicyResponse",
    "CapacityResponse",
    "ParticipantPolicyUpdate",
    "ParticipantPolicyResponse",
    "EligibilityResponse",
]


class ProgramCreate(BaseSchema):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    provider_id: Optional[str] = None
    registration_start_date: Optional[date] = None
    registration_end_date: Optional[date] = None
    start_date: Optional[date] = None
    weekly_fee: Optional[Decimal] = Field(default=None, ge=0)
    registration_fee: Optional[Decimal] = Field(default=None, ge=0)
    weeks_count: Optional[int] = Field(default=None, ge=1)


class ProgramResponse(BaseDBSchema):
    title: str
    description: Optional[str] = None
    provider_id: Optional[str] = None
    registration_start_date: Optional[date] = None
    registration_end_date: Optional[date] = None
    start_date: Optional[date] = None
    weekly_fee: Optional[Money] = None
    registration_fee: Optional[Money] = None
    weeks_count: Optional[int] = None


class RegistrationStatusResponse(BaseSchema):
    program_id: str
    status: RegistrationStatus
    open: bool
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    evaluated_on: date


class EnrollmentPolicyUpdate(BaseSchema):
    """At least one bound, each >= 1, min <= max."""

    min_enrollment: Optional[int] = Field(default=None, ge=1)
    max_enrollment: Optional[int] = Field(default=None, ge=1)

    @model_validator(mode="after")
    def check_bounds(self):
        if self.min_enrollment is None and self.max_enrollment is None:
            raise ValueError("at least one of min_enrollment or max_enrollment is required")
        if (
            self.min_enrollment is not None
            and self.max_enrollment is not None
            and self.min_enrollment > self.max_enrollment
        ):
            raise ValueError("min_enrollment must be less than or equal to max_enrollment")
        return self


class EnrollmentPolicyResponse(BaseSchema):
    program_id: str
    min_enrollment: Optional[int] = None
    max_enrollment: Optional[int] = None


class CapacityResponse(BaseSchema):
    program_id: str
    remaining_capacity: Union[int, str]


class ParticipantPolicyUpdate(BaseSchema):
    """Age in months, grades 1-13; every restriction optional."""

    min_age_months: Optional[int] = Field(default=None, ge=0)
    max_age_months: Optional[int] = Field(default=None, ge=0)
    allowed_genders: List[Gender] = Field(default_factory=list)
    min_grade: Optional[int] = Field(default=None, ge=1, le=13)
    max_grade: Optional[int] = Field(default=None, ge=1, le=13)
    eligibility_at: EligibilityReference = EligibilityReference.REGISTRATION


class ParticipantPolicyResponse(BaseSchema):
    program_id: str
    min_age_months: Optional[int] = None
    max_age_months: Optional[int] = None
    allowed_genders: List[Gender] = Field(default_factory=list)
    min_grade: Optional[int] = None
    max_grade: Optional[int] = None
    eligibility_at: EligibilityReference


class EligibilityResponse(BaseSchema):
    program_id: str
    child_id: str
    eligible: bool
    reasons: List[str] = Field(default_factory=list)
