"""
Parent profile and child schemas.
"""

from datetime import date
from typing import Optional

from pydantic import Field

from klass_hero.models.base.enums import Gender, SubscriptionTier
from klass_hero.schemas.common.base import BaseDBSchema, BaseSchema

__all__ = [
    "ParentProfileCreate",
    "ParentProfileResponse",
    "ChildCreate",
    "ChildResponse",
]


class ParentProfileCreate(BaseSchema):
    display_name: Optional[str] = Field(default=None, max_length=200)
    subscription_tier: SubscriptionTier = SubscriptionTier.EXPLORER


class ParentProfileResponse(BaseDBSchema):
    identity_id: str
    display_name: Optional[str] = None
    subscription_tier: SubscriptionTier


class ChildCreate(BaseSchema):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    date_of_birth: Optional[date] = None
    allergies: Optional[str] = None
    support_needs: Optional[str] = None
    gender: Optional[Gender] = None
    school_grade: Optional[int] = Field(default=None, ge=1, le=13)


class ChildResponse(BaseDBSchema):
    parent_id: str
    first_name: str
    last_name: str
    date_of_birth: Optional[date] = None
    allergies: Optional[str] = None
    support_needs: Optional[str] = None
    gender: Optional[Gender] = None
    school_grade: Optional[int] = None
