"""
Base model package.

Exports the declarative base, abstract model classes and shared enums.
"""

from klass_hero.models.base.base_model import (
    Base,
    BaseModel,
    TimestampModel,
    generate_uuid,
)
from klass_hero.models.base.enums import (
    ACTIVE_ENROLLMENT_STATUSES,
    ActorRole,
    EnrollmentStatus,
    ParticipationStatus,
    PaymentMethod,
    RegistrationStatus,
    SessionStatus,
    SubscriptionTier,
)

__all__ = [
    "Base",
    "BaseModel",
    "TimestampModel",
    "generate_uuid",
    "ACTIVE_ENROLLMENT_STATUSES",
    "ActorRole",
    "EnrollmentStatus",
    "ParticipationStatus",
    "PaymentMethod",
    "RegistrationStatus",
    "SessionStatus",
    "SubscriptionTier",
]
