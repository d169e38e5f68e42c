"""
Database enums mirroring schema enums.

Shared by the ORM models, the Pydantic schemas and the services so every
status and payment method is a closed set.
"""

import enum


class PaymentMethod(str, enum.Enum):
    """Supported booking payment methods."""
    CARD = "card"
    TRANSFER = "transfer"


class SubscriptionTier(str, enum.Enum):
    """Parent subscription tier."""
    EXPLORER = "explorer"
    ACTIVE = "active"


class Gender(str, enum.Enum):
    """Child gender as recorded by the parent."""
    MALE = "male"
    FEMALE = "female"
    DIVERSE = "diverse"
    NOT_SPECIFIED = "not_specified"


class EligibilityReference(str, enum.Enum):
    """Date on which a child's age is evaluated against a participant policy."""
    REGISTRATION = "registration"
    PROGRAM_START = "program_start"


class RegistrationStatus(str, enum.Enum):
    """Derived state of a program's registration window."""
    ALWAYS_OPEN = "always_open"
    UPCOMING = "upcoming"
    OPEN = "open"
    CLOSED = "closed"


class EnrollmentStatus(str, enum.Enum):
    """Enrollment lifecycle status."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class SessionStatus(str, enum.Enum):
    """Program session lifecycle status."""
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ParticipationStatus(str, enum.Enum):
    """Per-child attendance status within a session."""
    SCHEDULED = "scheduled"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    ABSENT = "absent"


class BehavioralNoteStatus(str, enum.Enum):
    """Review status of a provider's behavioral note."""
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    REJECTED = "rejected"


class ActorRole(str, enum.Enum):
    """Role of whoever performs a participation transition."""
    PROVIDER = "provider"
    SYSTEM = "system"
    PARENT = "parent"


# Enrollment statuses that occupy a program seat and count against quota
ACTIVE_ENROLLMENT_STATUSES = (EnrollmentStatus.PENDING, EnrollmentStatus.CONFIRMED)
