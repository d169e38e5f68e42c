"""
Custom Exceptions for the Klass Hero enrollment service

Domain code raises these; the service layer converts them into
ServiceResult failures and the HTTP layer renders them.
"""

from typing import Any, Dict, List, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Standard error codes for the application"""
    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    NOT_FOUND = "NOT_FOUND"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFLICT = "CONFLICT"

    # Database errors
    DATABASE_ERROR = "DATABASE_ERROR"

    # Booking / enrollment errors
    INVALID_PAYMENT_METHOD = "INVALID_PAYMENT_METHOD"
    REGISTRATION_NOT_OPEN = "REGISTRATION_NOT_OPEN"
    NO_SPOTS_AVAILABLE = "NO_SPOTS_AVAILABLE"
    BOOKING_LIMIT_EXCEEDED = "BOOKING_LIMIT_EXCEEDED"
    CHILD_NOT_SELECTED = "CHILD_NOT_SELECTED"
    NO_PARENT_PROFILE = "NO_PARENT_PROFILE"
    DUPLICATE_ENROLLMENT = "DUPLICATE_ENROLLMENT"
    PARTICIPANT_INELIGIBLE = "PARTICIPANT_INELIGIBLE"

    # State machine errors
    INVALID_TRANSITION = "INVALID_TRANSITION"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"

    # Participation errors
    INVALID_RECORD_STATUS = "INVALID_RECORD_STATUS"


class BaseAppException(Exception):
    """
    Base exception class for all application exceptions.

    Provides consistent error handling across the application with
    structured error information.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message='{self.message}', error_code='{self.error_code.value}')"


# ========================================
# General Application Exceptions
# ========================================

class ValidationError(BaseAppException):
    """Exception raised when data validation fails"""

    def __init__(
        self,
        message: str = "Validation failed",
        field_errors: Optional[Dict[str, List[str]]] = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        status_code: int = 422
    ):
        details = {"field_errors": field_errors} if field_errors else {}
        super().__init__(message, error_code, details, status_code)


class ResourceNotFoundError(BaseAppException):
    """Exception raised when a requested resource is not found"""

    def __init__(
        self,
        resource_type: str = "Resource",
        resource_id: Optional[Any] = None,
    ):
        message = f"{resource_type} not found"
        if resource_id is not None:
            message += f" (ID: {resource_id})"
        details = {"resource_type": resource_type, "resource_id": str(resource_id) if resource_id is not None else None}
        super().__init__(message, ErrorCode.NOT_FOUND, details, 404)


# ========================================
# Repository Exceptions
# ========================================

class RepositoryError(BaseAppException):
    """Exception raised when a persistence operation fails"""

    def __init__(self, message: str = "Repository operation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.DATABASE_ERROR, details, 500)


class OptimisticLockError(RepositoryError):
    """Exception raised when a row changed underneath a pending update"""

    def __init__(self, entity_type: str, entity_id: Any):
        super().__init__(
            f"{entity_type} {entity_id} was modified concurrently",
            {"entity_type": entity_type, "entity_id": str(entity_id)},
        )
        self.error_code = ErrorCode.CONFLICT
        self.status_code = 409


# ========================================
# Booking & Enrollment Exceptions
# ========================================

class BookingError(BaseAppException):
    """Base class for expected, user-facing booking outcomes"""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 400
    ):
        super().__init__(message, error_code, details, status_code)


class InvalidPaymentMethodError(BookingError):
    """Payment method outside the supported set"""

    def __init__(self, payment_method: Any, allowed: List[str]):
        super().__init__(
            f"Payment method must be one of: {', '.join(allowed)}",
            ErrorCode.INVALID_PAYMENT_METHOD,
            {"payment_method": payment_method, "allowed": allowed},
            422,
        )


class RegistrationNotOpenError(BookingError):
    """Program is not accepting enrollments today"""

    def __init__(self, program_id: str, registration_status: str):
        super().__init__(
            "Registration is not currently open for this program",
            ErrorCode.REGISTRATION_NOT_OPEN,
            {"program_id": program_id, "registration_status": registration_status},
        )


class NoSpotsAvailableError(BookingError):
    """Program reached its maximum enrollment"""

    def __init__(self, program_id: str, max_enrollment: int):
        super().__init__(
            "This program is currently full",
            ErrorCode.NO_SPOTS_AVAILABLE,
            {"program_id": program_id, "max_enrollment": max_enrollment},
        )


class BookingLimitExceededError(BookingError):
    """Parent used up the monthly booking cap of their tier"""

    def __init__(self, parent_id: str, tier: str, cap: int):
        super().__init__(
            "Monthly booking limit reached for the current subscription tier",
            ErrorCode.BOOKING_LIMIT_EXCEEDED,
            {"parent_id": parent_id, "tier": tier, "cap": cap},
            403,
        )


class ChildNotSelectedError(BookingError):
    """Booking submitted without a child"""

    def __init__(self):
        super().__init__(
            "A child must be selected for enrollment",
            ErrorCode.CHILD_NOT_SELECTED,
            status_code=422,
        )


class NoParentProfileError(BookingError):
    """Identity has no parent profile"""

    def __init__(self, identity_id: str):
        super().__init__(
            "No parent profile exists for this identity",
            ErrorCode.NO_PARENT_PROFILE,
            {"identity_id": identity_id},
            404,
        )


class DuplicateEnrollmentError(BookingError):
    """Child already holds an active enrollment in the program"""

    def __init__(self, program_id: str, child_id: str):
        super().__init__(
            "Child already has an active enrollment in this program",
            ErrorCode.DUPLICATE_ENROLLMENT,
            {"program_id": program_id, "child_id": child_id},
            409,
        )


class ParticipantIneligibleError(BookingError):
    """Child does not meet the participant restrictions of the program"""

    def __init__(self, program_id: str, child_id: str, reasons: List[str]):
        super().__init__(
            "Child is not eligible for this program",
            ErrorCode.PARTICIPANT_INELIGIBLE,
            {"program_id": program_id, "child_id": child_id, "reasons": reasons},
            422,
        )


# ========================================
# State Machine Exceptions
# ========================================

class InvalidTransitionError(BaseAppException):
    """Requested status change is not allowed from the current status"""

    def __init__(self, entity_type: str, current_status: str, target_status: str):
        super().__init__(
            f"Cannot move {entity_type} from {current_status} to {target_status}",
            ErrorCode.INVALID_TRANSITION,
            {
                "entity_type": entity_type,
                "current_status": current_status,
                "target_status": target_status,
            },
            409,
        )


class TransitionNotPermittedError(BaseAppException):
    """Actor role may not perform the requested transition"""

    def __init__(self, action: str, role: str, allowed_roles: List[str]):
        super().__init__(
            f"Role {role} may not {action}",
            ErrorCode.INSUFFICIENT_PERMISSIONS,
            {"action": action, "role": role, "allowed_roles": allowed_roles},
            403,
        )


# ========================================
# Participation Exceptions
# ========================================

class InvalidRecordStatusError(BaseAppException):
    """Behavioral notes need a checked-in or checked-out participation record"""

    def __init__(self, record_id: str, status: str):
        super().__init__(
            "Behavioral notes can only be added after check-in",
            ErrorCode.INVALID_RECORD_STATUS,
            {"record_id": record_id, "status": status},
            409,
        )


class DuplicateBehavioralNoteError(BaseAppException):
    """Provider already wrote a note for this participation record"""

    def __init__(self, record_id: str, provider_id: str):
        super().__init__(
            "A behavioral note already exists for this participation record",
            ErrorCode.CONFLICT,
            {"record_id": record_id, "provider_id": provider_id},
            409,
        )
