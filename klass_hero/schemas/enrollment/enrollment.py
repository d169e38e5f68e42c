"""
Booking and enrollment schemas.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Union

from pydantic import Field

from klass_hero.models.base.enums import EnrollmentStatus, PaymentMethod
from klass_hero.schemas.common.base import BaseDBSchema, BaseSchema, Money

__all__ = [
    "FeeQuoteRequest",
    "FeeQuoteResponse",
    "BookingUsageResponse",
    "ChildSummary",
    "BookingStartResponse",
    "BookingCompleteRequest",
    "EnrollmentResponse",
    "EnrollmentCancelRequest",
]


class FeeQuoteRequest(BaseSchema):
    """Explicit fee schedule; payment_method is validated by the service."""

    weekly_fee: Decimal
    registration_fee: Decimal
    vat_rate: Decimal
    card_fee: Decimal
    payment_method: str
    weeks_count: int = 1


class FeeQuoteResponse(BaseSchema):
    subtotal: Money
    vat_amount: Money
    card_fee_amount: Money
    total: Money
    payment_method: PaymentMethod
    weeks_count: int


class BookingUsageResponse(BaseSchema):
    parent_id: Optional[str] = None
    tier: Optional[str] = None
    cap: Union[int, str]
    used: int
    remaining: Union[int, str]


class ChildSummary(BaseSchema):
    id: str
    first_name: str
    last_name: str
    allergies: Optional[str] = None
    support_needs: Optional[str] = None


class BookingStartResponse(BaseSchema):
    program_id: str
    program_title: str
    quote: FeeQuoteResponse
    usage: BookingUsageResponse
    remaining_capacity: Union[int, str]
    children: List[ChildSummary] = Field(default_factory=list)


class BookingCompleteRequest(BaseSchema):
    child_id: Optional[str] = None
    payment_method: str = PaymentMethod.CARD.value
    special_requirements: Optional[str] = Field(default=None, max_length=2000)


class EnrollmentResponse(BaseDBSchema):
    program_id: str
    child_id: str
    parent_id: str
    status: EnrollmentStatus
    payment_method: PaymentMethod
    subtotal: Money
    vat_amount: Money
    card_fee_amount: Money
    total_amount: Money
    special_requirements: Optional[str] = None
    enrolled_at: datetime
    confirmed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None


class EnrollmentCancelRequest(BaseSchema):
    reason: Optional[str] = Field(default=None, max_length=500)
