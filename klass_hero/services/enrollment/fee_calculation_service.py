"""
Fee Calculation Service

Turns a program's fee schedule and the chosen payment method into the
quote shown before booking and stored on the enrollment:

    subtotal        = weekly_fee + registration_fee
    vat_amount      = subtotal * vat_rate
    card_fee_amount = card_fee if paying by card else 0.00
    total           = subtotal + vat_amount + card_fee_amount

Every step is rounded half-up to cents, so the total is the exact sum of
its (already rounded) parts.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy.orm import Session

from klass_hero.config.settings import settings
from klass_hero.core.exceptions import (
    BaseAppException,
    InvalidPaymentMethodError,
    ValidationError,
)
from klass_hero.models.base.enums import PaymentMethod
from klass_hero.models.catalog.program import Program
from klass_hero.repositories.catalog.program_repository import ProgramRepository
from klass_hero.services.base import BaseService, ServiceResult
from klass_hero.utils.money import ZERO, format_money, round2, to_decimal


def parse_payment_method(value: Any) -> PaymentMethod:
    """Resolve a payment method or raise InvalidPaymentMethodError."""
    if isinstance(value, PaymentMethod):
        return value
    allowed = [method.value for method in PaymentMethod]
    if isinstance(value, str):
        try:
            return PaymentMethod(value.strip().lower())
        except ValueError:
            pass
    raise InvalidPaymentMethodError(value if isinstance(value, str) else repr(value), allowed)


@dataclass
class FeeSchedule:
    """Inputs of a fee quote."""

    weekly_fee: Any
    registration_fee: Any
    vat_rate: Any
    card_fee: Any
    payment_method: Any
    weeks_count: int = 1


@dataclass(frozen=True)
class FeeQuote:
    """Fee breakdown; every amount has exactly two fractional digits."""

    subtotal: Decimal
    vat_amount: Decimal
    card_fee_amount: Decimal
    total: Decimal
    payment_method: PaymentMethod
    weeks_count: int

    def to_display(self) -> Dict[str, str]:
        return {
            "subtotal": format_money(self.subtotal),
            "vat_amount": format_money(self.vat_amount),
            "card_fee_amount": format_money(self.card_fee_amount),
            "total": format_money(self.total),
        }


def calculate_fees(schedule: FeeSchedule) -> FeeQuote:
    """
    Compute the fee quote for a schedule.

    Raises:
        InvalidPaymentMethodError: payment method outside {card, transfer}
        ValidationError: negative amounts, VAT rate outside [0, 1] or a
            non-positive weeks count
    """
    payment_method = parse_payment_method(schedule.payment_method)

    weekly_fee = to_decimal(schedule.weekly_fee, "weekly_fee")
    registration_fee = to_decimal(schedule.registration_fee, "registration_fee")
    vat_rate = to_decimal(schedule.vat_rate, "vat_rate")
    card_fee = to_decimal(schedule.card_fee, "card_fee")

    field_errors = {}
    for name, amount in (
        ("weekly_fee", weekly_fee),
        ("registration_fee", registration_fee),
        ("card_fee", card_fee),
    ):
        if amount < 0:
            field_errors[name] = ["must not be negative"]
    if vat_rate < 0 or vat_rate > 1:
        field_errors["vat_rate"] = ["must be between 0 and 1"]
    if isinstance(schedule.weeks_count, bool) or not isinstance(schedule.weeks_count, int) or schedule.weeks_count < 1:
        field_errors["weeks_count"] = ["must be a positive integer"]
    if field_errors:
        raise ValidationError("Invalid fee schedule", field_errors=field_errors)

    subtotal = round2(weekly_fee + registration_fee)
    vat_amount = round2(subtotal * vat_rate)
    card_fee_amount = round2(card_fee) if payment_method == PaymentMethod.CARD else ZERO

    return FeeQuote(
        subtotal=subtotal,
        vat_amount=vat_amount,
        card_fee_amount=card_fee_amount,
        total=subtotal + vat_amount + card_fee_amount,
        payment_method=payment_method,
        weeks_count=schedule.weeks_count,
    )


class FeeCalculationService(BaseService[Program, ProgramRepository]):
    """
    Service for computing booking fee quotes.

    Programs without their own pricing use the configured defaults.
    """

    def __init__(self, db_session: Session):
        super().__init__(ProgramRepository(db_session), db_session)

    def default_schedule(self, payment_method: Any) -> FeeSchedule:
        return FeeSchedule(
            weekly_fee=settings.DEFAULT_WEEKLY_FEE,
            registration_fee=settings.DEFAULT_REGISTRATION_FEE,
            vat_rate=settings.DEFAULT_VAT_RATE,
            card_fee=settings.DEFAULT_CARD_FEE,
            payment_method=payment_method,
            weeks_count=settings.DEFAULT_WEEKS_COUNT,
        )

    def schedule_for_program(self, program: Program, payment_method: Any) -> FeeSchedule:
        schedule = self.default_schedule(payment_method)
        if program.weekly_fee is not None:
            schedule.weekly_fee = program.weekly_fee
        if program.registration_fee is not None:
            schedule.registration_fee = program.registration_fee
        if program.weeks_count is not None:
            schedule.weeks_count = program.weeks_count
        return schedule

    def calculate_quote(
        self,
        weekly_fee: Any,
        registration_fee: Any,
        vat_rate: Any,
        card_fee: Any,
        payment_method: Any,
        weeks_count: int = 1,
    ) -> ServiceResult[FeeQuote]:
        """Calculate a quote from explicit amounts."""
        try:
            quote = calculate_fees(
                FeeSchedule(
                    weekly_fee=weekly_fee,
                    registration_fee=registration_fee,
                    vat_rate=vat_rate,
                    card_fee=card_fee,
                    payment_method=payment_method,
                    weeks_count=weeks_count,
                )
            )
            return ServiceResult.success(quote, message="Fee quote calculated successfully")
        except BaseAppException as e:
            return self._handle_app_exception(e, "calculate quote")
        except Exception as e:
            return self._handle_exception(e, "calculate quote")

    def quote_for_program(
        self,
        program_id: str,
        payment_method: Any,
    ) -> ServiceResult[FeeQuote]:
        """Calculate the quote for booking a program."""
        try:
            program = self.repository.get_by_id(program_id)
            quote = calculate_fees(self.schedule_for_program(program, payment_method))

            self._logger.info(
                "Fee quote calculated",
                extra={
                    "program_id": program_id,
                    "payment_method": quote.payment_method.value,
                    "total_amount": str(quote.total),
                },
            )
            return ServiceResult.success(quote, message="Fee quote calculated successfully")
        except BaseAppException as e:
            return self._handle_app_exception(e, "calculate program quote", program_id)
        except Exception as e:
            return self._handle_exception(e, "calculate program quote", program_id)
