from decimal import Decimal

import pytest

from klass_hero.core.exceptions import ErrorCode, InvalidPaymentMethodError, ValidationError
from klass_hero.models.base.enums import PaymentMethod
from klass_hero.services.enrollment.fee_calculation_service import (
    FeeCalculationService,
    FeeSchedule,
    calculate_fees,
    parse_payment_method,
)


def _schedule(payment_method="card", **overrides):
    values = dict(
        weekly_fee=Decimal("45.00"),
        registration_fee=Decimal("25.00"),
        vat_rate=Decimal("0.19"),
        card_fee=Decimal("2.50"),
        payment_method=payment_method,
    )
    values.update(overrides)
    return FeeSchedule(**values)


def test_card_quote_breakdown():
    quote = calculate_fees(_schedule("card"))

    assert quote.subtotal == Decimal("70.00")
    assert quote.vat_amount == Decimal("13.30")
    assert quote.card_fee_amount == Decimal("2.50")
    assert quote.total == Decimal("85.80")
    assert quote.payment_method is PaymentMethod.CARD


def test_transfer_has_no_card_fee():
    quote = calculate_fees(_schedule("transfer"))

    assert quote.card_fee_amount == Decimal("0.00")
    assert quote.total == Decimal("83.30")


def test_total_is_sum_of_rounded_parts():
    quote = calculate_fees(
        _schedule(weekly_fee="10.05", registration_fee="0", vat_rate="0.19", card_fee="0.015")
    )

    # 10.05 * 0.19 = 1.9095 rounds half up to 1.91; 0.015 rounds to 0.02
    assert quote.vat_amount == Decimal("1.91")
    assert quote.card_fee_amount == Decimal("0.02")
    assert quote.total == quote.subtotal + quote.vat_amount + quote.card_fee_amount
    assert quote.to_display() == {
        "subtotal": "10.05",
        "vat_amount": "1.91",
        "card_fee_amount": "0.02",
        "total": "11.98",
    }


def test_zero_fees_give_zero_total():
    quote = calculate_fees(_schedule(weekly_fee=0, registration_fee=0, card_fee=0))
    assert quote.total == Decimal("0.00")


def test_float_inputs_do_not_drift():
    quote = calculate_fees(_schedule(weekly_fee=0.1, registration_fee=0.2, vat_rate=0))
    assert quote.subtotal == Decimal("0.30")


def test_weeks_count_is_echoed_not_multiplied():
    quote = calculate_fees(_schedule(weeks_count=8))

    assert quote.weeks_count == 8
    assert quote.subtotal == Decimal("70.00")


@pytest.mark.parametrize("method", ["cash", "", None, 3])
def test_unknown_payment_method_rejected(method):
    with pytest.raises(InvalidPaymentMethodError) as exc_info:
        calculate_fees(_schedule(method))
    assert exc_info.value.error_code == ErrorCode.INVALID_PAYMENT_METHOD


def test_payment_method_is_case_insensitive():
    assert parse_payment_method(" Transfer ") is PaymentMethod.TRANSFER


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"weekly_fee": "-1"}, "weekly_fee"),
        ({"registration_fee": Decimal("-0.01")}, "registration_fee"),
        ({"card_fee": -2}, "card_fee"),
        ({"vat_rate": "1.5"}, "vat_rate"),
        ({"vat_rate": "-0.1"}, "vat_rate"),
        ({"weeks_count": 0}, "weeks_count"),
        ({"weekly_fee": "1e30"}, "weekly_fee"),
        ({"card_fee": Decimal("100000000.00")}, "card_fee"),
    ],
)
def test_invalid_schedule_rejected(overrides, field):
    with pytest.raises(ValidationError) as exc_info:
        calculate_fees(_schedule(**overrides))
    assert field in exc_info.value.details["field_errors"]


def test_non_numeric_amount_rejected():
    with pytest.raises(ValidationError):
        calculate_fees(_schedule(weekly_fee="abc"))


def test_calculate_quote_returns_typed_failure(db):
    result = FeeCalculationService(db).calculate_quote(45, 25, "0.19", "2.50", "paypal")

    assert not result.is_success
    assert result.error_code == ErrorCode.INVALID_PAYMENT_METHOD


def test_program_quote_uses_program_pricing(db, make_program):
    program = make_program(weekly_fee=Decimal("30.00"), registration_fee=Decimal("10.00"))

    result = FeeCalculationService(db).quote_for_program(program.id, "transfer")

    assert result.is_success
    assert result.data.subtotal == Decimal("40.00")
    assert result.data.vat_amount == Decimal("7.60")
    assert result.data.total == Decimal("47.60")


def test_program_quote_falls_back_to_defaults(db, make_program):
    program = make_program()

    result = FeeCalculationService(db).quote_for_program(program.id, "card")

    assert result.data.total == Decimal("85.80")


def test_program_quote_unknown_program(db):
    result = FeeCalculationService(db).quote_for_program("missing", "card")
    assert result.error_code == ErrorCode.NOT_FOUND


def test_oversized_amount_is_validation_failure(db):
    result = FeeCalculationService(db).calculate_quote("1e30", "25", "0.19", "2.50", "card")

    assert result.error_code == ErrorCode.VALIDATION_ERROR
    assert "weekly_fee" in result.error.details["field_errors"]


def test_largest_storable_amount_is_accepted():
    quote = calculate_fees(_schedule(weekly_fee="99999999.99", registration_fee="0", vat_rate="0"))
    assert quote.subtotal == Decimal("99999999.99")
