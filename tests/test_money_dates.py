"""
Unit Tests for Money and Date Primitives
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from plan_engine.dates import add_months, add_quarters, parse_date, parse_optional_date, subtract_days
from plan_engine.exceptions import InvalidAmountError, InvalidDateError, ValidationError
from plan_engine.models import Installment, InstallmentStatus, parse_int
from plan_engine.money import from_cents, parse_money, quantize_money, to_cents


class TestQuantizeMoney:
    """Test the money rounding utility."""

    def test_rounds_down_below_half(self):
        assert quantize_money(Decimal("0.004")) == Decimal("0.00")

    def test_rounds_up_at_half(self):
        # ROUND_HALF_UP, not banker's rounding
        assert quantize_money(Decimal("0.005")) == Decimal("0.01")
        assert quantize_money(Decimal("2.345")) == Decimal("2.35")

    def test_preserves_exact_cents(self):
        assert quantize_money(Decimal("123.45")) == Decimal("123.45")


class TestCents:

    def test_to_cents(self):
        assert to_cents(Decimal("727.27")) == 72727

    def test_from_cents(self):
        assert from_cents(72730) == Decimal("727.30")

    def test_zero(self):
        assert from_cents(0) == Decimal("0.00")


class TestParseMoney:

    def test_float_goes_through_str(self):
        assert parse_money(0.1) == Decimal("0.10")

    def test_int_and_string(self):
        assert parse_money(10000) == Decimal("10000.00")
        assert parse_money("1234.565") == Decimal("1234.57")

    def test_negative_rejected(self):
        with pytest.raises(InvalidAmountError):
            parse_money(-1)

    def test_negative_allowed_when_asked(self):
        assert parse_money("-12.34", allow_negative=True) == Decimal("-12.34")

    def test_garbage_rejected(self):
        with pytest.raises(InvalidAmountError) as exc:
            parse_money("ten dollars", field="materials_cost")
        assert exc.value.field == "materials_cost"

    @pytest.mark.parametrize("value", [None, True, "NaN", "Infinity"])
    def test_non_numbers_rejected(self, value):
        with pytest.raises(InvalidAmountError):
            parse_money(value)

    @pytest.mark.parametrize("value", ["1e30", 10**30, "123456789012345678901234567"])
    def test_amounts_beyond_cent_precision_rejected(self, value):
        with pytest.raises(InvalidAmountError) as exc:
            parse_money(value, field="total_course_value")
        assert exc.value.field == "total_course_value"

    def test_large_amount_within_precision(self):
        assert parse_money("1e20") == Decimal("100000000000000000000.00")

    def test_amount_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            parse_money("abc")


class TestParseDate:

    def test_plain_iso_date(self):
        assert parse_date("2025-02-01") == date(2025, 2, 1)

    def test_iso_datetime_from_wizard(self):
        assert parse_date("2025-02-01T00:00:00.000Z") == date(2025, 2, 1)

    def test_date_and_datetime_objects(self):
        assert parse_date(date(2025, 2, 1)) == date(2025, 2, 1)
        assert parse_date(datetime(2025, 2, 1, 13, 30)) == date(2025, 2, 1)

    @pytest.mark.parametrize("value", ["not a date", "2025-02-30", "", None, 20250201])
    def test_invalid_dates(self, value):
        with pytest.raises(InvalidDateError):
            parse_date(value)

    def test_invalid_date_is_a_validation_error(self):
        with pytest.raises(ValidationError):
            parse_date("2025-13-01")

    def test_optional_date(self):
        assert parse_optional_date(None) is None
        assert parse_optional_date("") is None
        assert parse_optional_date("2025-03-10") == date(2025, 3, 10)


class TestCalendarStepping:
    """Month stepping clamps to the last valid day of the target month."""

    def test_add_one_month(self):
        assert add_months(date(2025, 2, 1), 1) == date(2025, 3, 1)

    def test_jan_31_to_feb_28(self):
        assert add_months(date(2025, 1, 31), 1) == date(2025, 2, 28)

    def test_jan_31_to_feb_29_in_leap_year(self):
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)

    def test_crosses_year_boundary(self):
        assert add_months(date(2025, 12, 15), 1) == date(2026, 1, 15)

    def test_add_quarter_clamps(self):
        assert add_quarters(date(2025, 11, 30), 1) == date(2026, 2, 28)

    def test_add_quarters(self):
        assert add_quarters(date(2025, 1, 31), 2) == date(2025, 7, 31)

    def test_subtract_days(self):
        assert subtract_days(date(2025, 2, 1), 7) == date(2025, 1, 25)
        assert subtract_days(date(2025, 3, 1), 1) == date(2025, 2, 28)

    def test_subtract_zero_days(self):
        assert subtract_days(date(2025, 3, 1), 0) == date(2025, 3, 1)


class TestParseInt:

    @pytest.mark.parametrize("value,expected", [(3, 3), (4.0, 4), ("12", 12), (" -5 ", -5)])
    def test_integers_accepted(self, value, expected):
        assert parse_int(value, field="number_of_installments") == expected

    @pytest.mark.parametrize("value", ["--5", "-", "1-2", "5.5", "", "١٢", True, None, 2.5])
    def test_non_integers_rejected(self, value):
        with pytest.raises(ValidationError) as exc:
            parse_int(value, field="number_of_installments")
        assert exc.value.field == "number_of_installments"


class TestInstallmentStatusParse:

    def test_known_status(self):
        assert InstallmentStatus.parse("Paid") == InstallmentStatus.PAID
        assert InstallmentStatus.parse(InstallmentStatus.DUE_SOON) == InstallmentStatus.DUE_SOON

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError) as exc:
            Installment.from_dict({"installment_number": 1, "amount": 100, "status": "settled"})
        assert exc.value.field == "status"
