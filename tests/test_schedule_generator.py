"""
Unit Tests for the Installment Schedule Generator

Tests verify exact reconciliation, remainder placement, due-date stepping and
every rejected input.
"""

from datetime import date
from decimal import Decimal

import pytest

from plan_engine.calculators.schedule import ScheduleGenerator
from plan_engine.exceptions import InvalidAmountError, ValidationError
from plan_engine.models import (
    Fees,
    Frequency,
    InitialPayment,
    InstallmentStatus,
    PlanParameters,
)


def make_params(**overrides) -> PlanParameters:
    """Monthly plan used across tests; override any field by keyword."""
    values = dict(
        total_course_value=Decimal('10000'),
        fees=Fees(materials=Decimal('500'), admin=Decimal('300'), other=Decimal('200')),
        commission_rate=Decimal('0.15'),
        gst_inclusive=True,
        initial_payment=InitialPayment(amount=Decimal('1000'), due_date=date(2025, 1, 15), paid=False),
        installment_count=11,
        frequency=Frequency.MONTHLY,
        first_due_date=date(2025, 2, 1),
        student_lead_time_days=7,
    )
    values.update(overrides)
    return PlanParameters(**values)


class TestAmounts:
    """Amounts reconcile to the cent with the remainder on the last installment."""

    @pytest.fixture
    def generator(self):
        return ScheduleGenerator()

    def test_base_and_remainder(self, generator):
        """$8,000 / 11 = $727.27 base; installment 11 gets $727.30."""
        installments = generator.generate(make_params()).installments
        regular = [i for i in installments if not i.is_initial_payment]

        assert [i.amount for i in regular[:-1]] == [Decimal('727.27')] * 10
        assert regular[-1].amount == Decimal('727.30')

    def test_sum_equals_commissionable_value(self, generator):
        result = generator.generate(make_params())
        assert sum(i.amount for i in result.installments) == Decimal('9000.00')
        assert result.summary.commissionable_value == Decimal('9000.00')

    def test_even_split_has_no_remainder(self, generator):
        params = make_params(initial_payment=None, fees=Fees(), installment_count=4)
        installments = generator.generate(params).installments
        assert [i.amount for i in installments] == [Decimal('2500.00')] * 4

    def test_single_installment_takes_everything(self, generator):
        params = make_params(initial_payment=None, installment_count=1)
        installments = generator.generate(params).installments
        assert len(installments) == 1
        assert installments[0].amount == Decimal('9000.00')

    @pytest.mark.parametrize("count", [1, 2, 3, 7, 11, 12, 97, 365, 999, 1000])
    @pytest.mark.parametrize("total", ['10000', '12345.67', '99999.99', '1.99'])
    def test_exact_reconciliation(self, generator, count, total):
        params = make_params(
            total_course_value=Decimal(total), fees=Fees(), initial_payment=None, installment_count=count
        )
        result = generator.generate(params)
        amounts = [i.amount for i in result.installments]

        assert len(amounts) == count
        assert sum(amounts) == Decimal(total)
        # Only the last installment may differ from the floored base
        base = result.summary.amount_per_installment
        assert all(a == base for a in amounts[:-1])
        assert Decimal('0') <= amounts[-1] - base < Decimal(count) / 100

    def test_split_cents(self):
        assert ScheduleGenerator.split_cents(100, 3) == (33, 34)
        assert ScheduleGenerator.split_cents(1000000, 3) == (333333, 333334)
        assert ScheduleGenerator.split_cents(1, 4) == (0, 1)


class TestNumberingAndFlags:

    @pytest.fixture
    def generator(self):
        return ScheduleGenerator()

    def test_numbers_contiguous_with_initial_payment(self, generator):
        installments = generator.generate(make_params()).installments
        assert [i.number for i in installments] == list(range(0, 12))

    def test_numbers_contiguous_without_initial_payment(self, generator):
        installments = generator.generate(make_params(initial_payment=None)).installments
        assert [i.number for i in installments] == list(range(1, 12))

    def test_every_installment_generates_commission(self, generator):
        installments = generator.generate(make_params()).installments
        assert all(i.generates_commission for i in installments)

    def test_regular_installments_start_as_draft(self, generator):
        installments = generator.generate(make_params()).installments
        assert all(i.status == InstallmentStatus.DRAFT for i in installments)
        assert all(i.paid_amount is None for i in installments)

    def test_unpaid_initial_payment_is_draft(self, generator):
        initial = generator.generate(make_params()).installments[0]
        assert initial.is_initial_payment
        assert initial.amount == Decimal('1000.00')
        assert initial.status == InstallmentStatus.DRAFT

    def test_paid_initial_payment_records_the_payment(self, generator):
        params = make_params(
            initial_payment=InitialPayment(amount=Decimal('1000'), due_date=date(2025, 1, 15), paid=True)
        )
        initial = generator.generate(params).installments[0]
        assert initial.status == InstallmentStatus.PAID
        assert initial.paid_amount == Decimal('1000')
        assert initial.paid_date == date(2025, 1, 15)


class TestDueDates:

    @pytest.fixture
    def generator(self):
        return ScheduleGenerator()

    def test_monthly_dates_and_lead_time(self, generator):
        installments = generator.generate(make_params()).installments
        first, last = installments[1], installments[-1]

        assert first.institution_due_date == date(2025, 2, 1)
        assert first.student_due_date == date(2025, 1, 25)
        assert last.institution_due_date == date(2025, 12, 1)
        assert last.student_due_date == date(2025, 11, 24)

    def test_initial_payment_has_no_lead_time(self, generator):
        initial = generator.generate(make_params()).installments[0]
        assert initial.student_due_date == date(2025, 1, 15)
        assert initial.institution_due_date == date(2025, 1, 15)

    def test_month_end_clamping_does_not_drift(self, generator):
        params = make_params(
            initial_payment=None, installment_count=4, first_due_date=date(2025, 1, 31),
            student_lead_time_days=0,
        )
        dates = [i.institution_due_date for i in generator.generate(params).installments]
        assert dates == [date(2025, 1, 31), date(2025, 2, 28), date(2025, 3, 31), date(2025, 4, 30)]

    def test_quarterly_steps_three_months(self, generator):
        params = make_params(
            initial_payment=None, installment_count=3, frequency=Frequency.QUARTERLY,
            first_due_date=date(2025, 1, 31), student_lead_time_days=0,
        )
        dates = [i.institution_due_date for i in generator.generate(params).installments]
        assert dates == [date(2025, 1, 31), date(2025, 4, 30), date(2025, 7, 31)]

    def test_custom_frequency_leaves_dates_empty(self, generator):
        params = make_params(frequency=Frequency.CUSTOM, first_due_date=None)
        installments = generator.generate(params).installments
        regular = [i for i in installments if not i.is_initial_payment]

        assert all(i.student_due_date is None for i in regular)
        assert all(i.institution_due_date is None for i in regular)
        # Initial payment keeps its negotiated date
        assert installments[0].student_due_date == date(2025, 1, 15)


class TestSummary:

    @pytest.fixture
    def generator(self):
        return ScheduleGenerator()

    def test_summary_figures(self, generator):
        summary = generator.generate(make_params()).summary
        assert summary.total_course_value == Decimal('10000')
        assert summary.commissionable_value == Decimal('9000.00')
        assert summary.expected_commission == Decimal('1227.27')
        assert summary.initial_payment == Decimal('1000')
        assert summary.total_installments == 12
        assert summary.amount_per_installment == Decimal('727.27')

    def test_summary_without_gst(self, generator):
        summary = generator.generate(make_params(gst_inclusive=False)).summary
        assert summary.expected_commission == Decimal('1350.00')


class TestValidation:
    """Every invalid input raises and produces no installments."""

    @pytest.fixture
    def generator(self):
        return ScheduleGenerator()

    @pytest.mark.parametrize("overrides,field", [
        ({"commission_rate": Decimal('1.01')}, "commission_rate"),
        ({"commission_rate": Decimal('-0.1')}, "commission_rate"),
        ({"installment_count": 0}, "number_of_installments"),
        ({"installment_count": -3}, "number_of_installments"),
        ({"installment_count": 1001}, "number_of_installments"),
        ({"student_lead_time_days": -1}, "student_lead_time_days"),
        ({"frequency": "weekly"}, "payment_frequency"),
        ({"first_due_date": None}, "first_college_due_date"),
        ({"total_course_value": Decimal('0')}, "total_course_value"),
    ])
    def test_rejected_parameters(self, generator, overrides, field):
        with pytest.raises(ValidationError) as exc:
            generator.generate(make_params(**overrides))
        assert exc.value.field == field

    def test_negative_fee_rejected(self, generator):
        with pytest.raises(InvalidAmountError):
            generator.generate(make_params(fees=Fees(admin=Decimal('-1'))))

    def test_fees_exceeding_course_value(self, generator):
        with pytest.raises(ValidationError):
            generator.generate(make_params(fees=Fees(materials=Decimal('10001'))))

    def test_initial_payment_exceeding_commissionable_value(self, generator):
        params = make_params(
            initial_payment=InitialPayment(amount=Decimal('9000.01'), due_date=date(2025, 1, 15))
        )
        with pytest.raises(ValidationError) as exc:
            generator.generate(params)
        assert exc.value.field == 'initial_payment_amount'

    def test_initial_payment_equal_to_commissionable_value(self, generator):
        """Regular installments must carry a balance, so a 100% initial payment is rejected."""
        params = make_params(
            initial_payment=InitialPayment(amount=Decimal('9000'), due_date=date(2025, 1, 15))
        )
        with pytest.raises(ValidationError) as exc:
            generator.generate(params)
        assert exc.value.field == 'initial_payment_amount'
