"""
Installment Schedule Generator

Splits a plan's commissionable value into an optional initial payment plus
N regular installments that reconcile to the cent, and assigns due dates
from the payment cadence.
"""

from datetime import date

from ..dates import add_months, add_quarters, subtract_days
from ..exceptions import ValidationError
from ..models import (
    Frequency,
    Installment,
    InstallmentStatus,
    PlanParameters,
    ScheduleResult,
    ScheduleSummary,
)
from ..money import ZERO, from_cents, to_cents
from ..validators import InputValidator
from .commission import CommissionCalculator


class ScheduleGenerator:
    """Generates a reconciled installment schedule from plan parameters."""

    def __init__(
        self,
        validator: InputValidator | None = None,
        commission_calculator: CommissionCalculator | None = None,
    ):
        self.validator = validator or InputValidator()
        self.commission_calculator = commission_calculator or CommissionCalculator()

    def generate(self, params: PlanParameters) -> ScheduleResult:
        """
        Generate the full schedule.

        Amounts:
        - base = floor(remaining / count) to the cent
        - every regular installment gets base, the last one gets base + remainder

        Example:
            $9,000 commissionable, $1,000 initial, 11 installments
            8,000.00 / 11 = 727.27 base, remainder 0.03
            → 10 × $727.27 + 1 × $727.30 + $1,000 initial = $9,000.00
        """
        self.validator.validate_plan(params)

        calc = self.commission_calculator
        commissionable = calc.commissionable_value(params.total_course_value, params.fees)
        expected = calc.expected_commission(
            commissionable, params.commission_rate, params.gst_inclusive
        )

        initial_amount = params.initial_payment.amount if params.initial_payment else ZERO
        remaining = commissionable - initial_amount
        if remaining < 0:
            raise ValidationError(
                "cannot exceed commissionable value", field="initial_payment_amount"
            )
        if remaining == 0:
            raise ValidationError(
                "must leave a balance for the regular installments", field="initial_payment_amount"
            )

        base_cents, last_cents = self.split_cents(to_cents(remaining), params.installment_count)
        due_dates = self.institution_due_dates(params)

        installments = []
        if params.initial_payment is not None:
            installments.append(self._initial_installment(params))

        for number in range(1, params.installment_count + 1):
            cents = last_cents if number == params.installment_count else base_cents
            institution_due = due_dates[number - 1]
            student_due = (
                subtract_days(institution_due, params.student_lead_time_days)
                if institution_due is not None
                else None
            )
            installments.append(
                Installment(
                    number=number,
                    amount=from_cents(cents),
                    student_due_date=student_due,
                    institution_due_date=institution_due,
                    is_initial_payment=False,
                    generates_commission=True,
                    status=InstallmentStatus.DRAFT,
                )
            )

        summary = ScheduleSummary(
            total_course_value=params.total_course_value,
            commissionable_value=commissionable,
            expected_commission=expected,
            initial_payment=initial_amount,
            total_installments=len(installments),
            amount_per_installment=from_cents(base_cents),
        )
        return ScheduleResult(parameters=params, installments=installments, summary=summary)

    @staticmethod
    def split_cents(total_cents: int, count: int) -> tuple[int, int]:
        """Return (base, last) so that base * (count - 1) + last == total."""
        base = total_cents // count
        remainder = total_cents - base * count
        return base, base + remainder

    def institution_due_dates(self, params: PlanParameters) -> list[date | None]:
        """Institution-facing due dates for installments 1..N (None for custom)."""
        count = params.installment_count
        if params.frequency == Frequency.CUSTOM:
            return [None] * count

        step = add_months if params.frequency == Frequency.MONTHLY else add_quarters
        # Always step from the first date so month-end clamping never accumulates
        return [step(params.first_due_date, i) for i in range(count)]

    def _initial_installment(self, params: PlanParameters) -> Installment:
        """
        Installment 0. Paid-at-creation initial payments carry their payment
        fields so the status resolver reports them as Paid.
        """
        initial = params.initial_payment
        if initial.paid:
            return Installment(
                number=0,
                amount=initial.amount,
                student_due_date=initial.due_date,
                institution_due_date=initial.due_date,
                is_initial_payment=True,
                generates_commission=True,
                paid_date=initial.due_date,
                paid_amount=initial.amount,
                status=InstallmentStatus.PAID,
            )
        return Installment(
            number=0,
            amount=initial.amount,
            student_due_date=initial.due_date,
            institution_due_date=initial.due_date,
            is_initial_payment=True,
            generates_commission=True,
            status=InstallmentStatus.DRAFT,
        )
