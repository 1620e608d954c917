"""
Input Validation for the Payment Plan Engine

Validates plan parameters and payment records before any calculation runs.
Raises ValidationError (a ValueError) with the offending field for any
constraint violation.
"""

from datetime import date
from decimal import Decimal

from .exceptions import InvalidAmountError, ValidationError
from .models import Frequency, Installment, PlanParameters


class InputValidator:
    """Validates engine input according to business rules."""

    MAX_INSTALLMENTS = 1000
    MAX_OVERPAYMENT_RATIO = Decimal("1.10")
    MAX_PROJECTION_DAYS = 365

    def validate_plan(self, params: PlanParameters) -> None:
        """
        Run all plan-level validations. Raises ValidationError if any check fails.
        """
        self._validate_amounts(params)
        self._validate_rate(params.commission_rate)
        self._validate_cadence(params)
        self._validate_initial_payment(params)

    def _validate_amounts(self, params: PlanParameters) -> None:
        if params.total_course_value <= 0:
            raise ValidationError(
                f"must be positive, got: {params.total_course_value}", field="total_course_value"
            )

        for name, value in (
            ("materials_cost", params.fees.materials),
            ("admin_fees", params.fees.admin),
            ("other_fees", params.fees.other),
        ):
            if value < 0:
                raise InvalidAmountError(f"cannot be negative, got: {value}", field=name)

    def _validate_rate(self, rate: Decimal) -> None:
        if not (0 <= rate <= 1):
            raise ValidationError(f"must be between 0 and 1, got: {rate}", field="commission_rate")

    def _validate_cadence(self, params: PlanParameters) -> None:
        if not isinstance(params.frequency, Frequency):
            raise ValidationError(
                f"must be 'monthly', 'quarterly', or 'custom', got: {params.frequency!r}",
                field="payment_frequency",
            )

        if params.installment_count <= 0:
            raise ValidationError(
                f"must be positive, got: {params.installment_count}",
                field="number_of_installments",
            )
        if params.installment_count > self.MAX_INSTALLMENTS:
            raise ValidationError(
                f"cannot exceed {self.MAX_INSTALLMENTS}, got: {params.installment_count}",
                field="number_of_installments",
            )

        if params.student_lead_time_days < 0:
            raise ValidationError(
                f"must be non-negative, got: {params.student_lead_time_days}",
                field="student_lead_time_days",
            )

        if params.frequency != Frequency.CUSTOM and params.first_due_date is None:
            raise ValidationError(
                "is required unless payment_frequency is 'custom'",
                field="first_college_due_date",
            )

    def _validate_initial_payment(self, params: PlanParameters) -> None:
        initial = params.initial_payment
        if initial is None:
            return

        if initial.amount < 0:
            raise InvalidAmountError(
                f"cannot be negative, got: {initial.amount}", field="initial_payment_amount"
            )
        if initial.due_date is None:
            raise ValidationError(
                "is required when an initial payment is set", field="initial_payment_due_date"
            )

    def validate_payment(self, installment: Installment, paid_amount: Decimal, paid_date: date) -> None:
        """Validate a payment about to be recorded against an installment."""
        if paid_amount < 0:
            raise InvalidAmountError(f"cannot be negative, got: {paid_amount}", field="paid_amount")
        if paid_amount == 0:
            raise ValidationError("must be positive", field="paid_amount")

        max_allowed = installment.amount * self.MAX_OVERPAYMENT_RATIO
        if paid_amount > max_allowed:
            raise ValidationError(
                f"cannot exceed {max_allowed:.2f} (110% of installment amount)",
                field="paid_amount",
            )

        if paid_date is None:
            raise ValidationError("is required", field="paid_date")

    def validate_projection(self, days: int) -> None:
        if not (1 <= days <= self.MAX_PROJECTION_DAYS):
            raise ValidationError(
                f"must be between 1 and {self.MAX_PROJECTION_DAYS}, got: {days}", field="days"
            )

    def validate_window(self, due_soon_window_days: int) -> None:
        if due_soon_window_days < 0:
            raise ValidationError(
                f"must be non-negative, got: {due_soon_window_days}",
                field="due_soon_window_days",
            )
