"""
Commission Calculator

Turns gross course values into commissionable value, expected commission
and earned commission.
"""

from decimal import Decimal

from ..exceptions import ValidationError
from ..models import Fees, Installment, InstallmentStatus
from ..money import ZERO, quantize_money


class CommissionCalculator:
    """Calculates commission figures for a payment plan."""

    GST_RATE = Decimal("0.10")
    # Commissionable values that already include 10% GST are divided by this
    GST_DIVISOR = 1 + GST_RATE

    EARNING_STATUSES = (InstallmentStatus.PAID, InstallmentStatus.PARTIAL)

    def commissionable_value(self, total_course_value: Decimal, fees: Fees) -> Decimal:
        """
        Commissionable Value = Total Course Value - Materials - Admin - Other

        Example:
            $10,000 - $500 - $300 - $200 = $9,000
        """
        value = quantize_money(total_course_value - fees.total)
        if value < 0:
            raise ValidationError(
                f"fees ({fees.total}) exceed total course value ({total_course_value})",
                field="total_course_value",
            )
        return value

    def commission_base(self, commissionable_value: Decimal, gst_inclusive: bool) -> Decimal:
        """Strip the GST component when the value includes it. Not rounded."""
        if gst_inclusive:
            return commissionable_value / self.GST_DIVISOR
        return commissionable_value

    def expected_commission(
        self, commissionable_value: Decimal, commission_rate: Decimal, gst_inclusive: bool
    ) -> Decimal:
        """
        Expected Commission = value × rate, GST stripped, rounded to the cent.

        Example (GST inclusive):
            $9,000 × 15% = $1,350 / 1.10 = $1,227.2727... → $1,227.27
        """
        self._check_rate(commission_rate)
        return quantize_money(self.commission_base(commissionable_value * commission_rate, gst_inclusive))

    def total_paid(self, resolved: list[tuple[Installment, InstallmentStatus]]) -> Decimal:
        """Sum of paid amounts over installments currently Paid or Partial."""
        total = ZERO
        for installment, status in resolved:
            if status in self.EARNING_STATUSES:
                total += installment.paid_amount or ZERO
        return total

    def earned_commission(
        self,
        commissionable_value: Decimal,
        commission_rate: Decimal,
        gst_inclusive: bool,
        total_paid: Decimal,
    ) -> Decimal:
        """
        Earned Commission = Expected × (Total Paid / Commissionable Value)

        Scales the unrounded expected commission and rounds once, so it agrees
        to the cent with earned_commission_from_payments. Overpayments never
        earn more than the expected commission.
        """
        return quantize_money(
            self.earned_commission_raw(commissionable_value, commission_rate, gst_inclusive, total_paid)
        )

    def earned_commission_raw(
        self,
        commissionable_value: Decimal,
        commission_rate: Decimal,
        gst_inclusive: bool,
        paid: Decimal,
    ) -> Decimal:
        """Unrounded earned commission on `paid`, for callers that sum before rounding."""
        if commissionable_value <= 0:
            return ZERO
        paid = min(paid, commissionable_value)
        # value × rate × paid stays exact for cent amounts, so dividing by value gives paid × rate
        scaled = commissionable_value * commission_rate * paid / commissionable_value
        return self.commission_base(scaled, gst_inclusive)

    def earned_commission_from_payments(
        self, total_paid: Decimal, commission_rate: Decimal, gst_inclusive: bool,
        commissionable_value: Decimal,
    ) -> Decimal:
        """Equivalent formulation: paid amounts × rate, GST stripped."""
        paid = min(total_paid, commissionable_value)
        return quantize_money(self.commission_base(paid * commission_rate, gst_inclusive))

    def gst_on_commission(self, commission: Decimal, gst_inclusive: bool) -> Decimal:
        """
        GST component attached to a commission amount. Unrounded.

        GST-inclusive plans carry it inside the commission
        (commission / 1.10 × 10%); exclusive plans add it on top (commission × 10%).
        """
        if gst_inclusive:
            return commission / self.GST_DIVISOR * self.GST_RATE
        return commission * self.GST_RATE

    @staticmethod
    def _check_rate(commission_rate: Decimal) -> None:
        if not (0 <= commission_rate <= 1):
            raise ValidationError(
                f"must be between 0 and 1, got: {commission_rate}", field="commission_rate"
            )
