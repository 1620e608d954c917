"""
Payment Recorder

Applies a recorded payment to an installment and returns the updated row.
"""

from dataclasses import replace
from datetime import date
from decimal import Decimal

from ..models import Installment
from ..validators import InputValidator
from .status import StatusResolver


class PaymentRecorder:
    """Records payments against installments."""

    def __init__(
        self,
        validator: InputValidator | None = None,
        status_resolver: StatusResolver | None = None,
    ):
        self.validator = validator or InputValidator()
        self.status_resolver = status_resolver or StatusResolver()

    def record(
        self, installment: Installment, paid_amount: Decimal, paid_date: date, now: date | None = None
    ) -> Installment:
        """
        Return a copy of the installment with the payment applied.

        The recorded amount replaces any earlier paid_amount (the caller sends
        the cumulative amount paid). Up to 110% of the installment amount is
        accepted to absorb bank fees and rounding on the student's side.
        """
        self.validator.validate_payment(installment, paid_amount, paid_date)

        updated = replace(installment, paid_amount=paid_amount, paid_date=paid_date)
        return replace(updated, status=self.status_resolver.resolve(updated, now or paid_date))
