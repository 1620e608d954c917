"""
Installment Status Resolver

Derives an installment's lifecycle status from its payment fields, its
student due date and a caller-supplied "now".
"""

from datetime import date, datetime

from ..dates import subtract_days
from ..models import Installment, InstallmentStatus
from ..validators import InputValidator


class StatusResolver:
    """Maps (amount, paid_amount, student_due_date, now) to a status."""

    DEFAULT_DUE_SOON_WINDOW_DAYS = 5

    def __init__(self, due_soon_window_days: int = DEFAULT_DUE_SOON_WINDOW_DAYS):
        InputValidator().validate_window(due_soon_window_days)
        self.due_soon_window_days = due_soon_window_days

    def resolve(self, installment: Installment, now: date) -> InstallmentStatus:
        """
        Resolve the live status.

        Order of evaluation:
        1. paid_amount >= amount         → PAID
        2. 0 < paid_amount < amount      → PARTIAL
        3. no student due date (custom)  → DRAFT
        4. now after due date            → OVERDUE
        5. within the due-soon window    → DUE_SOON
        6. otherwise                     → PENDING
        """
        if isinstance(now, datetime):
            now = now.date()

        payment_status = self.payment_status(installment)
        if payment_status is not None:
            return payment_status

        due = installment.student_due_date
        if due is None:
            return InstallmentStatus.DRAFT

        if now > due:
            return InstallmentStatus.OVERDUE

        if now >= subtract_days(due, self.due_soon_window_days):
            return InstallmentStatus.DUE_SOON

        return InstallmentStatus.PENDING

    @staticmethod
    def payment_status(installment: Installment) -> InstallmentStatus | None:
        """PAID or PARTIAL when a payment is recorded, else None. Independent of time."""
        paid = installment.paid_amount
        if paid is None:
            return None
        if paid >= installment.amount:
            return InstallmentStatus.PAID
        if paid > 0:
            return InstallmentStatus.PARTIAL
        return None

    def resolve_all(
        self, installments: list[Installment], now: date
    ) -> list[tuple[Installment, InstallmentStatus]]:
        """Resolve a snapshot of installments, preserving order."""
        return [(installment, self.resolve(installment, now)) for installment in installments]
