"""
Domain Models for the Payment Plan Engine

These dataclasses provide type-safe representations of plans, installments
and the summaries derived from them. All monetary values use Decimal for
precision and all dates are `datetime.date`.
"""

import re
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum

from .dates import parse_date, parse_optional_date
from .exceptions import ValidationError
from .money import ZERO, parse_money

# =============================================================================
# ENUMS
# =============================================================================


class Frequency(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value) -> "Frequency":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValidationError(
                f"must be 'monthly', 'quarterly', or 'custom', got: {value!r}",
                field="payment_frequency",
            ) from None


class InstallmentStatus(str, Enum):
    DRAFT = "draft"
    PENDING = "pending"
    DUE_SOON = "due_soon"
    OVERDUE = "overdue"
    PAID = "paid"
    PARTIAL = "partial"
    # Stored by older plan rows; never produced by the status resolver
    COMPLETED = "completed"

    @classmethod
    def parse(cls, value) -> "InstallmentStatus":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            choices = ", ".join(f"'{s.value}'" for s in cls)
            raise ValidationError(f"must be one of {choices}, got: {value!r}", field="status") from None


class PlanStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class TrendDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    NEUTRAL = "neutral"

    @classmethod
    def between(cls, current, previous) -> "TrendDirection":
        if current > previous:
            return cls.UP
        if current < previous:
            return cls.DOWN
        return cls.NEUTRAL


class CashFlowGrouping(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"

    @classmethod
    def parse(cls, value) -> "CashFlowGrouping":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValidationError(
                f"must be 'day', 'week', or 'month', got: {value!r}", field="group_by"
            ) from None


# =============================================================================
# INPUT MODELS
# =============================================================================


@dataclass(frozen=True)
class Fees:
    """Non-commissionable fees deducted from the course value."""

    materials: Decimal = ZERO
    admin: Decimal = ZERO
    other: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return self.materials + self.admin + self.other

    @classmethod
    def from_dict(cls, data: dict) -> "Fees":
        return cls(
            materials=parse_money(data.get("materials_cost", 0), field="materials_cost"),
            admin=parse_money(data.get("admin_fees", 0), field="admin_fees"),
            other=parse_money(data.get("other_fees", 0), field="other_fees"),
        )


@dataclass(frozen=True)
class InitialPayment:
    """An up-front payment with its own negotiated due date."""

    amount: Decimal
    due_date: date
    paid: bool = False


@dataclass(frozen=True)
class PlanParameters:
    """Everything needed to generate one installment schedule."""

    total_course_value: Decimal
    commission_rate: Decimal
    installment_count: int
    frequency: Frequency
    first_due_date: date | None = None
    fees: Fees = field(default_factory=Fees)
    gst_inclusive: bool = False
    initial_payment: InitialPayment | None = None
    student_lead_time_days: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> "PlanParameters":
        """
        Build parameters from the wizard payload.

        An initial payment amount of 0 (or a missing one) means the plan has
        no initial payment.
        """
        initial = None
        initial_amount = parse_money(
            data.get("initial_payment_amount", 0), field="initial_payment_amount"
        )
        if initial_amount > 0:
            initial = InitialPayment(
                amount=initial_amount,
                due_date=parse_date(
                    data.get("initial_payment_due_date"), field="initial_payment_due_date"
                ),
                paid=bool(data.get("initial_payment_paid", False)),
            )

        frequency = Frequency.parse(data.get("payment_frequency"))
        first_due = data.get("first_college_due_date")
        if frequency == Frequency.CUSTOM:
            first_due_date = parse_optional_date(first_due, field="first_college_due_date")
        else:
            first_due_date = parse_date(first_due, field="first_college_due_date")

        return cls(
            total_course_value=parse_money(
                data.get("total_course_value"), field="total_course_value"
            ),
            commission_rate=parse_rate(data.get("commission_rate")),
            installment_count=parse_int(
                data.get("number_of_installments"), field="number_of_installments"
            ),
            frequency=frequency,
            first_due_date=first_due_date,
            fees=Fees.from_dict(data),
            gst_inclusive=bool(data.get("gst_inclusive", False)),
            initial_payment=initial,
            student_lead_time_days=parse_int(
                data.get("student_lead_time_days", 0), field="student_lead_time_days"
            ),
        )


# =============================================================================
# PERSISTED ENTITY
# =============================================================================


@dataclass(frozen=True)
class Installment:
    """
    One row of a payment schedule.

    `status` is the value last written by the caller. The live status is
    always recomputed by the StatusResolver from the payment fields and the
    due date.
    """

    number: int
    amount: Decimal
    student_due_date: date | None = None
    institution_due_date: date | None = None
    is_initial_payment: bool = False
    generates_commission: bool = True
    paid_date: date | None = None
    paid_amount: Decimal | None = None
    status: InstallmentStatus = InstallmentStatus.DRAFT

    @property
    def outstanding(self) -> Decimal:
        """Amount still owed; never negative."""
        paid = self.paid_amount or ZERO
        return max(ZERO, self.amount - paid)

    @classmethod
    def from_dict(cls, data: dict) -> "Installment":
        paid_amount = data.get("paid_amount")
        return cls(
            number=parse_int(data.get("installment_number"), field="installment_number"),
            amount=parse_money(data.get("amount"), field="amount"),
            student_due_date=parse_optional_date(
                data.get("student_due_date"), field="student_due_date"
            ),
            institution_due_date=parse_optional_date(
                data.get("college_due_date"), field="college_due_date"
            ),
            is_initial_payment=bool(data.get("is_initial_payment", False)),
            generates_commission=bool(data.get("generates_commission", True)),
            paid_date=parse_optional_date(data.get("paid_date"), field="paid_date"),
            paid_amount=(
                parse_money(paid_amount, field="paid_amount") if paid_amount is not None else None
            ),
            status=InstallmentStatus.parse(data.get("status", InstallmentStatus.DRAFT.value)),
        )


@dataclass(frozen=True)
class Plan:
    """A payment plan as seen by the agency-level aggregations."""

    plan_id: str
    college: str
    commission_rate: Decimal
    gst_inclusive: bool
    installments: list[Installment] = field(default_factory=list)
    branch: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "Plan":
        return cls(
            plan_id=str(data.get("id", "")),
            college=data.get("college_name") or "Unknown",
            commission_rate=parse_rate(data.get("commission_rate")),
            gst_inclusive=bool(data.get("gst_inclusive", False)),
            installments=[Installment.from_dict(i) for i in data.get("installments", [])],
            branch=data.get("branch_name") or None,
        )


# =============================================================================
# OUTPUT / RESULT MODELS
# =============================================================================


@dataclass
class ScheduleSummary:
    """Headline figures shown next to a generated schedule."""

    total_course_value: Decimal = ZERO
    commissionable_value: Decimal = ZERO
    expected_commission: Decimal = ZERO
    initial_payment: Decimal = ZERO
    total_installments: int = 0
    amount_per_installment: Decimal = ZERO


@dataclass
class ScheduleResult:
    """Generated installments plus their summary."""

    parameters: PlanParameters
    installments: list[Installment]
    summary: ScheduleSummary


@dataclass
class PlanSummary:
    """Plan-level progress derived from a snapshot of installments."""

    commissionable_value: Decimal = ZERO
    expected_commission: Decimal = ZERO
    earned_commission: Decimal = ZERO
    total_installments: int = 0
    paid_installments: int = 0
    progress_percent: int = 0
    total_paid: Decimal = ZERO
    outstanding_amount: Decimal = ZERO
    status: PlanStatus = PlanStatus.ACTIVE


@dataclass
class StatusBucket:
    count: int = 0
    total_amount: Decimal = ZERO


@dataclass
class CollegeRevenue:
    college: str
    earned_commission: Decimal = ZERO
    plan_count: int = 0


@dataclass
class CollegeCommission:
    """Commission for one college and branch, with the GST attached to it."""

    college: str
    branch: str | None = None
    total_commissions: Decimal = ZERO
    total_gst: Decimal = ZERO
    total_with_gst: Decimal = ZERO
    expected_commission: Decimal = ZERO
    outstanding_commission: Decimal = ZERO
    plan_count: int = 0


@dataclass
class CollectionRate:
    """Share of the amount due that was collected, this month against last."""

    current_rate: Decimal = ZERO
    previous_rate: Decimal = ZERO
    trend: TrendDirection = TrendDirection.NEUTRAL


@dataclass
class MonthlyCommission:
    month: date
    commission: Decimal = ZERO
    installment_count: int = 0
    year_over_year_change: Decimal | None = None
    is_peak: bool = False
    is_quiet: bool = False


@dataclass
class CashFlowBucket:
    date_bucket: date
    paid_amount: Decimal = ZERO
    expected_amount: Decimal = ZERO
    installment_count: int = 0


@dataclass
class AgencySummary:
    """Dashboard figures across every plan of an agency."""

    as_of: date
    overdue_total: Decimal = ZERO
    overdue_count: int = 0
    due_soon_count: int = 0
    outstanding_total: Decimal = ZERO
    earned_commission_total: Decimal = ZERO
    projection_days: int = 90
    projected_cash_flow: Decimal = ZERO
    top_colleges: list[CollegeRevenue] = field(default_factory=list)


# =============================================================================
# PARSING HELPERS
# =============================================================================


def parse_rate(value) -> Decimal:
    """Commission rates keep their full precision; they are not money."""
    if value is None or isinstance(value, bool):
        raise ValidationError(f"expected a number, got: {value!r}", field="commission_rate")
    try:
        rate = Decimal(str(value))
    except ArithmeticError:
        raise ValidationError(f"not a valid rate: {value!r}", field="commission_rate") from None
    if not rate.is_finite():
        raise ValidationError(f"not a valid rate: {value!r}", field="commission_rate")
    return rate


def parse_int(value, field: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"must be an integer, got: {value!r}", field=field)
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and re.fullmatch(r"-?[0-9]+", value.strip()):
        return int(value.strip())
    raise ValidationError(f"must be an integer, got: {value!r}", field=field)
