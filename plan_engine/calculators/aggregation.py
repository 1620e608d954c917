"""
Plan and Agency Aggregators

Read-side projections over installment snapshots: plan progress, dashboard
totals, status breakdowns and cash-flow buckets. Everything is recomputed
from the installments passed in.
"""

from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal

from ..dates import add_days, add_months
from ..models import (
    AgencySummary,
    CashFlowBucket,
    CashFlowGrouping,
    CollectionRate,
    CollegeCommission,
    CollegeRevenue,
    Installment,
    InstallmentStatus,
    MonthlyCommission,
    Plan,
    PlanStatus,
    PlanSummary,
    StatusBucket,
    TrendDirection,
)
from ..money import ZERO, quantize_money
from ..validators import InputValidator
from .commission import CommissionCalculator
from .status import StatusResolver


class PlanAggregator:
    """Rolls one plan's installments up into a PlanSummary."""

    def __init__(self, commission_calculator: CommissionCalculator | None = None):
        self.commission_calculator = commission_calculator or CommissionCalculator()

    def summarize(
        self, installments: list[Installment], commission_rate: Decimal, gst_inclusive: bool
    ) -> PlanSummary:
        """
        Summarize a plan.

        - commissionable value is the sum of installment amounts
        - progress = round(total paid / commissionable × 100), capped at 100
        - the plan is COMPLETED once every installment is PAID
        """
        calc = self.commission_calculator
        resolved = [(i, StatusResolver.payment_status(i)) for i in installments]

        commissionable = quantize_money(sum((i.amount for i in installments), ZERO))
        expected = calc.expected_commission(commissionable, commission_rate, gst_inclusive)
        total_paid = calc.total_paid(resolved)
        paid_count = sum(1 for _, status in resolved if status == InstallmentStatus.PAID)

        all_paid = bool(installments) and paid_count == len(installments)

        return PlanSummary(
            commissionable_value=commissionable,
            expected_commission=expected,
            earned_commission=calc.earned_commission(
                commissionable, commission_rate, gst_inclusive, total_paid
            ),
            total_installments=len(installments),
            paid_installments=paid_count,
            progress_percent=self.progress_percent(total_paid, commissionable),
            total_paid=total_paid,
            outstanding_amount=sum((i.outstanding for i in installments), ZERO),
            status=PlanStatus.COMPLETED if all_paid else PlanStatus.ACTIVE,
        )

    def summarize_plan(self, plan: Plan) -> PlanSummary:
        return self.summarize(plan.installments, plan.commission_rate, plan.gst_inclusive)

    @staticmethod
    def progress_percent(total_paid: Decimal, commissionable_value: Decimal) -> int:
        if commissionable_value <= 0:
            return 0
        percent = (total_paid / commissionable_value * 100).quantize(
            Decimal("1"), rounding=ROUND_HALF_UP
        )
        return min(100, int(percent))


class AgencyAggregator:
    """Dashboard projections across all plans of an agency."""

    DEFAULT_PROJECTION_DAYS = 90
    DEFAULT_TOP_COLLEGES = 5

    def __init__(
        self,
        status_resolver: StatusResolver | None = None,
        plan_aggregator: PlanAggregator | None = None,
        validator: InputValidator | None = None,
    ):
        self.status_resolver = status_resolver or StatusResolver()
        self.plan_aggregator = plan_aggregator or PlanAggregator()
        self.validator = validator or InputValidator()

    def summarize(
        self,
        plans: list[Plan],
        as_of: date,
        days: int = DEFAULT_PROJECTION_DAYS,
        top_n: int = DEFAULT_TOP_COLLEGES,
    ) -> AgencySummary:
        """
        Build the agency dashboard summary as of a given date.

        - overdue_total: sum of amounts for OVERDUE installments
        - projected_cash_flow: outstanding amounts due in [as_of, as_of + days]
        - top_colleges: earned commission per college, highest first
        """
        self.validator.validate_projection(days)

        summary = AgencySummary(as_of=as_of, projection_days=days)
        horizon = add_days(as_of, days)

        for plan in plans:
            for installment, status in self.status_resolver.resolve_all(plan.installments, as_of):
                if status == InstallmentStatus.OVERDUE:
                    summary.overdue_total += installment.amount
                    summary.overdue_count += 1
                elif status == InstallmentStatus.DUE_SOON:
                    summary.due_soon_count += 1

                summary.outstanding_total += installment.outstanding

                due = installment.student_due_date
                if due is not None and as_of <= due <= horizon:
                    summary.projected_cash_flow += installment.outstanding

        summary.top_colleges = self.top_colleges(plans, top_n)
        summary.earned_commission_total = sum(
            (self.plan_aggregator.summarize_plan(p).earned_commission for p in plans), ZERO
        )
        return summary

    def top_colleges(self, plans: list[Plan], top_n: int = DEFAULT_TOP_COLLEGES) -> list[CollegeRevenue]:
        """Earned commission grouped by college, sorted descending (ties by name)."""
        by_college: dict[str, CollegeRevenue] = {}
        for plan in plans:
            revenue = by_college.setdefault(plan.college, CollegeRevenue(college=plan.college))
            revenue.earned_commission += self.plan_aggregator.summarize_plan(plan).earned_commission
            revenue.plan_count += 1

        ranked = sorted(by_college.values(), key=lambda r: (-r.earned_commission, r.college))
        return ranked[:max(0, top_n)]

    def commission_by_college(self, plans: list[Plan]) -> list[CollegeCommission]:
        """
        Earned commission and its GST, grouped by college and branch.

        - total_gst: 10% on top for exclusive plans, the 1/11 share for inclusive ones
        - total_with_gst = total_commissions + total_gst
        - outstanding_commission = expected - earned
        Rows are sorted by earned commission descending, then college and branch.
        """
        calc = self.plan_aggregator.commission_calculator
        groups: dict[tuple[str, str | None], CollegeCommission] = {}
        for plan in plans:
            plan_summary = self.plan_aggregator.summarize_plan(plan)
            row = groups.setdefault(
                (plan.college, plan.branch),
                CollegeCommission(college=plan.college, branch=plan.branch),
            )
            row.total_commissions += plan_summary.earned_commission
            row.expected_commission += plan_summary.expected_commission
            row.total_gst += calc.gst_on_commission(plan_summary.earned_commission, plan.gst_inclusive)
            row.plan_count += 1

        for row in groups.values():
            row.total_gst = quantize_money(row.total_gst)
            row.total_with_gst = row.total_commissions + row.total_gst
            row.outstanding_commission = row.expected_commission - row.total_commissions

        return sorted(
            groups.values(), key=lambda r: (-r.total_commissions, r.college, r.branch or "")
        )

    def collection_rate(self, plans: list[Plan], as_of: date) -> CollectionRate:
        """
        Percentage of the amount due that has been collected.

        The current period covers the month of as_of up to and including
        as_of; the previous period is the whole prior month. An installment
        counts toward the period its student due date falls in, and its
        collected amount is capped at the installment amount.
        """
        month_start = as_of.replace(day=1)
        previous_start = add_months(month_start, -1)

        current_rate = self._collected_percent(plans, month_start, as_of)
        previous_rate = self._collected_percent(plans, previous_start, month_start - timedelta(days=1))
        return CollectionRate(
            current_rate=current_rate,
            previous_rate=previous_rate,
            trend=TrendDirection.between(current_rate, previous_rate),
        )

    @staticmethod
    def _collected_percent(plans: list[Plan], start: date, end: date) -> Decimal:
        due_total = ZERO
        collected = ZERO
        for plan in plans:
            for installment in plan.installments:
                due = installment.student_due_date
                if due is None or not (start <= due <= end):
                    continue
                due_total += installment.amount
                collected += min(installment.paid_amount or ZERO, installment.amount)
        if due_total <= 0:
            return ZERO
        return quantize_money(collected / due_total * 100)

    def seasonal_commission(self, plans: list[Plan], as_of: date) -> list[MonthlyCommission]:
        """
        Commission earned per calendar month over the 12 months ending with
        the month of as_of, keyed by the month each payment was made.

        - is_peak marks the three highest months, is_quiet the three lowest;
          equal months keep calendar order
        - year_over_year_change compares with the same month a year earlier
          and is None when nothing was earned in that month
        """
        calc = self.plan_aggregator.commission_calculator
        earned: dict[date, Decimal] = {}
        counts: dict[date, int] = {}
        for plan in plans:
            commissionable = quantize_money(sum((i.amount for i in plan.installments), ZERO))
            for installment in plan.installments:
                if not installment.generates_commission or installment.paid_date is None:
                    continue
                if StatusResolver.payment_status(installment) not in calc.EARNING_STATUSES:
                    continue
                month = installment.paid_date.replace(day=1)
                earned[month] = earned.get(month, ZERO) + calc.earned_commission_raw(
                    commissionable, plan.commission_rate, plan.gst_inclusive, installment.paid_amount
                )
                counts[month] = counts.get(month, 0) + 1

        last_month = as_of.replace(day=1)
        months = []
        for offset in range(-11, 1):
            month = add_months(last_month, offset)
            commission = quantize_money(earned.get(month, ZERO))
            prior_month = add_months(month, -12)
            yoy = None
            if prior_month in counts:
                yoy = self._change_percent(commission, quantize_money(earned[prior_month]))
            months.append(MonthlyCommission(
                month=month,
                commission=commission,
                installment_count=counts.get(month, 0),
                year_over_year_change=yoy,
            ))

        ranked = sorted(months, key=lambda m: -m.commission)
        for entry in ranked[:3]:
            entry.is_peak = True
        for entry in ranked[-3:]:
            entry.is_quiet = True
        return months

    @staticmethod
    def _change_percent(current: Decimal, previous: Decimal) -> Decimal:
        if previous > 0:
            return quantize_money((current - previous) / previous * 100)
        return Decimal("100.00") if current > 0 else ZERO

    def status_breakdown(self, installments: list[Installment], as_of: date) -> dict[InstallmentStatus, StatusBucket]:
        """Count and total amount per live status."""
        breakdown = {
            status: StatusBucket()
            for status in InstallmentStatus
            if status != InstallmentStatus.COMPLETED
        }
        for installment, status in self.status_resolver.resolve_all(installments, as_of):
            bucket = breakdown[status]
            bucket.count += 1
            bucket.total_amount += installment.amount
        return breakdown

    def cash_flow(
        self,
        plans: list[Plan],
        as_of: date,
        days: int = DEFAULT_PROJECTION_DAYS,
        group_by: CashFlowGrouping = CashFlowGrouping.WEEK,
    ) -> list[CashFlowBucket]:
        """
        Installments due in [as_of, as_of + days], bucketed by day, ISO week
        (Monday start) or calendar month. Buckets are returned in date order.
        """
        self.validator.validate_projection(days)
        group_by = CashFlowGrouping.parse(group_by)
        horizon = add_days(as_of, days)

        buckets: dict[date, CashFlowBucket] = {}
        for plan in plans:
            for installment in plan.installments:
                due = installment.student_due_date
                if due is None or not (as_of <= due <= horizon):
                    continue
                key = self.bucket_start(due, group_by)
                bucket = buckets.setdefault(key, CashFlowBucket(date_bucket=key))
                bucket.paid_amount += installment.paid_amount or ZERO
                bucket.expected_amount += installment.outstanding
                bucket.installment_count += 1

        return [buckets[key] for key in sorted(buckets)]

    @staticmethod
    def bucket_start(day: date, group_by: CashFlowGrouping) -> date:
        if group_by == CashFlowGrouping.DAY:
            return day
        if group_by == CashFlowGrouping.WEEK:
            return day - timedelta(days=day.weekday())
        return day.replace(day=1)
