"""
Plan Processor - Main Orchestrator

Coordinates schedule generation, payment recording and the read-side
aggregations, and exposes the engine's function surface.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict

from .calculators import (
    AgencyAggregator,
    CommissionCalculator,
    PaymentRecorder,
    PlanAggregator,
    ScheduleGenerator,
    StatusResolver,
)
from .dates import parse_date
from .models import (
    AgencySummary,
    CashFlowBucket,
    CashFlowGrouping,
    CollectionRate,
    CollegeCommission,
    Fees,
    Installment,
    InstallmentStatus,
    MonthlyCommission,
    Plan,
    PlanParameters,
    PlanSummary,
    ScheduleResult,
    StatusBucket,
    parse_int,
    parse_rate,
)
from .money import parse_money
from .output import OutputBuilder

logger = logging.getLogger(__name__)


class PlanProcessor:
    """
    Main orchestrator for payment plan processing.

    Write side:
    1. Validate parameters
    2. Calculate commissionable value and expected commission
    3. Split amounts and assign due dates
    4. Record payments against installments

    Read side (always given an explicit as_of date):
    5. Resolve live installment statuses
    6. Summarize plan progress
    7. Summarize the agency dashboard
    """

    def __init__(self, due_soon_window_days: int = StatusResolver.DEFAULT_DUE_SOON_WINDOW_DAYS):
        self.commission_calculator = CommissionCalculator()
        self.status_resolver = StatusResolver(due_soon_window_days)
        self.schedule_generator = ScheduleGenerator(commission_calculator=self.commission_calculator)
        self.payment_recorder = PaymentRecorder(status_resolver=self.status_resolver)
        self.plan_aggregator = PlanAggregator(self.commission_calculator)
        self.agency_aggregator = AgencyAggregator(
            status_resolver=self.status_resolver, plan_aggregator=self.plan_aggregator
        )
        self.output_builder = OutputBuilder()

    # -------------------------------------------------------------------------
    # Typed API
    # -------------------------------------------------------------------------

    def generate(self, params: PlanParameters) -> ScheduleResult:
        result = self.schedule_generator.generate(params)
        logger.debug(
            "Generated %d installments (%s) for commissionable value %s",
            len(result.installments),
            params.frequency.value,
            result.summary.commissionable_value,
        )
        return result

    def record_payment(
        self, installment: Installment, paid_amount: Decimal, paid_date: date, now: date | None = None
    ) -> Installment:
        return self.payment_recorder.record(installment, paid_amount, paid_date, now)

    def resolve_status(self, installment: Installment, now: date) -> InstallmentStatus:
        return self.status_resolver.resolve(installment, now)

    def summarize_plan(
        self, installments: list[Installment], commission_rate: Decimal, gst_inclusive: bool
    ) -> PlanSummary:
        return self.plan_aggregator.summarize(installments, commission_rate, gst_inclusive)

    def summarize_agency(
        self,
        plans: list[Plan],
        as_of: date,
        days: int = AgencyAggregator.DEFAULT_PROJECTION_DAYS,
        top_n: int = AgencyAggregator.DEFAULT_TOP_COLLEGES,
    ) -> AgencySummary:
        return self.agency_aggregator.summarize(plans, as_of, days, top_n)

    def summarize_statuses(
        self, installments: list[Installment], as_of: date
    ) -> dict[InstallmentStatus, StatusBucket]:
        return self.agency_aggregator.status_breakdown(installments, as_of)

    def project_cash_flow(
        self,
        plans: list[Plan],
        as_of: date,
        days: int = AgencyAggregator.DEFAULT_PROJECTION_DAYS,
        group_by: CashFlowGrouping = CashFlowGrouping.WEEK,
    ) -> list[CashFlowBucket]:
        return self.agency_aggregator.cash_flow(plans, as_of, days, group_by)

    def collection_rate(self, plans: list[Plan], as_of: date) -> CollectionRate:
        return self.agency_aggregator.collection_rate(plans, as_of)

    def commission_by_college(self, plans: list[Plan]) -> list[CollegeCommission]:
        return self.agency_aggregator.commission_by_college(plans)

    def seasonal_commission(self, plans: list[Plan], as_of: date) -> list[MonthlyCommission]:
        return self.agency_aggregator.seasonal_commission(plans, as_of)

    # -------------------------------------------------------------------------
    # Dict API (used by the HTTP entry points)
    # -------------------------------------------------------------------------

    def generate_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Generate a schedule preview from the wizard payload."""
        params = PlanParameters.from_dict(data)
        return self.output_builder.build_schedule(self.generate(params))

    def record_payment_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        installment = Installment.from_dict(data.get("installment") or {})
        paid_date = parse_date(data.get("paid_date"), field="paid_date")
        now = parse_date(data["as_of"], field="as_of") if data.get("as_of") else None
        updated = self.record_payment(
            installment,
            parse_money(data.get("paid_amount"), field="paid_amount"),
            paid_date,
            now,
        )
        return {"installment": self.output_builder.build_installment(updated)}

    def plan_summary_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        as_of = parse_date(data.get("as_of"), field="as_of")
        plan = Plan.from_dict(data)
        summary = self.plan_aggregator.summarize_plan(plan)
        statuses = self.status_resolver.resolve_all(plan.installments, as_of)
        return self.output_builder.build_plan_summary(summary, statuses)

    def agency_summary_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        as_of = parse_date(data.get("as_of"), field="as_of")
        days = parse_int(data.get("days", AgencyAggregator.DEFAULT_PROJECTION_DAYS), field="days")
        top_n = parse_int(data.get("top_n", AgencyAggregator.DEFAULT_TOP_COLLEGES), field="top_n")
        group_by = CashFlowGrouping.parse(data.get("group_by", CashFlowGrouping.WEEK.value))
        plans = [Plan.from_dict(p) for p in data.get("plans", [])]

        summary = self.summarize_agency(plans, as_of, days, top_n)
        buckets = self.project_cash_flow(plans, as_of, days, group_by)
        statuses = self.summarize_statuses(
            [i for plan in plans for i in plan.installments], as_of
        )
        logger.debug("agency summary as of %s over %d plans", as_of, len(plans))
        return self.output_builder.build_agency_summary(
            summary,
            buckets,
            statuses,
            collection=self.collection_rate(plans, as_of),
            by_college=self.commission_by_college(plans),
            seasonal=self.seasonal_commission(plans, as_of),
        )


# =============================================================================
# FUNCTION SURFACE
# =============================================================================

_default_processor = PlanProcessor()


def calculate_commissionable_value(total_course_value, materials=0, admin=0, other=0) -> Decimal:
    fees = Fees(
        materials=parse_money(materials, field="materials_cost"),
        admin=parse_money(admin, field="admin_fees"),
        other=parse_money(other, field="other_fees"),
    )
    return _default_processor.commission_calculator.commissionable_value(
        parse_money(total_course_value, field="total_course_value"), fees
    )


def calculate_expected_commission(commissionable_value, commission_rate, gst_inclusive: bool) -> Decimal:
    return _default_processor.commission_calculator.expected_commission(
        parse_money(commissionable_value, field="commissionable_value"),
        parse_rate(commission_rate),
        gst_inclusive,
    )


def generate_installment_schedule(params: PlanParameters) -> list[Installment]:
    return _default_processor.generate(params).installments


def resolve_installment_status(
    installment: Installment,
    now: date,
    due_soon_window_days: int = StatusResolver.DEFAULT_DUE_SOON_WINDOW_DAYS,
) -> InstallmentStatus:
    return StatusResolver(due_soon_window_days).resolve(installment, now)


def record_payment(installment: Installment, paid_amount, paid_date, now: date | None = None) -> Installment:
    return _default_processor.record_payment(
        installment,
        parse_money(paid_amount, field="paid_amount", allow_negative=True),
        parse_date(paid_date, field="paid_date"),
        now,
    )


def aggregate_plan(installments: list[Installment], commission_rate, gst_inclusive: bool = False) -> PlanSummary:
    return _default_processor.summarize_plan(installments, parse_rate(commission_rate), gst_inclusive)


def aggregate_agency(
    plans: list[Plan],
    as_of: date,
    days: int = AgencyAggregator.DEFAULT_PROJECTION_DAYS,
    top_n: int = AgencyAggregator.DEFAULT_TOP_COLLEGES,
) -> AgencySummary:
    return _default_processor.summarize_agency(plans, as_of, days, top_n)
