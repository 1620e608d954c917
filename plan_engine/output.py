"""
Output Builder

Renders engine results as JSON-ready dictionaries for the API layer.
"""

from .dates import iso
from .models import (
    AgencySummary,
    CashFlowBucket,
    CollectionRate,
    CollegeCommission,
    Installment,
    InstallmentStatus,
    MonthlyCommission,
    PlanSummary,
    ScheduleResult,
    StatusBucket,
)
from .money import fmt, to_money


class OutputBuilder:
    """Builds API responses from engine results."""

    def build_schedule(self, result: ScheduleResult) -> dict:
        """Schedule preview: installments, summary and the calculation breakdown."""
        return {
            "installments": [self.build_installment(i) for i in result.installments],
            "summary": self._build_schedule_summary(result),
            "calculations": self._build_calculations(result),
        }

    def build_installment(self, installment: Installment) -> dict:
        return {
            "installment_number": installment.number,
            "amount": to_money(installment.amount),
            "student_due_date": iso(installment.student_due_date),
            "college_due_date": iso(installment.institution_due_date),
            "is_initial_payment": installment.is_initial_payment,
            "generates_commission": installment.generates_commission,
            "paid_date": iso(installment.paid_date),
            "paid_amount": (
                to_money(installment.paid_amount) if installment.paid_amount is not None else None
            ),
            "status": installment.status.value,
        }

    def _build_schedule_summary(self, result: ScheduleResult) -> dict:
        summary = result.summary
        return {
            "total_course_value": to_money(summary.total_course_value),
            "commissionable_value": to_money(summary.commissionable_value),
            "expected_commission": to_money(summary.expected_commission),
            "initial_payment": to_money(summary.initial_payment),
            "total_installments": summary.total_installments,
            "amount_per_installment": to_money(summary.amount_per_installment),
        }

    def _build_calculations(self, result: ScheduleResult) -> dict:
        """Value and human-readable description for each derived figure."""
        params = result.parameters
        summary = result.summary
        fees = params.fees
        rate_pct = float(params.commission_rate) * 100

        regular = params.installment_count
        remaining = summary.commissionable_value - summary.initial_payment
        last_amount = result.installments[-1].amount

        if params.gst_inclusive:
            commission_desc = (
                f"({fmt(summary.commissionable_value)} / 1.10 GST) × {rate_pct:.2f}% "
                f"= {fmt(summary.expected_commission)}"
            )
        else:
            commission_desc = (
                f"{fmt(summary.commissionable_value)} × {rate_pct:.2f}% "
                f"= {fmt(summary.expected_commission)}"
            )

        return {
            "commissionable_value": {
                "value": to_money(summary.commissionable_value),
                "description": (
                    f"total ({fmt(params.total_course_value)}) - materials ({fmt(fees.materials)}) "
                    f"- admin ({fmt(fees.admin)}) - other ({fmt(fees.other)}) "
                    f"= {fmt(summary.commissionable_value)}"
                ),
            },
            "expected_commission": {
                "value": to_money(summary.expected_commission),
                "description": commission_desc,
            },
            "remaining_after_initial": {
                "value": to_money(remaining),
                "description": (
                    f"{fmt(summary.commissionable_value)} - initial payment "
                    f"({fmt(summary.initial_payment)}) = {fmt(remaining)}"
                    if params.initial_payment
                    else "No initial payment for this plan"
                ),
            },
            "final_installment_amount": {
                "value": to_money(last_amount),
                "description": (
                    f"{regular} × {fmt(summary.amount_per_installment)} base; installment {regular} "
                    f"absorbs the rounding remainder ({fmt(last_amount - summary.amount_per_installment)})"
                ),
            },
        }

    def build_plan_summary(
        self, summary: PlanSummary, statuses: list[tuple[Installment, InstallmentStatus]]
    ) -> dict:
        installments = []
        for installment, status in statuses:
            row = self.build_installment(installment)
            row["status"] = status.value
            installments.append(row)

        return {
            "summary": {
                "commissionable_value": to_money(summary.commissionable_value),
                "expected_commission": to_money(summary.expected_commission),
                "earned_commission": to_money(summary.earned_commission),
                "total_installments": summary.total_installments,
                "paid_installments": summary.paid_installments,
                "progress_percent": summary.progress_percent,
                "total_paid": to_money(summary.total_paid),
                "outstanding_amount": to_money(summary.outstanding_amount),
                "status": summary.status.value,
            },
            "installments": installments,
        }

    def build_agency_summary(
        self,
        summary: AgencySummary,
        buckets: list[CashFlowBucket],
        statuses: dict[InstallmentStatus, StatusBucket],
        collection: CollectionRate | None = None,
        by_college: list[CollegeCommission] | None = None,
        seasonal: list[MonthlyCommission] | None = None,
    ) -> dict:
        collection = collection or CollectionRate()
        return {
            "as_of": iso(summary.as_of),
            "overdue_total": to_money(summary.overdue_total),
            "overdue_count": summary.overdue_count,
            "due_soon_count": summary.due_soon_count,
            "outstanding_total": to_money(summary.outstanding_total),
            "earned_commission_total": to_money(summary.earned_commission_total),
            "projected_cash_flow": {
                "days": summary.projection_days,
                "value": to_money(summary.projected_cash_flow),
                "buckets": [self._build_bucket(b) for b in buckets],
            },
            "top_colleges": [
                {
                    "college": c.college,
                    "earned_commission": to_money(c.earned_commission),
                    "plan_count": c.plan_count,
                }
                for c in summary.top_colleges
            ],
            "payment_status_summary": {
                status.value: {"count": b.count, "total_amount": to_money(b.total_amount)}
                for status, b in statuses.items()
            },
            "collection_rate": {
                "current": float(collection.current_rate),
                "previous": float(collection.previous_rate),
                "trend": collection.trend.value,
            },
            "commission_by_college": [self._build_college_commission(c) for c in by_college or []],
            "seasonal_commission": [self._build_month(m) for m in seasonal or []],
        }

    def _build_bucket(self, bucket: CashFlowBucket) -> dict:
        return {
            "date_bucket": iso(bucket.date_bucket),
            "paid_amount": to_money(bucket.paid_amount),
            "expected_amount": to_money(bucket.expected_amount),
            "installment_count": bucket.installment_count,
        }

    def _build_college_commission(self, row: CollegeCommission) -> dict:
        return {
            "college": row.college,
            "branch": row.branch,
            "total_commissions": to_money(row.total_commissions),
            "total_gst": to_money(row.total_gst),
            "total_with_gst": to_money(row.total_with_gst),
            "total_expected_commission": to_money(row.expected_commission),
            "outstanding_commission": to_money(row.outstanding_commission),
            "payment_plan_count": row.plan_count,
        }

    def _build_month(self, month: MonthlyCommission) -> dict:
        yoy = month.year_over_year_change
        return {
            "month": month.month.strftime("%Y-%m"),
            "commission": to_money(month.commission),
            "installment_count": month.installment_count,
            "year_over_year_change": float(yoy) if yoy is not None else None,
            "is_peak": month.is_peak,
            "is_quiet": month.is_quiet,
        }
