"""
PAYMENT PLAN INSTALLMENT & COMMISSION ENGINE
"""

from .exceptions import InvalidAmountError, InvalidDateError, PlanEngineError, ValidationError
from .models import (
    Fees,
    Frequency,
    InitialPayment,
    Installment,
    InstallmentStatus,
    Plan,
    PlanParameters,
    PlanStatus,
    PlanSummary,
)
from .processor import (
    PlanProcessor,
    aggregate_agency,
    aggregate_plan,
    calculate_commissionable_value,
    calculate_expected_commission,
    generate_installment_schedule,
    record_payment,
    resolve_installment_status,
)

__all__ = [
    'PlanProcessor',
    'PlanParameters',
    'Fees',
    'InitialPayment',
    'Frequency',
    'Installment',
    'InstallmentStatus',
    'Plan',
    'PlanStatus',
    'PlanSummary',
    'PlanEngineError',
    'ValidationError',
    'InvalidDateError',
    'InvalidAmountError',
    'calculate_commissionable_value',
    'calculate_expected_commission',
    'generate_installment_schedule',
    'resolve_installment_status',
    'record_payment',
    'aggregate_plan',
    'aggregate_agency',
]
