"""
Calculators Package

Provides all calculation components for payment plan processing.
"""

from .aggregation import AgencyAggregator, PlanAggregator
from .commission import CommissionCalculator
from .payment import PaymentRecorder
from .schedule import ScheduleGenerator
from .status import StatusResolver

__all__ = [
    "CommissionCalculator",
    "ScheduleGenerator",
    "StatusResolver",
    "PaymentRecorder",
    "PlanAggregator",
    "AgencyAggregator",
]
