"""Credit repayment schedules: interest accrual and capital repayment plans."""

from .data_models import FlowEntry, Installment, RateEntry, ScheduleConfig, Tick
from .engine import Schedule, build_schedule
from .errors import (
    FirstRepaymentExceedesSchedule,
    InstallmentDonoex,
    NegativePayment,
    NegativeRate,
    RepaymentPlannerError,
    StartIsLaterOrEqualToEnd,
    UnknownPeriodType,
    UnknownRepaymentStyle,
)
from .periods import Period, PeriodType

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "FlowEntry",
    "Installment",
    "RateEntry",
    "ScheduleConfig",
    "Tick",
    "Schedule",
    "build_schedule",
    "Period",
    "PeriodType",
    "RepaymentPlannerError",
    "NegativeRate",
    "NegativePayment",
    "StartIsLaterOrEqualToEnd",
    "FirstRepaymentExceedesSchedule",
    "UnknownPeriodType",
    "UnknownRepaymentStyle",
    "InstallmentDonoex",
]
