"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional


class PaybackFrequency(str, Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


class PaybackPlanStatus(str, Enum):
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    STOPPED = "STOPPED"


class PaybackStatus(str, Enum):
    SUBMITTED = "SUBMITTED"
    PROCESSING = "PROCESSING"
    SUCCEED = "SUCCEED"
    FAILED = "FAILED"
    BOUNCED = "BOUNCED"
    DISPUTED = "DISPUTED"


class DistributionPriority(str, Enum):
    FUND = "FUND"
    FEE = "FEE"
    BOTH = "BOTH"


class PaymentMethod(str, Enum):
    ACH = "ACH"
    WIRE = "WIRE"
    CHECK = "CHECK"
    OTHER = "OTHER"


@dataclass
class ScheduleResult:
    """Calculated dates for a payback plan form (ISO strings, "" when unknown)"""

    next_payback_date: str
    scheduled_end_date: str


@dataclass
class PaybackTerms:
    """The part of a payback plan that drives date arithmetic"""

    frequency: PaybackFrequency
    payday_list: List[int]
    avoid_holiday: bool = False


@dataclass
class ScheduledPayback:
    """Single projected payment in a payback plan"""

    due_date: date
    amount_cents: int


@dataclass
class FundingBalance:
    """Funding figures needed to split a payback between balance and fees"""

    payback_amount_cents: int
    residual_fee_amount_cents: int
    remaining_payback_amount_cents: int
    remaining_fee_amount_cents: int


@dataclass
class PlanStatistics:
    """Payback plan progress derived from its paybacks"""

    counts: dict = field(default_factory=dict)  # PaybackStatus -> count
    amounts_cents: dict = field(default_factory=dict)  # PaybackStatus -> cents
    paid_amount_cents: int = 0
    pending_amount_cents: int = 0
    pending_count: int = 0
    remaining_balance_cents: int = 0
    remaining_count: int = 0
    succeed_rate: float = 0.0
    next_payback_amount_cents: int = 0
    term_length: Optional[float] = None
    scheduled_end_date: Optional[date] = None
    expected_end_date: Optional[date] = None
