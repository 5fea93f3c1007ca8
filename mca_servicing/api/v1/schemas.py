"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import date
from typing import Dict, List, Literal, Optional

from mca_servicing.domain.models import (
    DistributionPriority,
    PaybackFrequency,
    PaybackPlanStatus,
    PaybackStatus,
    PaymentMethod,
)
from mca_servicing.domain.schedule import MAX_PAYBACK_COUNT

AchProcessor = Literal["ACHWorks", "Actum", "Manual", "Other"]


def _upper(value):
    return value.upper() if isinstance(value, str) else value


class ScheduleRequest(BaseModel):
    """Request body for POST /v1/payback-plans/schedule"""

    start_date: Optional[date] = None
    frequency: Optional[str] = Field(None, description="DAILY, WEEKLY or MONTHLY")
    payday_list: List[int] = Field(default_factory=list, description="Weekday indices (0=Sunday) or days of month")
    payback_count: int = Field(0, ge=0, le=MAX_PAYBACK_COUNT)
    as_of: Optional[date] = Field(None, description="Reference date for the next payback (default: today)")


class ScheduleResponse(BaseModel):
    """Response for POST /v1/payback-plans/schedule"""

    next_payback_date: str
    scheduled_end_date: str
    term_length: Optional[float] = None


class FundingCreateRequest(BaseModel):
    """Request body for POST /v1/fundings"""

    name: str = Field(..., min_length=1)
    merchant: str = Field(..., min_length=1)
    payback_amount_cents: int = Field(..., gt=0, description="Purchased receivables in cents")
    residual_fee_amount_cents: int = Field(0, ge=0)


class FundingResponse(BaseModel):
    funding_id: str
    name: str
    merchant: str
    payback_amount_cents: int
    residual_fee_amount_cents: int
    remaining_payback_amount_cents: int
    remaining_fee_amount_cents: int
    created_at: str


class PaybackPlanCreateRequest(BaseModel):
    """Request body for POST /v1/payback-plans"""

    model_config = ConfigDict(use_enum_values=True)

    funding_id: str
    merchant: Optional[str] = None
    payment_method: Optional[PaymentMethod] = None
    ach_processor: Optional[AchProcessor] = None
    total_amount_cents: int = Field(..., gt=0)
    payback_count: Optional[int] = Field(None, gt=0, le=MAX_PAYBACK_COUNT)
    start_date: date
    end_date: Optional[date] = None
    next_payback_date: Optional[date] = None
    frequency: PaybackFrequency
    payday_list: List[int] = Field(default_factory=list)
    avoid_holiday: bool = False
    distribution_priority: DistributionPriority = DistributionPriority.FUND
    note: Optional[str] = None
    status: PaybackPlanStatus = PaybackPlanStatus.ACTIVE

    @field_validator("frequency", mode="before")
    @classmethod
    def normalize_frequency(cls, value):
        return _upper(value)


class PaybackPlanUpdateRequest(BaseModel):
    """Request body for PATCH /v1/payback-plans/{plan_id}"""

    model_config = ConfigDict(use_enum_values=True)

    payment_method: Optional[PaymentMethod] = None
    ach_processor: Optional[AchProcessor] = None
    total_amount_cents: Optional[int] = Field(None, gt=0)
    payback_count: Optional[int] = Field(None, gt=0, le=MAX_PAYBACK_COUNT)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    next_payback_date: Optional[date] = None
    frequency: Optional[PaybackFrequency] = None
    payday_list: Optional[List[int]] = None
    avoid_holiday: Optional[bool] = None
    distribution_priority: Optional[DistributionPriority] = None
    note: Optional[str] = None
    status: Optional[PaybackPlanStatus] = None

    @field_validator("frequency", mode="before")
    @classmethod
    def normalize_frequency(cls, value):
        return _upper(value)


class PlanStatisticsSchema(BaseModel):
    counts: Dict[str, int]
    amounts_cents: Dict[str, int]
    paid_amount_cents: int
    pending_amount_cents: int
    pending_count: int
    remaining_balance_cents: int
    remaining_count: int
    succeed_rate: float
    next_payback_amount_cents: int
    term_length: Optional[float] = None
    scheduled_end_date: Optional[date] = None
    expected_end_date: Optional[date] = None


class PaybackPlanResponse(BaseModel):
    """Response for payback plan endpoints"""

    plan_id: str
    funding_id: str
    merchant: str
    payment_method: Optional[str] = None
    ach_processor: Optional[str] = None
    total_amount_cents: int
    payback_count: Optional[int] = None
    start_date: date
    end_date: Optional[date] = None
    next_payback_date: Optional[date] = None
    frequency: str
    payday_list: List[int]
    avoid_holiday: bool
    distribution_priority: str
    note: Optional[str] = None
    status: str
    created_at: str
    statistics: Optional[PlanStatisticsSchema] = None


class Pagination(BaseModel):
    page: int
    limit: int
    total_pages: int
    total_results: int


class PaybackPlanListResponse(BaseModel):
    """Response for GET /v1/payback-plans"""

    plans: List[PaybackPlanResponse]
    pagination: Pagination


class ScheduledPaybackSchema(BaseModel):
    """Single projected payback"""

    due_date: date
    amount_cents: int


class PaybackScheduleResponse(BaseModel):
    """Response for GET /v1/payback-plans/{plan_id}/schedule"""

    plan_id: str
    total_cents: int
    paybacks: List[ScheduledPaybackSchema]


class PaybackSchema(BaseModel):
    payback_id: str
    payback_plan_id: Optional[str] = None
    funding_id: str
    due_date: date
    submitted_date: Optional[date] = None
    payback_amount_cents: int
    funded_amount_cents: int
    fee_amount_cents: int
    payment_method: Optional[str] = None
    ach_processor: Optional[str] = None
    status: str
    note: Optional[str] = None
    reconciled: bool


class PaybackListResponse(BaseModel):
    """Response for GET /v1/paybacks"""

    payback_plan_id: str
    paybacks: List[PaybackSchema]


class PaybackUpdateRequest(BaseModel):
    """Request body for PATCH /v1/paybacks/{payback_id}"""

    model_config = ConfigDict(use_enum_values=True)

    status: Optional[PaybackStatus] = None
    reconciled: Optional[bool] = None
    note: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, value):
        return _upper(value)


class GeneratePaybacksResponse(BaseModel):
    """Response for POST /v1/payback-plans/{plan_id}/paybacks/generate"""

    plan_id: str
    plan_status: str
    next_payback_date: Optional[date] = None
    paybacks: List[PaybackSchema]
