"""Payback plan endpoints - CRUD, projected schedule and payback generation"""

import math
import time
import logging
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from mca_servicing.api.dependencies import get_payment_webhook_client, get_request_id, parse_uuid
from mca_servicing.api.v1.paybacks import build_payback_schema
from mca_servicing.api.v1.schemas import (
    GeneratePaybacksResponse,
    Pagination,
    PaybackPlanCreateRequest,
    PaybackPlanListResponse,
    PaybackPlanResponse,
    PaybackPlanUpdateRequest,
    PaybackScheduleResponse,
    PlanStatisticsSchema,
    ScheduledPaybackSchema,
)
from mca_servicing.domain.exceptions import InvalidPaybackPlanError, PlanNotActiveError
from mca_servicing.domain.models import DistributionPriority, PaybackPlanStatus, PlanStatistics
from mca_servicing.domain.paybacks import (
    calculate_plan_statistics,
    calculate_scheduled_payback_date,
    generate_payback_list,
    split_payback_amount,
)
from mca_servicing.domain.plans import ensure_can_generate, prepare_new_plan, prepare_plan_update
from mca_servicing.infrastructure.clients.payments import PaymentWebhookClient
from mca_servicing.infrastructure.database.models import Payback, PaybackPlan
from mca_servicing.infrastructure.database.repositories import (
    FundingRepository,
    PaybackPlanRepository,
    PaybackRepository,
    to_terms,
)
from mca_servicing.infrastructure.database.session import get_db
from mca_servicing.infrastructure.observability.logging import log_paybacks_generated
from mca_servicing.infrastructure.observability.metrics import plan_stopped_counter, record_generated_payback

router = APIRouter()

# Columns that cannot be cleared through a PATCH
REQUIRED_PLAN_FIELDS = {
    "total_amount_cents",
    "start_date",
    "frequency",
    "payday_list",
    "avoid_holiday",
    "distribution_priority",
    "status",
}


def plan_statistics(plan: PaybackPlan, paybacks: List[Payback]) -> PlanStatistics:
    return calculate_plan_statistics(
        to_terms(plan),
        plan.total_amount_cents,
        plan.payback_count,
        plan.start_date,
        plan.next_payback_date,
        [(p.status, p.payback_amount_cents) for p in paybacks],
    )


def build_plan_response(plan: PaybackPlan, statistics: Optional[PlanStatistics] = None) -> PaybackPlanResponse:
    return PaybackPlanResponse(
        plan_id=str(plan.id),
        funding_id=str(plan.funding_id),
        merchant=plan.merchant,
        payment_method=plan.payment_method,
        ach_processor=plan.ach_processor,
        total_amount_cents=plan.total_amount_cents,
        payback_count=plan.payback_count,
        start_date=plan.start_date,
        end_date=plan.end_date,
        next_payback_date=plan.next_payback_date,
        frequency=plan.frequency,
        payday_list=plan.payday_list,
        avoid_holiday=plan.avoid_holiday,
        distribution_priority=plan.distribution_priority,
        note=plan.note,
        status=plan.status,
        created_at=plan.created_at.isoformat(),
        statistics=PlanStatisticsSchema(**vars(statistics)) if statistics else None,
    )


def load_plan(plan_id: str, db: Session) -> PaybackPlan:
    plan = PaybackPlanRepository(db).get_plan_by_id(parse_uuid(plan_id, "payback plan ID"))
    if not plan:
        raise HTTPException(status_code=404, detail="Payback plan not found")
    return plan


@router.post("/payback-plans", response_model=PaybackPlanResponse, status_code=201)
def create_payback_plan(
    request_body: PaybackPlanCreateRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Create a payback plan for a funding.

    The payday list is stored sorted; next_payback_date defaults to the
    first payday on or after the start date and today.
    """
    funding = FundingRepository(db).get_funding_by_id(parse_uuid(request_body.funding_id, "funding ID"))
    if not funding:
        raise HTTPException(status_code=404, detail="Funding not found")

    fields = request_body.model_dump(exclude={"funding_id"})
    fields["merchant"] = fields.get("merchant") or funding.merchant

    try:
        prepared = prepare_new_plan(fields)
    except InvalidPaybackPlanError as e:
        logging.warning(f"Invalid payback plan: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=422, detail=str(e))

    plan = PaybackPlanRepository(db).create_plan(funding.id, prepared)
    db.commit()
    db.refresh(plan)

    return build_plan_response(plan, plan_statistics(plan, []))


@router.get("/payback-plans", response_model=PaybackPlanListResponse)
def list_payback_plans(
    funding_id: Optional[str] = Query(None, description="Restrict to one funding"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """Paginated payback plans, newest start date first"""
    funding_uuid = parse_uuid(funding_id, "funding ID") if funding_id else None
    plans, total = PaybackPlanRepository(db).list_plans(funding_uuid, page=page, limit=limit)

    return PaybackPlanListResponse(
        plans=[build_plan_response(plan) for plan in plans],
        pagination=Pagination(
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit),
            total_results=total,
        ),
    )


@router.get("/payback-plans/{plan_id}", response_model=PaybackPlanResponse)
def get_payback_plan(
    plan_id: str,
    calculate: bool = Query(True, description="Include statistics derived from paybacks"),
    db: Session = Depends(get_db),
):
    """Retrieve a payback plan, with progress statistics by default"""
    plan = load_plan(plan_id, db)

    statistics = None
    if calculate:
        statistics = plan_statistics(plan, PaybackRepository(db).get_paybacks_by_plan(plan.id))

    return build_plan_response(plan, statistics)


@router.patch("/payback-plans/{plan_id}", response_model=PaybackPlanResponse)
def update_payback_plan(
    plan_id: str,
    request_body: PaybackPlanUpdateRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """Update a payback plan; pausing or stopping clears next_payback_date"""
    plan = load_plan(plan_id, db)

    fields = {
        name: value
        for name, value in request_body.model_dump(exclude_unset=True).items()
        if value is not None or name not in REQUIRED_PLAN_FIELDS
    }

    try:
        prepared = prepare_plan_update(plan.frequency, plan.payday_list, fields)
    except InvalidPaybackPlanError as e:
        logging.warning(f"Invalid payback plan update: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=422, detail=str(e))

    PaybackPlanRepository(db).update_plan(plan, prepared)
    db.commit()
    db.refresh(plan)

    return build_plan_response(plan, plan_statistics(plan, PaybackRepository(db).get_paybacks_by_plan(plan.id)))


@router.get("/payback-plans/{plan_id}/schedule", response_model=PaybackScheduleResponse)
def get_payback_schedule(plan_id: str, db: Session = Depends(get_db)):
    """
    Project every payback of the plan from its start date.

    Returns:
        Due dates and amounts summing to the plan total
    """
    plan = load_plan(plan_id, db)

    paybacks = generate_payback_list(
        to_terms(plan),
        plan.start_date,
        plan.total_amount_cents,
        plan.payback_count,
    )

    return PaybackScheduleResponse(
        plan_id=str(plan.id),
        total_cents=plan.total_amount_cents,
        paybacks=[ScheduledPaybackSchema(due_date=p.due_date, amount_cents=p.amount_cents) for p in paybacks],
    )


@router.post("/payback-plans/{plan_id}/paybacks/generate", response_model=GeneratePaybacksResponse)
async def generate_paybacks(
    plan_id: str,
    background_tasks: BackgroundTasks,
    request: Request,
    as_of: Optional[date] = Query(None, description="Generate paybacks due on or before this date (default: today)"),
    db: Session = Depends(get_db),
    webhook_client: PaymentWebhookClient = Depends(get_payment_webhook_client),
):
    """
    Create every payback that has come due under an active plan.

    Flow:
    1. Take the plan's next payback amount from its statistics
    2. Split it between funded balance and fees per distribution priority
    3. Persist a SUBMITTED payback for the next payback date
    4. Stop the plan after its last payback, else advance next_payback_date
    5. Repeat while next_payback_date <= as_of
    6. Announce each payback to the payment webhook in the background
    """
    start_time = time.time()
    request_id = get_request_id(request)
    plan = load_plan(plan_id, db)
    today = as_of or date.today()

    try:
        ensure_can_generate(plan.status, plan.next_payback_date)

        funding_repo = FundingRepository(db)
        plan_repo = PaybackPlanRepository(db)
        payback_repo = PaybackRepository(db)
        terms = to_terms(plan)
        priority = DistributionPriority(plan.distribution_priority)

        created: List[Payback] = []
        while plan.next_payback_date and plan.next_payback_date <= today:
            statistics = plan_statistics(plan, payback_repo.get_paybacks_by_plan(plan.id))
            if statistics.remaining_count <= 0:
                plan_repo.update_plan(
                    plan,
                    {"status": PaybackPlanStatus.STOPPED.value, "end_date": today, "next_payback_date": None},
                )
                plan_stopped_counter.inc()
                break

            amount = statistics.next_payback_amount_cents
            funded, fee = split_payback_amount(amount, priority, funding_repo.get_balance(plan.funding))

            payback = payback_repo.create_payback(
                plan,
                due_date=plan.next_payback_date,
                payback_amount_cents=amount,
                funded_amount_cents=funded,
                fee_amount_cents=fee,
                submitted_date=today,
                note="System generated",
            )
            created.append(payback)
            record_generated_payback(plan.frequency, funded, fee)

            if statistics.remaining_count <= 1:
                plan_repo.update_plan(
                    plan,
                    {"status": PaybackPlanStatus.STOPPED.value, "end_date": today, "next_payback_date": None},
                )
                plan_stopped_counter.inc()
            else:
                plan_repo.update_plan(
                    plan,
                    {"next_payback_date": calculate_scheduled_payback_date(terms, plan.next_payback_date, 2)},
                )

        db.commit()

    except PlanNotActiveError as e:
        db.rollback()
        logging.warning(f"Payback generation refused: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    for payback in created:
        background_tasks.add_task(
            webhook_client.send_payback_event,
            {
                "event": "PAYBACK_SUBMITTED",
                "payback_id": str(payback.id),
                "payback_plan_id": str(plan.id),
                "funding_id": str(plan.funding_id),
                "due_date": payback.due_date.isoformat(),
                "amount_cents": payback.payback_amount_cents,
                "payment_method": payback.payment_method,
                "ach_processor": payback.ach_processor,
            },
        )

    duration_ms = (time.time() - start_time) * 1000
    log_paybacks_generated(request_id, str(plan.id), [str(p.id) for p in created], plan.status, duration_ms)

    return GeneratePaybacksResponse(
        plan_id=str(plan.id),
        plan_status=plan.status,
        next_payback_date=plan.next_payback_date,
        paybacks=[build_payback_schema(p) for p in created],
    )
