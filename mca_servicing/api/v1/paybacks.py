"""GET /v1/paybacks, PATCH /v1/paybacks/{payback_id} - Payback status tracking"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from mca_servicing.api.dependencies import parse_uuid
from mca_servicing.api.v1.schemas import PaybackListResponse, PaybackSchema, PaybackUpdateRequest
from mca_servicing.infrastructure.database.models import Payback
from mca_servicing.infrastructure.database.repositories import PaybackRepository
from mca_servicing.infrastructure.database.session import get_db

router = APIRouter()


def build_payback_schema(payback: Payback) -> PaybackSchema:
    return PaybackSchema(
        payback_id=str(payback.id),
        payback_plan_id=str(payback.payback_plan_id) if payback.payback_plan_id else None,
        funding_id=str(payback.funding_id),
        due_date=payback.due_date,
        submitted_date=payback.submitted_date,
        payback_amount_cents=payback.payback_amount_cents,
        funded_amount_cents=payback.funded_amount_cents,
        fee_amount_cents=payback.fee_amount_cents,
        payment_method=payback.payment_method,
        ach_processor=payback.ach_processor,
        status=payback.status,
        note=payback.note,
        reconciled=payback.reconciled,
    )


@router.get("/paybacks", response_model=PaybackListResponse)
def list_paybacks(
    payback_plan_id: str = Query(..., description="Payback plan identifier"),
    db: Session = Depends(get_db),
):
    """Paybacks of a plan in due date order"""
    plan_uuid = parse_uuid(payback_plan_id, "payback plan ID")
    paybacks = PaybackRepository(db).get_paybacks_by_plan(plan_uuid)

    return PaybackListResponse(
        payback_plan_id=payback_plan_id,
        paybacks=[build_payback_schema(p) for p in paybacks],
    )


@router.patch("/paybacks/{payback_id}", response_model=PaybackSchema)
def update_payback(payback_id: str, request_body: PaybackUpdateRequest, db: Session = Depends(get_db)):
    """
    Record processor feedback on a payback (status, reconciliation, note).

    Status changes feed the plan statistics and funding balances.
    """
    payback_repo = PaybackRepository(db)
    payback = payback_repo.get_payback_by_id(parse_uuid(payback_id, "payback ID"))

    if not payback:
        raise HTTPException(status_code=404, detail="Payback not found")

    fields = request_body.model_dump(exclude_none=True)
    payback_repo.update_payback(payback, fields)
    db.commit()
    db.refresh(payback)

    return build_payback_schema(payback)
