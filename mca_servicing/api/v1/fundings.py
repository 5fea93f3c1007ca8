"""POST /v1/fundings, GET /v1/fundings/{funding_id} - Funding balances"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from mca_servicing.api.dependencies import parse_uuid
from mca_servicing.api.v1.schemas import FundingCreateRequest, FundingResponse
from mca_servicing.infrastructure.database.models import Funding
from mca_servicing.infrastructure.database.repositories import FundingRepository
from mca_servicing.infrastructure.database.session import get_db

router = APIRouter()


def build_funding_response(funding: Funding, funding_repo: FundingRepository) -> FundingResponse:
    balance = funding_repo.get_balance(funding)
    return FundingResponse(
        funding_id=str(funding.id),
        name=funding.name,
        merchant=funding.merchant,
        payback_amount_cents=funding.payback_amount_cents,
        residual_fee_amount_cents=funding.residual_fee_amount_cents,
        remaining_payback_amount_cents=balance.remaining_payback_amount_cents,
        remaining_fee_amount_cents=balance.remaining_fee_amount_cents,
        created_at=funding.created_at.isoformat(),
    )


@router.post("/fundings", response_model=FundingResponse, status_code=201)
def create_funding(request_body: FundingCreateRequest, db: Session = Depends(get_db)):
    """Register a funding whose balances payback plans pay down"""
    funding_repo = FundingRepository(db)
    funding = funding_repo.create_funding(
        name=request_body.name,
        merchant=request_body.merchant,
        payback_amount_cents=request_body.payback_amount_cents,
        residual_fee_amount_cents=request_body.residual_fee_amount_cents,
    )
    db.commit()
    db.refresh(funding)
    return build_funding_response(funding, funding_repo)


@router.get("/fundings/{funding_id}", response_model=FundingResponse)
def get_funding(funding_id: str, db: Session = Depends(get_db)):
    """Retrieve a funding with remaining funded and fee balances"""
    funding_repo = FundingRepository(db)
    funding = funding_repo.get_funding_by_id(parse_uuid(funding_id, "funding ID"))

    if not funding:
        raise HTTPException(status_code=404, detail="Funding not found")

    return build_funding_response(funding, funding_repo)
