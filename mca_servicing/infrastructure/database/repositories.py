"""Data access layer for fundings, payback plans and paybacks"""

import uuid
from datetime import date
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy import func
from sqlalchemy.orm import Session
from mca_servicing.infrastructure.database.models import Funding, PaybackPlan, Payback
from mca_servicing.domain.models import FundingBalance, PaybackFrequency, PaybackStatus, PaybackTerms
from mca_servicing.domain.paybacks import PENDING_STATUSES

# Paybacks that count against a funding's outstanding balance
OUTSTANDING_STATUSES = [PaybackStatus.SUCCEED.value] + [s.value for s in PENDING_STATUSES]


def to_terms(plan: PaybackPlan) -> PaybackTerms:
    """Date-arithmetic view of a stored payback plan"""
    return PaybackTerms(
        frequency=PaybackFrequency(plan.frequency),
        payday_list=sorted(plan.payday_list or []),
        avoid_holiday=bool(plan.avoid_holiday),
    )


class FundingRepository:
    """Repository for fundings"""

    def __init__(self, db: Session):
        self.db = db

    def create_funding(
        self,
        name: str,
        merchant: str,
        payback_amount_cents: int,
        residual_fee_amount_cents: int = 0,
    ) -> Funding:
        """Persist a funding"""
        db_funding = Funding(
            name=name,
            merchant=merchant,
            payback_amount_cents=payback_amount_cents,
            residual_fee_amount_cents=residual_fee_amount_cents,
        )
        self.db.add(db_funding)
        self.db.flush()
        return db_funding

    def get_funding_by_id(self, funding_id: uuid.UUID) -> Optional[Funding]:
        return self.db.query(Funding).filter(Funding.id == funding_id).first()

    def get_balance(self, funding: Funding) -> FundingBalance:
        """Remaining funded and fee balances after paid and pending paybacks"""
        funded_paid, fee_paid = (
            self.db.query(
                func.coalesce(func.sum(Payback.funded_amount_cents), 0),
                func.coalesce(func.sum(Payback.fee_amount_cents), 0),
            )
            .filter(Payback.funding_id == funding.id, Payback.status.in_(OUTSTANDING_STATUSES))
            .one()
        )
        return FundingBalance(
            payback_amount_cents=funding.payback_amount_cents,
            residual_fee_amount_cents=funding.residual_fee_amount_cents,
            remaining_payback_amount_cents=funding.payback_amount_cents - int(funded_paid),
            remaining_fee_amount_cents=funding.residual_fee_amount_cents - int(fee_paid),
        )


class PaybackPlanRepository:
    """Repository for payback plans"""

    def __init__(self, db: Session):
        self.db = db

    def create_plan(self, funding_id: uuid.UUID, fields: Dict[str, Any]) -> PaybackPlan:
        """Persist a payback plan"""
        db_plan = PaybackPlan(funding_id=funding_id, **fields)
        self.db.add(db_plan)
        self.db.flush()
        return db_plan

    def get_plan_by_id(self, plan_id: uuid.UUID) -> Optional[PaybackPlan]:
        return self.db.query(PaybackPlan).filter(PaybackPlan.id == plan_id).first()

    def list_plans(
        self,
        funding_id: Optional[uuid.UUID] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[PaybackPlan], int]:
        """Page of plans, newest start date first, plus the total count"""
        query = self.db.query(PaybackPlan)
        if funding_id is not None:
            query = query.filter(PaybackPlan.funding_id == funding_id)

        total = query.count()
        plans = (
            query.order_by(PaybackPlan.start_date.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return plans, total

    def update_plan(self, plan: PaybackPlan, fields: Dict[str, Any]) -> PaybackPlan:
        for name, value in fields.items():
            setattr(plan, name, value)
        self.db.flush()
        return plan


class PaybackRepository:
    """Repository for paybacks"""

    def __init__(self, db: Session):
        self.db = db

    def create_payback(
        self,
        plan: PaybackPlan,
        due_date: date,
        payback_amount_cents: int,
        funded_amount_cents: int,
        fee_amount_cents: int,
        submitted_date: date,
        status: PaybackStatus = PaybackStatus.SUBMITTED,
        note: Optional[str] = None,
    ) -> Payback:
        """Persist a payback generated from a plan"""
        db_payback = Payback(
            funding_id=plan.funding_id,
            payback_plan_id=plan.id,
            due_date=due_date,
            submitted_date=submitted_date,
            payback_amount_cents=payback_amount_cents,
            funded_amount_cents=funded_amount_cents,
            fee_amount_cents=fee_amount_cents,
            payment_method=plan.payment_method,
            ach_processor=plan.ach_processor,
            status=status.value,
            note=note,
            reconciled=False,
        )
        self.db.add(db_payback)
        self.db.flush()
        return db_payback

    def get_payback_by_id(self, payback_id: uuid.UUID) -> Optional[Payback]:
        return self.db.query(Payback).filter(Payback.id == payback_id).first()

    def get_paybacks_by_plan(self, plan_id: uuid.UUID) -> List[Payback]:
        """Fetch a plan's paybacks in due date order"""
        return (
            self.db.query(Payback)
            .filter(Payback.payback_plan_id == plan_id)
            .order_by(Payback.due_date.asc(), Payback.created_at.asc())
            .all()
        )

    def update_payback(self, payback: Payback, fields: Dict[str, Any]) -> Payback:
        for name, value in fields.items():
            setattr(payback, name, value)
        self.db.flush()
        return payback
