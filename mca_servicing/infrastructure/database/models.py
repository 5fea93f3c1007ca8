"""SQLAlchemy ORM models for fundings, payback plans and paybacks"""

import uuid
from sqlalchemy import Column, String, BigInteger, Boolean, DateTime, Date, Integer, ForeignKey, Text, JSON
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class Funding(Base):
    """MCA funding - only the balances payback distribution needs"""

    __tablename__ = "funding"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    merchant = Column(Text, nullable=False, index=True)
    payback_amount_cents = Column(BigInteger, nullable=False)
    residual_fee_amount_cents = Column(BigInteger, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    payback_plans = relationship("PaybackPlan", back_populates="funding", cascade="all, delete-orphan")
    paybacks = relationship("Payback", back_populates="funding", cascade="all, delete-orphan")


class PaybackPlan(Base):
    """Recurring repayment schedule for a funding"""

    __tablename__ = "payback_plan"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    funding_id = Column(UUID(as_uuid=True), ForeignKey("funding.id", ondelete="CASCADE"), nullable=False, index=True)
    merchant = Column(Text, nullable=False, index=True)
    payment_method = Column(String(16), nullable=True)
    ach_processor = Column(String(32), nullable=True)
    total_amount_cents = Column(BigInteger, nullable=False)
    payback_count = Column(Integer, nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    next_payback_date = Column(Date, nullable=True)
    frequency = Column(String(16), nullable=False)
    payday_list = Column(JSON, nullable=False, default=list)
    avoid_holiday = Column(Boolean, nullable=False, default=False)
    distribution_priority = Column(String(8), nullable=False, default="FUND")
    note = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default="ACTIVE")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    funding = relationship("Funding", back_populates="payback_plans")
    paybacks = relationship("Payback", back_populates="payback_plan", cascade="all, delete-orphan")


class Payback(Base):
    """Single repayment collected (or attempted) from the merchant"""

    __tablename__ = "payback"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    funding_id = Column(UUID(as_uuid=True), ForeignKey("funding.id", ondelete="CASCADE"), nullable=False, index=True)
    payback_plan_id = Column(
        UUID(as_uuid=True), ForeignKey("payback_plan.id", ondelete="CASCADE"), nullable=True, index=True
    )
    due_date = Column(Date, nullable=False)
    submitted_date = Column(Date, nullable=True)
    payback_amount_cents = Column(BigInteger, nullable=False)
    funded_amount_cents = Column(BigInteger, nullable=False, default=0)
    fee_amount_cents = Column(BigInteger, nullable=False, default=0)
    payment_method = Column(String(16), nullable=True)
    ach_processor = Column(String(32), nullable=True)
    status = Column(String(16), nullable=False, default="SUBMITTED")
    note = Column(Text, nullable=True)
    reconciled = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    funding = relationship("Funding", back_populates="paybacks")
    payback_plan = relationship("PaybackPlan", back_populates="paybacks")
