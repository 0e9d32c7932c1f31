"""SQLAlchemy ORM models for stored plan inputs and cached snapshots"""

import uuid
from sqlalchemy import Column, String, BigInteger, Boolean, DateTime, Date, Integer, ForeignKey, Text, JSON, Uuid
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class DebtPlanRecord(Base):
    """Saved plan settings; the schedule itself is always re-simulated"""

    __tablename__ = "debt_plan"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=True)
    strategy = Column(String(16), nullable=False)
    extra_monthly_cents = Column(BigInteger, nullable=False, default=0)
    one_time_extra_cents = Column(BigInteger, nullable=False, default=0)
    start_date = Column(Date, nullable=False)
    max_months = Column(Integer, nullable=True)
    rollover_freed_minimums = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    debts = relationship(
        "PlanDebtRecord",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="PlanDebtRecord.position",
    )
    snapshots = relationship(
        "PlanSnapshotRecord",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="PlanSnapshotRecord.id",
    )


class PlanDebtRecord(Base):
    """One debt of a saved plan; position preserves input order for tie-breaks"""

    __tablename__ = "plan_debt"

    id = Column(Integer, primary_key=True, autoincrement=True)
    plan_id = Column(Uuid(as_uuid=True), ForeignKey("debt_plan.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False)
    debt_id = Column(Text, nullable=False)
    name = Column(Text, nullable=False)
    balance_cents = Column(BigInteger, nullable=False)
    apr = Column(String(32), nullable=False)  # exact decimal text, e.g. "18.99"
    min_payment_cents = Column(BigInteger, nullable=False)
    due_day = Column(Integer, nullable=True)
    include = Column(Boolean, nullable=False, default=True)
    category = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    plan = relationship("DebtPlanRecord", back_populates="debts")


class PlanSnapshotRecord(Base):
    """Cached simulation output kept for history and sharing, never canonical"""

    __tablename__ = "plan_snapshot"

    id = Column(Integer, primary_key=True, autoincrement=True)
    plan_id = Column(Uuid(as_uuid=True), ForeignKey("debt_plan.id", ondelete="CASCADE"), nullable=False, index=True)
    version = Column(Integer, nullable=False)
    payload = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    plan = relationship("DebtPlanRecord", back_populates="snapshots")
