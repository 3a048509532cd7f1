"""SQLAlchemy ORM models for persisted optimization runs"""

import uuid
from sqlalchemy import Column, Integer, DateTime, ForeignKey, Text, JSON, Numeric
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class OptimizationRun(Base):
    """One settlement optimization requested by a user"""

    __tablename__ = "optimization_run"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    original_count = Column(Integer, nullable=False)
    optimized_count = Column(Integer, nullable=False)
    savings = Column(Integer, nullable=False)
    net_balances = Column(JSON, nullable=False)
    unsettled = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    transfers = relationship(
        "SettlementTransferRecord",
        back_populates="run",
        cascade="all, delete-orphan",
        order_by="SettlementTransferRecord.position",
    )


class SettlementTransferRecord(Base):
    """Transfer emitted by a run, kept in emission order"""

    __tablename__ = "settlement_transfer"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    run_id = Column(UUID(as_uuid=True), ForeignKey("optimization_run.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False)
    from_id = Column(Text, nullable=False)
    from_name = Column(Text, nullable=False)
    to_id = Column(Text, nullable=False)
    to_name = Column(Text, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)

    run = relationship("OptimizationRun", back_populates="transfers")
