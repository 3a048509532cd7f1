"""Data access layer for optimization runs"""

import uuid
from typing import List, Optional
from sqlalchemy.orm import Session
from cashflow_gateway.infrastructure.database.models import OptimizationRun, SettlementTransferRecord
from cashflow_gateway.domain.models import SettlementResult


class OptimizationRunRepository:
    """Repository for optimization runs and their transfers"""

    def __init__(self, db: Session):
        self.db = db

    def create_run(self, user_id: str, result: SettlementResult) -> OptimizationRun:
        """Persist an optimization result with its transfers"""
        unsettled = None
        if result.unsettled is not None:
            unsettled = [
                {"bank_id": u.bank_id, "name": u.name, "amount": str(u.amount)}
                for u in result.unsettled
            ]

        db_run = OptimizationRun(
            user_id=user_id,
            original_count=result.original_count,
            optimized_count=result.optimized_count,
            savings=result.savings,
            net_balances=[
                {"bank_id": b.bank_id, "name": b.name, "amount": str(b.amount)}
                for b in result.net_balances
            ],
            unsettled=unsettled,
        )
        self.db.add(db_run)
        self.db.flush()  # Get ID without committing

        for position, transfer in enumerate(result.settlements):
            self.db.add(
                SettlementTransferRecord(
                    run_id=db_run.id,
                    position=position,
                    from_id=transfer.from_id,
                    from_name=transfer.from_name,
                    to_id=transfer.to_id,
                    to_name=transfer.to_name,
                    amount=transfer.amount,
                )
            )

        return db_run

    def get_runs_by_user(self, user_id: str, limit: int = 20) -> List[OptimizationRun]:
        """Fetch recent runs for a user, newest first"""
        return (
            self.db.query(OptimizationRun)
            .filter(OptimizationRun.user_id == user_id)
            .order_by(OptimizationRun.created_at.desc())
            .limit(limit)
            .all()
        )

    def get_run_by_id(self, run_id: uuid.UUID) -> Optional[OptimizationRun]:
        """Fetch run with transfers"""
        return (
            self.db.query(OptimizationRun)
            .filter(OptimizationRun.id == run_id)
            .first()
        )
