"""POST /v1/optimize - settlement plan endpoint, plus stored run lookups"""

import time
import uuid
import logging
from fastapi import APIRouter, Depends, HTTPException, BackgroundTasks, Query, Request
from sqlalchemy.orm import Session

from cashflow_gateway.api.v1.schemas import (
    BalanceSchema,
    OptimizeRequest,
    OptimizeResponse,
    RunHistoryItem,
    RunHistoryResponse,
    SettlementSchema,
)
from cashflow_gateway.api.dependencies import get_ledger_client, get_request_id
from cashflow_gateway.config import settings
from cashflow_gateway.infrastructure.database.session import get_db
from cashflow_gateway.infrastructure.database.repositories import OptimizationRunRepository
from cashflow_gateway.infrastructure.clients.ledger import LedgerClient
from cashflow_gateway.domain.optimizer import optimize
from cashflow_gateway.domain.exceptions import UnknownEntityReferenceError
from cashflow_gateway.infrastructure.observability.metrics import record_optimization
from cashflow_gateway.infrastructure.observability.logging import log_optimization

router = APIRouter()


@router.post("/optimize", response_model=OptimizeResponse, response_model_exclude_none=True)
async def create_optimization(
    request_body: OptimizeRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    ledger_client: LedgerClient = Depends(get_ledger_client),
):
    """
    Compute a settlement plan for the submitted banks and transactions.

    Flow:
    1. Check the snapshot has at least 2 banks and 1 transaction
    2. Run the greedy optimizer
    3. Persist the run and its transfers
    4. Send async webhook to ledger when the plan is non-empty
    5. Return the plan with net balances
    """
    start_time = time.time()
    request_id = get_request_id(request)

    if len(request_body.banks) < 2:
        raise HTTPException(status_code=400, detail="Need at least 2 banks to optimize.")
    if not request_body.transactions:
        raise HTTPException(status_code=400, detail="No transactions to optimize.")

    try:
        # Always collect leftovers for metrics; only returned when requested
        result = optimize(
            [bank.to_domain() for bank in request_body.banks],
            [txn.to_domain() for txn in request_body.transactions],
            strict=request_body.strict,
            report_unsettled=True,
            epsilon=settings.settlement_epsilon,
            max_iterations=settings.max_match_iterations,
        )
        unsettled_debtors = sum(1 for u in result.unsettled if u.amount < 0)
        if not request_body.report_unsettled:
            result.unsettled = None

        run_repo = OptimizationRunRepository(db)
        db_run = run_repo.create_run(user_id=request_body.user_id, result=result)
        run_id = str(db_run.id)

        if result.settlements:
            background_tasks.add_task(
                ledger_client.send_settlement_event,
                {
                    "event": "SETTLEMENT_PLAN_CREATED",
                    "run_id": run_id,
                    "user_id": request_body.user_id,
                    "optimized_count": result.optimized_count,
                    "settlements": [
                        {"from_id": s.from_id, "to_id": s.to_id, "amount": str(s.amount)}
                        for s in result.settlements
                    ],
                },
            )

        db.commit()

        duration_ms = (time.time() - start_time) * 1000
        record_optimization(result.original_count, result.optimized_count, unsettled_debtors)
        log_optimization(
            request_id,
            request_body.user_id,
            result.original_count,
            result.optimized_count,
            unsettled_debtors,
            duration_ms,
        )

        return OptimizeResponse(
            run_id=run_id,
            original_count=result.original_count,
            optimized_count=result.optimized_count,
            savings=result.savings,
            settlements=[
                SettlementSchema(
                    from_name=s.from_name,
                    from_id=s.from_id,
                    to_name=s.to_name,
                    to_id=s.to_id,
                    amount=float(s.amount),
                )
                for s in result.settlements
            ],
            net_balances=[
                BalanceSchema(bank_id=b.bank_id, name=b.name, amount=float(b.amount))
                for b in result.net_balances
            ],
            unsettled=(
                [BalanceSchema(bank_id=u.bank_id, name=u.name, amount=float(u.amount)) for u in result.unsettled]
                if result.unsettled is not None
                else None
            ),
        )

    except UnknownEntityReferenceError as e:
        db.rollback()
        logging.warning(f"Unknown bank reference: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/optimize/history", response_model=RunHistoryResponse)
def get_optimization_history(
    user_id: str = Query(..., description="User identifier"),
    db: Session = Depends(get_db),
):
    """Retrieve a user's recent optimization runs, newest first"""
    run_repo = OptimizationRunRepository(db)
    runs = run_repo.get_runs_by_user(user_id, limit=20)

    return RunHistoryResponse(
        user_id=user_id,
        runs=[
            RunHistoryItem(
                run_id=str(r.id),
                original_count=r.original_count,
                optimized_count=r.optimized_count,
                savings=r.savings,
                created_at=r.created_at.isoformat(),
            )
            for r in runs
        ],
    )


@router.get("/optimize/{run_id}", response_model=OptimizeResponse, response_model_exclude_none=True)
def get_optimization(run_id: str, db: Session = Depends(get_db)):
    """
    Retrieve a stored settlement plan.

    Returns:
        The run's transfers in emission order and its net balance snapshot
    """
    try:
        run_uuid = uuid.UUID(run_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid run ID format")

    run_repo = OptimizationRunRepository(db)
    run = run_repo.get_run_by_id(run_uuid)

    if not run:
        raise HTTPException(status_code=404, detail="Run not found")

    return OptimizeResponse(
        run_id=str(run.id),
        original_count=run.original_count,
        optimized_count=run.optimized_count,
        savings=run.savings,
        settlements=[
            SettlementSchema(
                from_name=t.from_name,
                from_id=t.from_id,
                to_name=t.to_name,
                to_id=t.to_id,
                amount=float(t.amount),
            )
            for t in run.transfers
        ],
        net_balances=[BalanceSchema(**b) for b in run.net_balances],
        unsettled=[BalanceSchema(**u) for u in run.unsettled] if run.unsettled is not None else None,
    )
