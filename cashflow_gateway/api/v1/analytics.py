"""POST /v1/analytics/overview - dashboard totals for a snapshot"""

from fastapi import APIRouter

from cashflow_gateway.api.v1.schemas import (
    ActivitySchema,
    OverviewResponse,
    PartyTotalSchema,
    SnapshotRequest,
)
from cashflow_gateway.domain.analytics import summarize_overview

router = APIRouter()


@router.post("/analytics/overview", response_model=OverviewResponse)
def get_overview(request_body: SnapshotRequest):
    """Totals, most active bank, and largest debtor/creditor of the snapshot"""
    summary = summarize_overview(
        [bank.to_domain() for bank in request_body.banks],
        [txn.to_domain() for txn in request_body.transactions],
    )

    return OverviewResponse(
        total_banks=summary.total_banks,
        total_transactions=summary.total_transactions,
        total_volume=float(summary.total_volume),
        total_debt=float(summary.total_debt),
        total_credit=float(summary.total_credit),
        most_active_bank=(
            ActivitySchema(name=summary.most_active_bank.name, count=summary.most_active_bank.count)
            if summary.most_active_bank
            else None
        ),
        top_debtor=(
            PartyTotalSchema(name=summary.top_debtor.name, amount=float(summary.top_debtor.amount))
            if summary.top_debtor
            else None
        ),
        top_creditor=(
            PartyTotalSchema(name=summary.top_creditor.name, amount=float(summary.top_creditor.amount))
            if summary.top_creditor
            else None
        ),
    )
