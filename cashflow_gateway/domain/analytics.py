"""Dashboard overview totals over a bank/transaction snapshot"""

from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from cashflow_gateway.domain.balances import aggregate_net_balances, index_banks
from cashflow_gateway.domain.models import (
    ActivityCount,
    Bank,
    DirectedTransaction,
    OverviewSummary,
    PartyTotal,
)
from cashflow_gateway.utils.money import round_cents


def _most_active(transactions: List[DirectedTransaction], names: Dict[str, str]) -> Optional[ActivityCount]:
    activity: Dict[str, int] = {}
    for txn in transactions:
        for bank_id in (txn.debtor, txn.creditor):
            name = names.get(bank_id, "Unknown")
            activity[name] = activity.get(name, 0) + 1

    best: Optional[ActivityCount] = None
    for name, count in activity.items():
        # Strictly greater: first bank seen wins ties
        if best is None or count > best.count:
            best = ActivityCount(name=name, count=count)
    return best


def summarize_overview(
    banks: Iterable[Bank],
    transactions: Iterable[DirectedTransaction],
) -> OverviewSummary:
    """
    Compute dashboard totals.

    - total_debt / total_credit: sums of negative / positive net balances
    - most_active_bank: bank appearing in the most transactions (either side)
    - top_debtor / top_creditor: most negative / most positive net balance,
      None when no bank sits on that side
    """
    banks = list(banks)
    transactions = list(transactions)
    names = {bank_id: bank.name for bank_id, bank in index_banks(banks).items()}

    net = aggregate_net_balances(banks, transactions)
    known = {bank_id: net[bank_id] for bank_id in names}

    total_debt = sum((-amount for amount in known.values() if amount < 0), Decimal("0"))
    total_credit = sum((amount for amount in known.values() if amount > 0), Decimal("0"))
    total_volume = sum((txn.amount for txn in transactions), Decimal("0"))

    top_debtor = None
    top_creditor = None
    if known:
        debtor_id = min(known, key=lambda bank_id: known[bank_id])
        creditor_id = max(known, key=lambda bank_id: known[bank_id])
        if known[debtor_id] < 0:
            top_debtor = PartyTotal(name=names[debtor_id], amount=round_cents(known[debtor_id]))
        if known[creditor_id] > 0:
            top_creditor = PartyTotal(name=names[creditor_id], amount=round_cents(known[creditor_id]))

    return OverviewSummary(
        total_banks=len(names),
        total_transactions=len(transactions),
        total_volume=round_cents(total_volume),
        total_debt=round_cents(total_debt),
        total_credit=round_cents(total_credit),
        most_active_bank=_most_active(transactions, names),
        top_debtor=top_debtor,
        top_creditor=top_creditor,
    )
