"""Greedy cash-flow settlement optimizer - core business logic"""

import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from cashflow_gateway.domain.balances import (
    aggregate_net_balances,
    index_banks,
    is_compatible,
    split_positions,
)
from cashflow_gateway.domain.models import (
    Bank,
    BankId,
    DirectedTransaction,
    NetBalance,
    QueueEntry,
    SettlementResult,
    SettlementTransfer,
    UnsettledBalance,
)
from cashflow_gateway.domain.priority_queue import MaxPriorityQueue
from cashflow_gateway.utils.money import round_cents

DEFAULT_EPSILON = Decimal("0.01")
UNKNOWN_BANK_NAME = "Unknown"


def _bank_name(banks_by_id: Dict[BankId, Bank], bank_id: BankId) -> str:
    bank = banks_by_id.get(bank_id)
    return bank.name if bank else UNKNOWN_BANK_NAME


def _pop_compatible_creditor(
    debtor: QueueEntry,
    creditors: MaxPriorityQueue,
    banks_by_id: Dict[BankId, Bank],
) -> Optional[QueueEntry]:
    """
    Pop the largest creditor compatible with `debtor`.

    Creditors examined and rejected on the way are pushed back unchanged,
    whether or not a match was found.
    """
    debtor_bank = banks_by_id.get(debtor.bank_id)
    skipped: List[QueueEntry] = []
    match = None

    while creditors.size() > 0:
        candidate = creditors.pop()
        if is_compatible(debtor_bank, banks_by_id.get(candidate.bank_id)):
            match = candidate
            break
        skipped.append(candidate)

    for entry in skipped:
        creditors.push(entry)

    return match


def match_settlements(
    net: Dict[BankId, Decimal],
    banks_by_id: Dict[BankId, Bank],
    epsilon: Decimal = DEFAULT_EPSILON,
    max_iterations: Optional[int] = None,
) -> Tuple[List[SettlementTransfer], List[UnsettledBalance]]:
    """
    Greedily pair the largest debtor with the largest compatible creditor.

    Algorithm:
    1. Debtors (net < 0) and creditors (net > 0) go into two max-heaps keyed
       by absolute balance
    2. Pop the largest debtor and search the creditor heap for the largest
       creditor sharing a payment type with it
    3. Transfer min(debt, credit); re-queue any side whose remainder exceeds
       `epsilon`
    4. Stop when either heap is empty (or after `max_iterations` debtor pops)

    A debtor with no compatible creditor left is dropped for the rest of the
    run. It keeps its net balance in the report but gets no transfer.

    Each transfer is rounded to cents on its own, so with sub-cent inputs the
    transfers touching one bank can overshoot its rounded net balance by up
    to one cent (two half-cent amounts that both round up). Remainders of one
    cent or less are dropped rather than re-queued, and transfers that round
    to 0.00 are not emitted.

    Returns:
        (transfers in emission order, positions left unsettled)
    """
    debtors = MaxPriorityQueue()
    creditors = MaxPriorityQueue()

    debtor_ids, creditor_ids = split_positions(net)
    for bank_id in debtor_ids:
        debtors.push(QueueEntry(magnitude=abs(net[bank_id]), bank_id=bank_id))
    for bank_id in creditor_ids:
        creditors.push(QueueEntry(magnitude=net[bank_id], bank_id=bank_id))

    transfers: List[SettlementTransfer] = []
    abandoned: List[QueueEntry] = []
    iterations = 0

    while debtors.size() > 0 and creditors.size() > 0:
        if max_iterations is not None and iterations >= max_iterations:
            logging.warning(
                "Settlement matching stopped at iteration cap",
                extra={"max_iterations": max_iterations, "debtors_left": debtors.size()},
            )
            break
        iterations += 1

        debtor = debtors.pop()
        creditor = _pop_compatible_creditor(debtor, creditors, banks_by_id)

        if creditor is None:
            logging.warning(
                "No compatible creditor for debtor",
                extra={"bank_id": debtor.bank_id, "remaining": str(round_cents(debtor.magnitude))},
            )
            abandoned.append(debtor)
            continue

        settle_amount = min(debtor.magnitude, creditor.magnitude)
        amount = round_cents(settle_amount)

        # Sub-cent positions round to nothing; they are not worth a transfer
        if amount > 0:
            transfers.append(
                SettlementTransfer(
                    from_name=_bank_name(banks_by_id, debtor.bank_id),
                    from_id=debtor.bank_id,
                    to_name=_bank_name(banks_by_id, creditor.bank_id),
                    to_id=creditor.bank_id,
                    amount=amount,
                )
            )

        debtor_remaining = debtor.magnitude - settle_amount
        creditor_remaining = creditor.magnitude - settle_amount

        if debtor_remaining > epsilon:
            debtors.push(QueueEntry(magnitude=debtor_remaining, bank_id=debtor.bank_id))
        if creditor_remaining > epsilon:
            creditors.push(QueueEntry(magnitude=creditor_remaining, bank_id=creditor.bank_id))

    unsettled = _unsettled(abandoned + debtors.drain(), banks_by_id, sign=-1)
    unsettled.extend(_unsettled(creditors.drain(), banks_by_id, sign=1))

    return transfers, unsettled


def _unsettled(
    entries: List[QueueEntry],
    banks_by_id: Dict[BankId, Bank],
    sign: int,
) -> List[UnsettledBalance]:
    # Leftovers below half a cent have no reportable amount or sign
    return [
        UnsettledBalance(
            bank_id=entry.bank_id,
            name=_bank_name(banks_by_id, entry.bank_id),
            amount=sign * round_cents(entry.magnitude),
        )
        for entry in entries
        if round_cents(entry.magnitude) > 0
    ]


def assemble_result(
    original_count: int,
    transfers: List[SettlementTransfer],
    net: Dict[BankId, Decimal],
    banks_by_id: Dict[BankId, Bank],
    unsettled: Optional[List[UnsettledBalance]] = None,
) -> SettlementResult:
    """Package transfers and rounded net balances into the output contract"""
    net_balances = [
        NetBalance(
            bank_id=bank_id,
            name=_bank_name(banks_by_id, bank_id),
            amount=round_cents(amount),
        )
        for bank_id, amount in net.items()
    ]

    return SettlementResult(
        original_count=original_count,
        optimized_count=len(transfers),
        savings=original_count - len(transfers),
        settlements=transfers,
        net_balances=net_balances,
        unsettled=unsettled,
    )


def optimize(
    banks: Iterable[Bank],
    transactions: Iterable[DirectedTransaction],
    *,
    strict: bool = False,
    report_unsettled: bool = False,
    epsilon: Decimal = DEFAULT_EPSILON,
    max_iterations: Optional[int] = None,
) -> SettlementResult:
    """
    Main entry point: compute a settlement plan for a bank/transaction snapshot.

    Pure function: no I/O, no state kept between calls.

    Raises:
        UnknownEntityReferenceError: in strict mode, when a transaction names
            a bank missing from `banks`
    """
    banks = list(banks)
    transactions = list(transactions)
    banks_by_id = index_banks(banks)

    net = aggregate_net_balances(banks, transactions, strict=strict)
    transfers, unsettled = match_settlements(net, banks_by_id, epsilon, max_iterations)

    return assemble_result(
        original_count=len(transactions),
        transfers=transfers,
        net=net,
        banks_by_id=banks_by_id,
        unsettled=unsettled if report_unsettled else None,
    )
