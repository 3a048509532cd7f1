"""Net balance aggregation and payment-channel compatibility"""

from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from cashflow_gateway.domain.exceptions import UnknownEntityReferenceError
from cashflow_gateway.domain.models import Bank, BankId, DirectedTransaction


def aggregate_net_balances(
    banks: Iterable[Bank],
    transactions: Iterable[DirectedTransaction],
    strict: bool = False,
) -> Dict[BankId, Decimal]:
    """
    Reduce directed transactions to one signed net balance per bank.

    net > 0: the bank is owed money; net < 0: the bank owes money.

    Every known bank appears in the result, including those with no activity.
    Ids that only appear in transactions are tracked as well unless `strict`
    is set, in which case they raise UnknownEntityReferenceError.
    Amounts are accumulated unrounded.
    """
    net: Dict[BankId, Decimal] = {bank.id: Decimal("0") for bank in banks}

    for txn in transactions:
        for bank_id in (txn.debtor, txn.creditor):
            if bank_id not in net:
                if strict:
                    raise UnknownEntityReferenceError(bank_id)
                net[bank_id] = Decimal("0")

        net[txn.debtor] -= txn.amount
        net[txn.creditor] += txn.amount

    return net


def is_compatible(bank_a: Optional[Bank], bank_b: Optional[Bank]) -> bool:
    """True when both banks share at least one payment type (exact match)"""
    if bank_a is None or bank_b is None:
        return False
    return not bank_a.payment_types.isdisjoint(bank_b.payment_types)


def index_banks(banks: Iterable[Bank]) -> Dict[BankId, Bank]:
    """Build an id -> bank lookup table; later duplicates win"""
    return {bank.id: bank for bank in banks}


def split_positions(net: Dict[BankId, Decimal]) -> tuple[List[BankId], List[BankId]]:
    """Return (debtor ids, creditor ids); zero balances are in neither"""
    debtors = [bank_id for bank_id, amount in net.items() if amount < 0]
    creditors = [bank_id for bank_id, amount in net.items() if amount > 0]
    return debtors, creditors
