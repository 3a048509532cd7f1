"""Domain models - pure Python dataclasses representing settlement entities"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import FrozenSet, List, NewType, Optional

BankId = NewType("BankId", str)


@dataclass(frozen=True)
class Bank:
    """Settlement party with the payment channels it accepts"""

    id: BankId
    name: str
    payment_types: FrozenSet[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class DirectedTransaction:
    """Debt owed by `debtor` to `creditor`"""

    debtor: BankId
    creditor: BankId
    amount: Decimal


@dataclass
class QueueEntry:
    """Priority queue item: remaining magnitude of a bank's net position"""

    magnitude: Decimal
    bank_id: BankId


@dataclass
class SettlementTransfer:
    """Single payment proposed by the optimizer"""

    from_name: str
    from_id: BankId
    to_name: str
    to_id: BankId
    amount: Decimal  # Rounded to cents


@dataclass
class NetBalance:
    """Reported net position of a bank, rounded to cents"""

    bank_id: BankId
    name: str
    amount: Decimal  # > 0 owed money, < 0 owes money


@dataclass
class UnsettledBalance:
    """Remaining position the matcher could not pair with a compatible bank"""

    bank_id: BankId
    name: str
    amount: Decimal  # Signed like NetBalance


@dataclass
class SettlementResult:
    """Output of a settlement optimization run"""

    original_count: int
    optimized_count: int
    savings: int  # Negative when the plan has more transfers than the input
    settlements: List[SettlementTransfer]
    net_balances: List[NetBalance]
    unsettled: Optional[List[UnsettledBalance]] = None


@dataclass
class PartyTotal:
    """Named amount used in overview summaries"""

    name: str
    amount: Decimal


@dataclass
class ActivityCount:
    """Bank with the number of transactions it takes part in"""

    name: str
    count: int


@dataclass
class OverviewSummary:
    """Dashboard totals computed over a bank/transaction snapshot"""

    total_banks: int
    total_transactions: int
    total_volume: Decimal
    total_debt: Decimal
    total_credit: Decimal
    most_active_bank: Optional[ActivityCount]
    top_debtor: Optional[PartyTotal]
    top_creditor: Optional[PartyTotal]
