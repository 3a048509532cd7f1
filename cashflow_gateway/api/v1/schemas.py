"""Pydantic schemas for API request/response validation"""

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from cashflow_gateway.domain.models import Bank, BankId, DirectedTransaction


class BankSchema(BaseModel):
    """Bank snapshot entry"""

    id: str = Field(..., min_length=1, description="Bank identifier")
    name: str = Field(..., min_length=1, description="Display name")
    payment_types: List[str] = Field(..., min_length=1, description="Supported payment channels, e.g. UPI, WIRE")

    def to_domain(self) -> Bank:
        return Bank(id=BankId(self.id), name=self.name, payment_types=frozenset(self.payment_types))


class TransactionSchema(BaseModel):
    """Debt from `debtor` to `creditor`"""

    debtor: str = Field(..., min_length=1)
    creditor: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0, description="Amount owed")

    @model_validator(mode="after")
    def check_distinct_parties(self) -> "TransactionSchema":
        if self.debtor == self.creditor:
            raise ValueError("Debtor and creditor must be different banks")
        return self

    def to_domain(self) -> DirectedTransaction:
        return DirectedTransaction(
            debtor=BankId(self.debtor),
            creditor=BankId(self.creditor),
            amount=self.amount,
        )


class SnapshotRequest(BaseModel):
    """Banks plus the transactions between them"""

    banks: List[BankSchema]
    transactions: List[TransactionSchema]


class OptimizeRequest(SnapshotRequest):
    """Request body for POST /v1/optimize"""

    user_id: str = Field(..., min_length=1, description="Owner of the snapshot")
    strict: bool = Field(False, description="Reject transactions naming unknown banks")
    report_unsettled: bool = Field(False, description="Include positions the matcher could not pair")


class SettlementSchema(BaseModel):
    """Single proposed transfer"""

    from_name: str
    from_id: str
    to_name: str
    to_id: str
    amount: float


class BalanceSchema(BaseModel):
    """Signed bank position rounded to cents"""

    bank_id: str
    name: str
    amount: float


class OptimizeResponse(BaseModel):
    """Response for POST /v1/optimize and GET /v1/optimize/{run_id}"""

    run_id: str
    original_count: int
    optimized_count: int
    savings: int
    settlements: List[SettlementSchema]
    net_balances: List[BalanceSchema]
    unsettled: Optional[List[BalanceSchema]] = None


class RunHistoryItem(BaseModel):
    """Single run in history"""

    run_id: str
    original_count: int
    optimized_count: int
    savings: int
    created_at: str


class RunHistoryResponse(BaseModel):
    """Response for GET /v1/optimize/history"""

    user_id: str
    runs: List[RunHistoryItem]


class PartyTotalSchema(BaseModel):
    name: str
    amount: float


class ActivitySchema(BaseModel):
    name: str
    count: int


class OverviewResponse(BaseModel):
    """Response for POST /v1/analytics/overview"""

    total_banks: int
    total_transactions: int
    total_volume: float
    total_debt: float
    total_credit: float
    most_active_bank: Optional[ActivitySchema] = None
    top_debtor: Optional[PartyTotalSchema] = None
    top_creditor: Optional[PartyTotalSchema] = None
