"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class UnknownEntityReferenceError(DomainException):
    """Transaction references a bank id missing from the bank snapshot"""

    def __init__(self, bank_id: str):
        super().__init__(f"Transaction references unknown bank: {bank_id}")
        self.bank_id = bank_id


class LedgerDeliveryError(DomainException):
    """Ledger webhook could not be delivered after all retries"""

    pass
