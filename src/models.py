from collections import Counter
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

from errors import LedgerError
from money import ZERO, add


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


# Only deposits and withdrawals carry an amount
AMOUNT_TYPES = frozenset({TransactionType.DEPOSIT, TransactionType.WITHDRAWAL})


class DisputeState(Enum):
    POSTED = "posted"
    DISPUTED = "disputed"
    CHARGED_BACK = "charged_back"


class ProcessingResult(Enum):
    SUCCESS = "success"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class StoredTransaction:
    """A deposit kept for later dispute lookups."""

    transaction_id: int
    client_id: int
    amount: Decimal
    dispute_state: DisputeState = DisputeState.POSTED


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = ZERO
    held: Decimal = ZERO
    locked: bool = False

    @property
    def total(self) -> Decimal:
        return add(self.available, self.held)


class ProcessingStats:
    """Counters for processed and rejected records, keyed by error code."""

    def __init__(self):
        self.processed = 0
        self.rejected = 0
        self.rejections: Counter = Counter()

    def record_success(self):
        self.processed += 1

    def record_rejection(self, error: LedgerError):
        self.rejected += 1
        self.rejections[error.code] += 1
