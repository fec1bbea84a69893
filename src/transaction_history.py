from decimal import Decimal
from typing import Dict, Optional

from errors import (
    ClientMismatchError,
    DuplicateTransactionError,
    InvalidStateError,
    UnknownTransactionError,
)
from models import DisputeState, StoredTransaction


class TransactionHistory:
    """
    Deposits seen so far and the dispute state of each.

    State machine per deposit:

        POSTED <-> DISPUTED -> CHARGED_BACK

    POSTED/DISPUTED may cycle any number of times. CHARGED_BACK is terminal.
    Entries are never removed, so a second chargeback is always rejected.
    """

    def __init__(self):
        self._transactions: Dict[int, StoredTransaction] = {}

    def __len__(self) -> int:
        return len(self._transactions)

    def get(self, transaction_id: int) -> Optional[StoredTransaction]:
        """Retrieve stored transaction by ID."""
        return self._transactions.get(transaction_id)

    def record_deposit(self, transaction_id: int, client_id: int, amount: Decimal) -> StoredTransaction:
        if transaction_id in self._transactions:
            raise DuplicateTransactionError(transaction_id, client_id)
        stored = StoredTransaction(transaction_id=transaction_id, client_id=client_id, amount=amount)
        self._transactions[transaction_id] = stored
        return stored

    def disputable(self, transaction_id: int, claimed_client_id: int) -> StoredTransaction:
        """Return the deposit if a dispute on it would be accepted, without changing its state."""
        stored = self._owned(transaction_id, claimed_client_id)
        match stored.dispute_state:
            case DisputeState.POSTED:
                return stored
            case DisputeState.DISPUTED | DisputeState.CHARGED_BACK:
                raise InvalidStateError(transaction_id, stored.dispute_state, "dispute", claimed_client_id)

    def begin_dispute(self, transaction_id: int, claimed_client_id: int) -> StoredTransaction:
        stored = self.disputable(transaction_id, claimed_client_id)
        stored.dispute_state = DisputeState.DISPUTED
        return stored

    def resolve_dispute(self, transaction_id: int, claimed_client_id: int) -> StoredTransaction:
        stored = self._owned(transaction_id, claimed_client_id)
        match stored.dispute_state:
            case DisputeState.DISPUTED:
                stored.dispute_state = DisputeState.POSTED
                return stored
            case DisputeState.POSTED | DisputeState.CHARGED_BACK:
                raise InvalidStateError(transaction_id, stored.dispute_state, "resolve", claimed_client_id)

    def chargeback(self, transaction_id: int, claimed_client_id: int) -> StoredTransaction:
        stored = self._owned(transaction_id, claimed_client_id)
        match stored.dispute_state:
            case DisputeState.DISPUTED:
                stored.dispute_state = DisputeState.CHARGED_BACK
                return stored
            case DisputeState.POSTED | DisputeState.CHARGED_BACK:
                raise InvalidStateError(transaction_id, stored.dispute_state, "charge back", claimed_client_id)

    def _owned(self, transaction_id: int, claimed_client_id: int) -> StoredTransaction:
        stored = self._transactions.get(transaction_id)
        if stored is None:
            raise UnknownTransactionError(transaction_id, claimed_client_id)
        if stored.client_id != claimed_client_id:
            raise ClientMismatchError(transaction_id, stored.client_id, claimed_client_id)
        return stored
