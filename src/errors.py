"""
Per-record ledger errors.

Every error carries a machine-readable ``code`` so that callers can count and
report rejections by type rather than by message. None of them is fatal: the
ledger engine catches LedgerError at the boundary of a single record and moves
on to the next one.
"""

from typing import Optional


class LedgerError(Exception):
    """Base class for all rejections raised while applying a record."""

    code = "ledger_error"

    def __init__(self, message: str, client_id: Optional[int] = None, transaction_id: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.client_id = client_id
        self.transaction_id = transaction_id


class AccountLockedError(LedgerError):
    code = "account_locked"

    def __init__(self, client_id: int, transaction_id: Optional[int] = None):
        super().__init__(f"Account {client_id} is locked", client_id, transaction_id)


class DuplicateTransactionError(LedgerError):
    code = "duplicate_transaction"

    def __init__(self, transaction_id: int, client_id: Optional[int] = None):
        super().__init__(f"Transaction {transaction_id} already exists", client_id, transaction_id)


class InsufficientFundsError(LedgerError):
    code = "insufficient_funds"

    def __init__(self, client_id: int, available, requested, transaction_id: Optional[int] = None):
        super().__init__(
            f"Account {client_id} has {available} available, {requested} requested",
            client_id,
            transaction_id,
        )
        self.available = available
        self.requested = requested


class UnknownTransactionError(LedgerError):
    code = "unknown_transaction"

    def __init__(self, transaction_id: int, client_id: Optional[int] = None):
        super().__init__(f"No deposit with transaction id {transaction_id}", client_id, transaction_id)


class ClientMismatchError(LedgerError):
    code = "client_mismatch"

    def __init__(self, transaction_id: int, owner_client_id: int, claimed_client_id: int):
        super().__init__(
            f"Transaction {transaction_id} belongs to client {owner_client_id}, not {claimed_client_id}",
            claimed_client_id,
            transaction_id,
        )
        self.owner_client_id = owner_client_id


class InvalidStateError(LedgerError):
    code = "invalid_state"

    def __init__(self, transaction_id: int, state, operation: str, client_id: Optional[int] = None):
        super().__init__(
            f"Cannot {operation} transaction {transaction_id} in state {state.value}",
            client_id,
            transaction_id,
        )
        self.state = state
        self.operation = operation


class MalformedRecordError(LedgerError):
    code = "malformed_record"
