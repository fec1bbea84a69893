import logging
from decimal import Decimal
from typing import Dict, Iterable

from account_store import AccountStore
from errors import AccountLockedError, DuplicateTransactionError, LedgerError, MalformedRecordError
from models import ClientAccount, ProcessingResult, ProcessingStats, Transaction, TransactionType
from money import to_amount
from transaction_history import TransactionHistory

logger = logging.getLogger(__name__)


class LedgerEngine:
    """
    Applies transactions, one at a time and in input order, to an AccountStore
    and a TransactionHistory owned by this engine.

    A record either applies completely or is rejected without touching any
    balance. Rejections are logged and counted; they never stop the run.
    """

    def __init__(self):
        self._accounts = AccountStore()
        self._history = TransactionHistory()
        self.stats = ProcessingStats()

    def process_all(self, transactions: Iterable[Transaction]) -> Dict[int, ClientAccount]:
        for transaction in transactions:
            self.process_transaction(transaction)
        return self.accounts()

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction.

        Returns:
            SUCCESS: Applied to the stores
            REJECTED: Left every balance unchanged (see stats.rejections for the reason)
        """
        try:
            self._dispatch(transaction)
        except DuplicateTransactionError as e:
            logger.info(f"{transaction}: {e}, skipping")
            self.stats.record_rejection(e)
            return ProcessingResult.REJECTED
        except LedgerError as e:
            logger.warning(f"{transaction} rejected: {e}")
            self.stats.record_rejection(e)
            return ProcessingResult.REJECTED

        self.stats.record_success()
        return ProcessingResult.SUCCESS

    def accounts(self) -> Dict[int, ClientAccount]:
        return self._accounts.accounts()

    @property
    def history(self) -> TransactionHistory:
        return self._history

    def _dispatch(self, transaction: Transaction) -> None:
        account = self._accounts.get(transaction.client_id)
        if account is not None and account.locked:
            raise AccountLockedError(transaction.client_id, transaction.transaction_id)

        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                self._handle_deposit(transaction)
            case TransactionType.WITHDRAWAL:
                self._handle_withdrawal(transaction)
            case TransactionType.DISPUTE:
                self._handle_dispute(transaction)
            case TransactionType.RESOLVE:
                self._handle_resolve(transaction)
            case TransactionType.CHARGEBACK:
                self._handle_chargeback(transaction)

    def _handle_deposit(self, transaction: Transaction) -> None:
        amount = self._require_amount(transaction)
        self._history.record_deposit(transaction.transaction_id, transaction.client_id, amount)
        self._accounts.credit_available(transaction.client_id, amount)

    def _handle_withdrawal(self, transaction: Transaction) -> None:
        amount = self._require_amount(transaction)
        self._accounts.debit_available(transaction.client_id, amount)

    def _handle_dispute(self, transaction: Transaction) -> None:
        # Funds are held before the state change so a rejected hold leaves the deposit POSTED
        stored = self._history.disputable(transaction.transaction_id, transaction.client_id)
        self._accounts.hold(stored.client_id, stored.amount)
        self._history.begin_dispute(transaction.transaction_id, transaction.client_id)

    def _handle_resolve(self, transaction: Transaction) -> None:
        stored = self._history.resolve_dispute(transaction.transaction_id, transaction.client_id)
        self._accounts.release(stored.client_id, stored.amount)

    def _handle_chargeback(self, transaction: Transaction) -> None:
        stored = self._history.chargeback(transaction.transaction_id, transaction.client_id)
        self._accounts.capture_and_lock(stored.client_id, stored.amount)

    @staticmethod
    def _require_amount(transaction: Transaction) -> Decimal:
        if transaction.amount is None:
            raise MalformedRecordError(
                f"{transaction.transaction_type.value} requires an amount",
                transaction.client_id,
                transaction.transaction_id,
            )
        try:
            amount = to_amount(transaction.amount)
        except ValueError as e:
            raise MalformedRecordError(str(e), transaction.client_id, transaction.transaction_id)
        if amount < 0:
            raise MalformedRecordError(
                f"negative amount {amount}",
                transaction.client_id,
                transaction.transaction_id,
            )
        return amount
