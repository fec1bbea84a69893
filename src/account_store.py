from decimal import Decimal
from typing import Dict, Optional

from errors import AccountLockedError, InsufficientFundsError
from models import ClientAccount
from money import ZERO, add, subtract


class AccountStore:
    """
    Per-client balances.
    All balance mutation goes through this class, so `available`, `held` and
    `locked` only ever change together with the checks below.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}

    def get(self, client_id: int) -> Optional[ClientAccount]:
        """Return the account if it exists, without creating it."""
        return self._accounts.get(client_id)

    def get_or_create(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        account = self._accounts.get(client_id)
        if account is None:
            account = ClientAccount(client_id=client_id)
            self._accounts[client_id] = account
        return account

    def credit_available(self, client_id: int, amount: Decimal) -> None:
        if amount < 0:
            raise ValueError(f"credit amount must not be negative: {amount}")
        account = self._unlocked(self.get_or_create(client_id))
        account.available = add(account.available, amount)

    def debit_available(self, client_id: int, amount: Decimal) -> None:
        """Withdraw from available funds. A failed debit never creates an account."""
        if amount < 0:
            raise ValueError(f"debit amount must not be negative: {amount}")
        existing = self._accounts.get(client_id)
        if existing is not None:
            self._unlocked(existing)
        available = existing.available if existing is not None else ZERO
        if available < amount:
            raise InsufficientFundsError(client_id, available, amount)

        account = self.get_or_create(client_id)
        account.available = subtract(account.available, amount)

    def hold(self, client_id: int, amount: Decimal) -> None:
        """Move disputed funds from available to held."""
        account = self._unlocked(self._accounts[client_id])
        if account.available < amount:
            raise InsufficientFundsError(client_id, account.available, amount)
        account.available = subtract(account.available, amount)
        account.held = add(account.held, amount)

    def release(self, client_id: int, amount: Decimal) -> None:
        account = self._unlocked(self._accounts[client_id])
        account.held = subtract(account.held, amount)
        account.available = add(account.available, amount)

    def capture_and_lock(self, client_id: int, amount: Decimal) -> None:
        """Remove held funds from the system and freeze the account."""
        account = self._unlocked(self._accounts[client_id])
        account.held = subtract(account.held, amount)
        account.locked = True

    def accounts(self) -> Dict[int, ClientAccount]:
        """Return all accounts (for final output)."""
        return dict(self._accounts)

    @staticmethod
    def _unlocked(account: ClientAccount) -> ClientAccount:
        if account.locked:
            raise AccountLockedError(account.client_id)
        return account
