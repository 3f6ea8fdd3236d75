"""Account ledger: wallet balances consumed by settlement and top-up."""
import logging
from typing import Protocol

from sqlalchemy.orm import Session

from charging_core.errors import AccountNotFound, InsufficientFunds, InvalidAmount
from repositories import account_repository

LOG = logging.getLogger(__name__)


class AccountLedger(Protocol):
    """Balance operations. None of them commit; the caller owns the transaction."""

    def get_balance(self, db: Session, account_id: str) -> float: ...

    def debit(self, db: Session, account_id: str, amount: float) -> None: ...

    def credit(self, db: Session, account_id: str, amount: float) -> None: ...


class SqlAccountLedger:
    """AccountLedger over the account table. Debit is one conditional UPDATE, so check and debit are atomic."""

    def get_balance(self, db: Session, account_id: str) -> float:
        balance = account_repository.read_balance(db, account_id)
        if balance is None:
            raise AccountNotFound(f"account {account_id} not found")
        return float(balance)

    def debit(self, db: Session, account_id: str, amount: float) -> None:
        if amount < 0:
            raise InvalidAmount(f"debit amount must not be negative, got {amount}")
        if account_repository.debit_if_sufficient(db, account_id, amount):
            LOG.info("Debited %.2f from account %s", amount, account_id)
            return
        balance = self.get_balance(db, account_id)
        LOG.warning("Debit of %.2f refused for account %s (balance %.2f)", amount, account_id, balance)
        raise InsufficientFunds(f"wallet balance {balance:.2f} is less than {amount:.2f}")

    def credit(self, db: Session, account_id: str, amount: float) -> None:
        if amount <= 0:
            raise InvalidAmount(f"top-up amount must be positive, got {amount}")
        if not account_repository.credit(db, account_id, amount):
            raise AccountNotFound(f"account {account_id} not found")
        LOG.info("Credited %.2f to account %s", amount, account_id)
