"""Account repository: create, get, and atomic wallet balance updates."""
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from models.account import Account


def create_account(
    session: Session,
    *,
    email: str,
    full_name: str,
    wallet_balance: float = 0.0,
    account_id: str | None = None,
) -> Account:
    """Create an account, commit, and return it."""
    account = Account(email=email, full_name=full_name, wallet_balance=wallet_balance)
    if account_id is not None:
        account.id = account_id
    session.add(account)
    session.commit()
    session.refresh(account)
    return account


def get_account(session: Session, account_id: str) -> Optional[Account]:
    """Return account by id or None."""
    return session.get(Account, account_id)


def get_account_by_email(session: Session, email: str) -> Optional[Account]:
    """Return account by email or None."""
    return session.execute(select(Account).where(Account.email == email)).scalar_one_or_none()


def read_balance(session: Session, account_id: str) -> Optional[float]:
    """Return the stored balance (bypassing the identity map) or None if the account is unknown."""
    return session.execute(
        select(Account.wallet_balance).where(Account.id == account_id)
    ).scalar_one_or_none()


def debit_if_sufficient(session: Session, account_id: str, amount: float) -> bool:
    """Subtract amount in one conditional UPDATE guarded by balance >= amount. Does not commit."""
    result = session.execute(
        update(Account)
        .where(Account.id == account_id, Account.wallet_balance >= amount)
        .values(wallet_balance=Account.wallet_balance - amount)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def credit(session: Session, account_id: str, amount: float) -> bool:
    """Add amount to the balance. Returns False if the account is unknown. Does not commit."""
    result = session.execute(
        update(Account)
        .where(Account.id == account_id)
        .values(wallet_balance=Account.wallet_balance + amount)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1
