"""Account model: driver account holding a prepaid wallet balance."""
import uuid

from sqlalchemy import CheckConstraint, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from models import Base


class Account(Base):
    """Account table: id, email, full_name, wallet_balance (never negative)."""

    __tablename__ = "account"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    wallet_balance: Mapped[float] = mapped_column(
        Numeric(14, 2, asdecimal=False), nullable=False, default=0.0
    )

    __table_args__ = (CheckConstraint("wallet_balance >= 0", name="ck_account_wallet_non_negative"),)
