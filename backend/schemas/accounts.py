"""Pydantic schemas for account and wallet API."""
from pydantic import BaseModel, Field


class AccountCreate(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    full_name: str = Field(min_length=1, max_length=255)
    initial_balance: float = Field(default=0.0, ge=0)


class AccountResponse(BaseModel):
    id: str
    email: str
    full_name: str
    wallet_balance: float


class WalletResponse(BaseModel):
    account_id: str
    balance: float


class TopUpRequest(BaseModel):
    """amount must be positive; checked by the core so it maps to invalid_amount."""

    amount: float
