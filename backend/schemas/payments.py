"""Pydantic schemas for settlement and payment API."""
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class SettleRequest(BaseModel):
    """method is checked by the core so an unknown value maps to invalid_payment_method."""

    method: str
    amount_received: float | None = Field(default=None, ge=0)


class PaymentResponse(BaseModel):
    id: str
    session_id: str
    account_id: str | None = None
    amount: float
    method: Literal["WALLET", "CASH", "CARD"]
    status: Literal["PENDING", "COMPLETED", "FAILED"]
    created_at: datetime


class ReceiptResponse(BaseModel):
    amount: float
    amount_received: float
    change: float


class SettleResponse(BaseModel):
    payment: PaymentResponse
    receipt: ReceiptResponse
    new_wallet_balance: float | None = None


class InvoiceResponse(BaseModel):
    """Invoice for a session: what was charged, where, and how it was paid."""

    session_id: str
    token: str
    status: str
    station_name: str | None = None
    charger_id: str
    charger_name: str
    price_per_kwh: float
    energy_kwh: float | None = None
    total_cost: float | None = None
    start_time: datetime
    end_time: datetime | None = None
    duration: str
    payment: PaymentResponse | None = None
