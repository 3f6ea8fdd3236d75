"""Account and wallet API routes."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from api.deps import get_session_service
from api.errors import translate_errors
from api.serializers import payment_response
from charging_core.service import SessionService
from db import get_db
from repositories.account_repository import create_account as repo_create_account
from repositories.account_repository import get_account_by_email
from schemas.accounts import AccountCreate, AccountResponse, TopUpRequest, WalletResponse
from schemas.payments import PaymentResponse

router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.post("", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
def create_account(body: AccountCreate, db: Session = Depends(get_db)) -> AccountResponse:
    """Create a driver account with an optional opening wallet balance."""
    if get_account_by_email(db, body.email) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="email already registered")
    try:
        account = repo_create_account(
            db,
            email=body.email,
            full_name=body.full_name,
            wallet_balance=body.initial_balance,
        )
    except IntegrityError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="email already registered") from e
    return AccountResponse(
        id=account.id,
        email=account.email,
        full_name=account.full_name,
        wallet_balance=float(account.wallet_balance),
    )


@router.get("/{account_id}/wallet", response_model=WalletResponse)
def get_wallet(
    account_id: str,
    db: Session = Depends(get_db),
    service: SessionService = Depends(get_session_service),
) -> WalletResponse:
    """Current wallet balance."""
    with translate_errors("Wallet balance"):
        balance = service.wallet_balance(db, account_id)
    return WalletResponse(account_id=account_id, balance=balance)


@router.post("/{account_id}/wallet/topup", response_model=WalletResponse)
def top_up_wallet(
    account_id: str,
    body: TopUpRequest,
    db: Session = Depends(get_db),
    service: SessionService = Depends(get_session_service),
) -> WalletResponse:
    """Add funds to the wallet; returns the new balance."""
    with translate_errors("Wallet top-up"):
        balance = service.top_up(db, account_id, body.amount)
    return WalletResponse(account_id=account_id, balance=balance)


@router.get("/{account_id}/payments", response_model=list[PaymentResponse])
def payment_history(
    account_id: str,
    db: Session = Depends(get_db),
    service: SessionService = Depends(get_session_service),
) -> list[PaymentResponse]:
    """Payments made by this account, newest first."""
    with translate_errors("Payment history"):
        payments = service.payment_history(db, account_id)
    return [payment_response(p) for p in payments]
