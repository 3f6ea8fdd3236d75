"""Settlement and payment API routes."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from api.deps import get_session_service
from api.errors import translate_errors
from api.serializers import invoice_response, payment_response, receipt_response
from charging_core.service import SessionService
from charging_core.states import PaymentMethod
from db import get_db
from schemas.payments import InvoiceResponse, PaymentResponse, SettleRequest, SettleResponse

router = APIRouter(tags=["payments"])


@router.post("/sessions/{session_id}/settle", response_model=SettleResponse)
def settle_session(
    session_id: str,
    body: SettleRequest,
    db: Session = Depends(get_db),
    service: SessionService = Depends(get_session_service),
) -> SettleResponse:
    """Pay for a COMPLETED session by WALLET, CASH or CARD. A session is paid at most once."""
    with translate_errors("Settle session"):
        result = service.settle(db, session_id, body.method, amount_received=body.amount_received)
        new_balance = None
        if result.payment.method == PaymentMethod.WALLET.value and result.payment.account_id:
            new_balance = service.wallet_balance(db, result.payment.account_id)
        return SettleResponse(
            payment=payment_response(result.payment),
            receipt=receipt_response(result.receipt),
            new_wallet_balance=new_balance,
        )


@router.get("/sessions/{session_id}/invoice", response_model=InvoiceResponse)
def get_invoice(
    session_id: str,
    db: Session = Depends(get_db),
    service: SessionService = Depends(get_session_service),
) -> InvoiceResponse:
    """Invoice for a session, with its payment once settled."""
    with translate_errors("Invoice"):
        invoice = service.invoice(db, session_id)
        return invoice_response(invoice)


@router.get("/payments/{payment_id}", response_model=PaymentResponse)
def get_payment(
    payment_id: str,
    db: Session = Depends(get_db),
    service: SessionService = Depends(get_session_service),
) -> PaymentResponse:
    """Single payment by id."""
    with translate_errors("Get payment"):
        payment = service.get_payment(db, payment_id)
    return payment_response(payment)
