"""Build response schemas from core views and DB rows."""
from charging_core.projections import Receipt, format_duration
from charging_core.registry import ChargerSnapshot
from charging_core.service import Invoice, SessionView, StationBoard
from charging_core.states import ChargerStatus
from models.payment import Payment
from schemas.chargers import ChargerSummary
from schemas.payments import InvoiceResponse, PaymentResponse, ReceiptResponse
from schemas.sessions import SessionSummary
from schemas.stations import StationChargerStatus, StationStatusResponse


def charger_summary(snapshot: ChargerSnapshot) -> ChargerSummary:
    return ChargerSummary(
        id=snapshot.id,
        station_id=snapshot.station_id,
        name=snapshot.name,
        connector_type=snapshot.connector_type,
        power_kw=snapshot.power_kw,
        price_per_kwh=snapshot.price_per_kwh,
        status=snapshot.status.value,
        fault_reason=snapshot.fault_reason,
    )


def session_summary(view: SessionView) -> SessionSummary:
    s = view.session
    return SessionSummary(
        id=s.id,
        token=s.token,
        charger_id=s.charger_id,
        account_id=s.account_id,
        vehicle_plate=s.vehicle_plate,
        status=s.status,
        start_time=s.start_time,
        end_time=s.end_time,
        start_soc=s.start_soc,
        end_soc=s.end_soc,
        energy_kwh=s.energy_kwh,
        total_cost=s.total_cost,
        payment_id=s.payment_id,
        elapsed_seconds=view.projection.elapsed_seconds,
        estimated_cost=view.projection.estimated_cost,
    )


def payment_response(payment: Payment) -> PaymentResponse:
    return PaymentResponse(
        id=payment.id,
        session_id=payment.session_id,
        account_id=payment.account_id,
        amount=float(payment.amount),
        method=payment.method,
        status=payment.status,
        created_at=payment.created_at,
    )


def receipt_response(receipt: Receipt) -> ReceiptResponse:
    return ReceiptResponse(amount=receipt.amount, amount_received=receipt.amount_received, change=receipt.change)


def invoice_response(invoice: Invoice) -> InvoiceResponse:
    s = invoice.session
    return InvoiceResponse(
        session_id=s.id,
        token=s.token,
        status=s.status,
        station_name=invoice.station_name,
        charger_id=invoice.charger.id,
        charger_name=invoice.charger.name,
        price_per_kwh=invoice.charger.price_per_kwh,
        energy_kwh=s.energy_kwh,
        total_cost=s.total_cost,
        start_time=s.start_time,
        end_time=s.end_time,
        duration=format_duration(invoice.projection.elapsed_seconds),
        payment=payment_response(invoice.payment) if invoice.payment is not None else None,
    )


def station_status(board: StationBoard) -> StationStatusResponse:
    return StationStatusResponse(
        station_id=board.station_id,
        station_name=board.station_name,
        total_chargers=len(board.chargers),
        available=board.count(ChargerStatus.AVAILABLE),
        occupied=board.count(ChargerStatus.OCCUPIED),
        out_of_order=board.count(ChargerStatus.OUT_OF_ORDER),
        chargers=[
            StationChargerStatus(
                charger=charger_summary(charger),
                active_session=session_summary(view) if view is not None else None,
            )
            for charger, view in board.chargers
        ],
    )
