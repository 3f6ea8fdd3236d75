"""Read-only event snapshots handed to the notification/reporting sink."""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from charging_core.timing import utcnow

LOG = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ChargingEvent:
    """Something that happened to a charger, session or payment."""

    kind: str
    charger_id: str | None = None
    session_id: str | None = None
    payment_id: str | None = None
    amount: float | None = None
    detail: str | None = None
    occurred_at: datetime = field(default_factory=utcnow)


class EventSink(Protocol):
    def publish(self, event: ChargingEvent) -> None: ...


class LoggingEventSink:
    """Default sink: writes each event to the log."""

    def publish(self, event: ChargingEvent) -> None:
        LOG.info(
            "event=%s charger=%s session=%s payment=%s amount=%s detail=%s",
            event.kind,
            event.charger_id,
            event.session_id,
            event.payment_id,
            event.amount,
            event.detail,
        )
