"""Charger registry: occupancy of chargers (reserve, release, fault).

Every status write is a conditional UPDATE guarded by the expected prior status,
so two workers racing on one charger cannot both win, even across processes.
"""
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from charging_core.errors import ChargerNotFound, ChargerUnavailable
from charging_core.states import ChargerStatus
from charging_core.timing import utcnow
from models.charger import Charger as ChargerModel
from repositories import charger_repository
from utils.config import RELEASE_RETRY_ATTEMPTS, RELEASE_RETRY_DELAY_S

LOG = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ChargerSnapshot:
    """Immutable copy of a charger row."""

    id: str
    station_id: str
    name: str
    connector_type: str
    power_kw: float
    price_per_kwh: float
    status: ChargerStatus
    fault_reason: str | None = None

    @classmethod
    def from_row(cls, row: ChargerModel) -> "ChargerSnapshot":
        return cls(
            id=row.id,
            station_id=row.station_id,
            name=row.name,
            connector_type=row.connector_type,
            power_kw=float(row.power_kw),
            price_per_kwh=float(row.price_per_kwh),
            status=ChargerStatus(row.status),
            fault_reason=row.fault_reason,
        )


class ChargerRegistry:
    """Owns charger status. Each mutating call commits its own transaction."""

    def __init__(
        self,
        *,
        retry_attempts: int = RELEASE_RETRY_ATTEMPTS,
        retry_delay_s: float = RELEASE_RETRY_DELAY_S,
        clock: Callable[[], datetime] = utcnow,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._retry_attempts = max(1, retry_attempts)
        self._retry_delay_s = retry_delay_s
        self._clock = clock
        self._sleep = sleep

    def get(self, db: Session, charger_id: str) -> ChargerSnapshot:
        """Return a fresh snapshot or raise ChargerNotFound."""
        row = charger_repository.get_charger(db, charger_id, fresh=True)
        if row is None:
            raise ChargerNotFound(f"charger {charger_id} not found")
        return ChargerSnapshot.from_row(row)

    def reserve(self, db: Session, charger_id: str) -> ChargerSnapshot:
        """AVAILABLE -> OCCUPIED, or raise ChargerUnavailable / ChargerNotFound."""
        swapped = charger_repository.transition_status(
            db,
            charger_id,
            expected=[ChargerStatus.AVAILABLE.value],
            new_status=ChargerStatus.OCCUPIED.value,
            changed_at=self._clock(),
        )
        if not swapped:
            row = charger_repository.get_charger(db, charger_id, fresh=True)
            current = row.status if row is not None else None
            db.commit()
            if current is None:
                raise ChargerNotFound(f"charger {charger_id} not found")
            LOG.warning("Reserve rejected: charger %s is %s", charger_id, current)
            raise ChargerUnavailable(f"charger {charger_id} is {current}")
        db.commit()
        LOG.info("Charger %s reserved", charger_id)
        return self.get(db, charger_id)

    def release(self, db: Session, charger_id: str) -> bool:
        """OCCUPIED -> AVAILABLE. Returns False (no error) when the charger was not OCCUPIED.

        An OUT_OF_ORDER charger stays out of order.
        """
        swapped = charger_repository.transition_status(
            db,
            charger_id,
            expected=[ChargerStatus.OCCUPIED.value],
            new_status=ChargerStatus.AVAILABLE.value,
            changed_at=self._clock(),
        )
        db.commit()
        if swapped:
            LOG.info("Charger %s released", charger_id)
        else:
            LOG.debug("Release of charger %s was a no-op", charger_id)
        return swapped

    def release_with_retry(self, db: Session, charger_id: str) -> bool:
        """Release, retrying storage failures. Returns True once the release went through."""
        for attempt in range(1, self._retry_attempts + 1):
            try:
                self.release(db, charger_id)
                return True
            except SQLAlchemyError:
                LOG.warning(
                    "Release of charger %s failed (attempt %d/%d)",
                    charger_id,
                    attempt,
                    self._retry_attempts,
                    exc_info=True,
                )
                db.rollback()
                if attempt < self._retry_attempts:
                    self._sleep(self._retry_delay_s)
        LOG.error("Charger %s could not be released after %d attempts", charger_id, self._retry_attempts)
        return False

    def mark_fault(self, db: Session, charger_id: str, reason: str) -> ChargerSnapshot:
        """Force OUT_OF_ORDER whatever the current status."""
        swapped = charger_repository.transition_status(
            db,
            charger_id,
            expected=[s.value for s in ChargerStatus],
            new_status=ChargerStatus.OUT_OF_ORDER.value,
            changed_at=self._clock(),
            fault_reason=reason,
        )
        db.commit()
        if not swapped:
            raise ChargerNotFound(f"charger {charger_id} not found")
        LOG.info("Charger %s marked OUT_OF_ORDER: %s", charger_id, reason)
        return self.get(db, charger_id)
