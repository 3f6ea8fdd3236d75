"""Cost calculator: price a session from delivered energy and the charger's unit price."""
import math

from charging_core.errors import InvalidMeasurement


def validate_energy(energy_kwh: float | None) -> float:
    """Return energy as float; reject missing, negative or non-finite readings."""
    if energy_kwh is None:
        raise InvalidMeasurement("energy consumed is required")
    try:
        value = float(energy_kwh)
    except (TypeError, ValueError) as e:
        raise InvalidMeasurement(f"energy consumed is not a number: {energy_kwh!r}") from e
    if not math.isfinite(value) or value < 0:
        raise InvalidMeasurement(f"energy consumed must be a non-negative number, got {energy_kwh!r}")
    return value


def validate_soc(soc: int | None) -> int | None:
    """State of charge is optional; when given it must lie in 0..100."""
    if soc is None:
        return None
    if not 0 <= soc <= 100:
        raise InvalidMeasurement(f"state of charge must be between 0 and 100, got {soc}")
    return soc


def calculate_cost(energy_kwh: float, price_per_kwh: float) -> float:
    """cost = energy x price, rounded to 2 decimals.

    Uses the price passed in (the charger's current price); nothing is locked at session start.
    """
    energy = validate_energy(energy_kwh)
    if price_per_kwh is None or not math.isfinite(price_per_kwh) or price_per_kwh < 0:
        raise ValueError(f"charger price must be a non-negative number, got {price_per_kwh!r}")
    return round(energy * float(price_per_kwh), 2)
