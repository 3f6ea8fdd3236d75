"""Configuration from environment."""
import os

PORT = int(os.environ.get("PORT", "8001"))

# When TESTING=true, use test DB URL so tests never touch production.
if os.environ.get("TESTING") == "true":
    DATABASE_URL = os.environ.get("TESTING_DATABASE_URL", "sqlite:///:memory:")
else:
    DATABASE_URL = os.environ.get(
        "DATABASE_URL",
        "sqlite:///./charging.db",
    )

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

# Upper bound for one request's unit of work (lock wait included).
SERVICE_DEADLINE_S = float(os.environ.get("SERVICE_DEADLINE_S", "10.0"))

# Charger release after stop/cancel/failed start is retried this many times.
RELEASE_RETRY_ATTEMPTS = int(os.environ.get("RELEASE_RETRY_ATTEMPTS", "3"))
RELEASE_RETRY_DELAY_S = float(os.environ.get("RELEASE_RETRY_DELAY_S", "0.05"))

DEFAULT_PRICE_PER_KWH = float(os.environ.get("DEFAULT_PRICE_PER_KWH", "3000.0"))
