"""Realtime Inspector configuration."""
import os
from pathlib import Path


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_choice(name: str, choices: set[str], default: str) -> str:
    value = (os.getenv(name) or "").strip().lower()
    return value if value in choices else default


# Log discovery (defaults to the working directory the server is started from)
LOG_DIR = Path(os.getenv("REALTIME_INSPECTOR_LOG_DIR", os.getcwd())).resolve()
LOG_SUFFIX = os.getenv("REALTIME_INSPECTOR_LOG_SUFFIX", ".log")

# Engine behaviour
CURRENT_SESSION_POLICY = _env_choice("REALTIME_INSPECTOR_CURRENT_SESSION", {"first", "last"}, "last")
MAX_WARNINGS = _env_int("REALTIME_INSPECTOR_MAX_WARNINGS", 200)

# Observability
OTEL_ENABLED = _env_bool("REALTIME_INSPECTOR_OTEL_ENABLED", False)
OTEL_ENDPOINT = os.getenv("REALTIME_INSPECTOR_OTEL_ENDPOINT", "http://localhost:4318")
OTEL_SERVICE_NAME = os.getenv("REALTIME_INSPECTOR_OTEL_SERVICE_NAME", "realtime-inspector")
PROM_PORT = _env_int("REALTIME_INSPECTOR_PROM_PORT", 9464)

# Server settings
HOST = os.getenv("REALTIME_INSPECTOR_HOST", "0.0.0.0")
PORT = _env_int("REALTIME_INSPECTOR_PORT", 8000)

# CORS
FRONTEND_ORIGIN = os.getenv("REALTIME_INSPECTOR_FRONTEND_ORIGIN", "http://localhost:3000")
