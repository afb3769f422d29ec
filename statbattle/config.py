"""
Configuration - Environment driven settings.

Read once at import time. Every value has a default, so the server runs
with no environment at all.
"""

import os


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str) -> int | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return int(value)


STATBATTLE_ENV = os.getenv("STATBATTLE_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")
LOG_LEVEL = os.getenv("STATBATTLE_LOG_LEVEL", "INFO").upper()

# Adds the REVEAL acknowledgement step between rounds
REVEAL_STEP = _env_flag("STATBATTLE_REVEAL_STEP")

# Fixed seed makes every room deal the same sequence
RANDOM_SEED = _env_int("STATBATTLE_SEED")

HOST = os.getenv("STATBATTLE_HOST", "0.0.0.0")
PORT = int(os.getenv("STATBATTLE_PORT", "8787"))

# Seconds a single send may take before the connection is dropped
SEND_TIMEOUT = float(os.getenv("STATBATTLE_SEND_TIMEOUT", "5"))
