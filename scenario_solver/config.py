"""Environment-driven defaults for the scenario engine."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

from .errors import ConfigurationError

# Load .env from project root so local overrides work regardless of cwd
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

DEFAULT_PASS_RATIO = 0.7
DEFAULT_LOG_LEVEL = "INFO"


def get_default_pass_ratio() -> float:
    """Return the engine-wide pass ratio (SCENARIO_PASS_RATIO, default 0.7)."""
    raw = os.getenv("SCENARIO_PASS_RATIO")
    if raw is None or raw.strip() == "":
        return DEFAULT_PASS_RATIO
    try:
        ratio = float(raw)
    except ValueError as exc:
        raise ConfigurationError("invalid SCENARIO_PASS_RATIO", repr(raw)) from exc
    if not 0.0 <= ratio <= 1.0:
        raise ConfigurationError("SCENARIO_PASS_RATIO out of range", str(ratio))
    return ratio


def get_log_level() -> str:
    return (os.getenv("SCENARIO_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
