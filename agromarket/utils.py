from __future__ import annotations

from typing import Optional, Union
import logging
import math
from datetime import date, datetime, timezone

import pandas as pd

from agromarket.config import get_settings

Number = Union[int, float]


def get_logger(name: str) -> logging.Logger:
    """Logger with a single stream handler; level comes from settings."""
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

        level = get_settings().LOG_LEVEL.upper()
        logger.setLevel(getattr(logging, level, logging.INFO))

    return logger


def is_valid_number(v: Optional[float]) -> bool:
    """Check if value is a real number (not None/NaN)."""
    try:
        return v is not None and not math.isnan(float(v))
    except (TypeError, ValueError):
        return False


def round2(v: Optional[Number]) -> Optional[float]:
    """Round a money amount to 2 decimal places; return None if invalid."""
    try:
        return None if v is None or v == "" else round(float(v), 2)
    except (TypeError, ValueError):
        return None


def to_aware_utc(v: Optional[Union[str, datetime]]) -> datetime:
    """Convert input to an aware UTC datetime."""
    if v is None:
        return datetime.now(timezone.utc)
    if isinstance(v, datetime):
        return v.astimezone(timezone.utc) if v.tzinfo else v.replace(tzinfo=timezone.utc)
    ts = pd.to_datetime(v, errors="coerce", utc=True)
    if pd.isna(ts):
        return datetime.now(timezone.utc)
    return ts.to_pydatetime()


def to_calendar_date(v: Union[str, date, datetime]) -> str:
    """Normalize a harvest date to 'YYYY-MM-DD'; raise ValueError if unparseable."""
    if isinstance(v, datetime):
        return v.date().isoformat()
    if isinstance(v, date):
        return v.isoformat()
    ts = pd.to_datetime(v, errors="coerce")
    if pd.isna(ts):
        raise ValueError(f"Not a calendar date: {v!r}")
    return ts.date().isoformat()


def amounts_match(expected: float, given: float, tolerance: float) -> bool:
    """True when two money amounts differ by no more than tolerance."""
    if not (is_valid_number(expected) and is_valid_number(given)):
        return False
    return abs(float(expected) - float(given)) <= tolerance
