"""Utility modules."""

from src.utils.numbers import percent_half_up
from src.utils.timeutils import ensure_utc_aware, utc_now


__all__ = ["ensure_utc_aware", "percent_half_up", "utc_now"]
