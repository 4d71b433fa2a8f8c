"""Numeric coercion shared by every aggregation step."""

from __future__ import annotations

import logging
import math
from typing import Any

logger = logging.getLogger(__name__)


def coerce_float(value: Any, *, fallback: float = 0.0) -> float:
    """Return ``value`` as a finite float, or ``fallback``.

    ``None``, unparsable strings, NaN and infinities all map to the
    fallback. Never raises.
    """

    if value is None:
        return fallback
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        logger.debug("Failed to coerce %r to float; using fallback %s", value, fallback)
        return fallback
    if not math.isfinite(number):
        return fallback
    return number
