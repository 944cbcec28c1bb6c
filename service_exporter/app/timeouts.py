"""
Scrape timeout budget derived from the Prometheus timeout header.
"""

import math
import re
from typing import Optional, Union

SCRAPE_TIMEOUT_HEADER = "X-Prometheus-Scrape-Timeout-Seconds"

# Leave room to assemble the response once the fetch is done
SAFETY_MARGIN_SECONDS = 0.5
MARGIN_THRESHOLD_SECONDS = 3.0
MIN_TIMEOUT_SECONDS = 0.1

# ASCII decimal or exponent notation; no digit separators
_DECIMAL_RE = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def parse_timeout_hint(raw: Optional[Union[str, float]]) -> Optional[float]:
    """Parse a header value into finite seconds, or ``None`` if unusable."""
    if raw is None:
        return None
    if isinstance(raw, str):
        raw = raw.strip()
        if not _DECIMAL_RE.fullmatch(raw):
            return None
    try:
        seconds = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(seconds):
        return None
    return seconds


def resolve_scrape_timeout(hint: Optional[Union[str, float]], ceiling: float) -> Optional[float]:
    """Turn the caller's timeout hint into the internal fetch budget.

    Returns ``None`` when the hint is missing or not a finite number; the
    caller must reject the request rather than guess a budget.

    >>> resolve_scrape_timeout("3.1", 60.0)
    2.6
    >>> resolve_scrape_timeout(30.0, 10.0)
    10.0
    """
    seconds = parse_timeout_hint(hint)
    if seconds is None:
        return None

    if seconds > MARGIN_THRESHOLD_SECONDS:
        seconds -= SAFETY_MARGIN_SECONDS
    seconds = max(seconds, MIN_TIMEOUT_SECONDS)
    return min(seconds, ceiling)
