# roster_core/progress.py
from __future__ import annotations
import re
from typing import List, Literal, Optional, Sequence

from .models import ProgressSample

Trend = Literal["up", "down", "flat"]

_TIME = re.compile(r"^\s*(\d+):(\d{1,2})(?::(\d{1,2}))?\s*$")

def metric_value(raw: Optional[str]) -> Optional[float]:
    """
    Read a free-text metric. Plain numbers ("100", "102.5", "100 kg") are
    taken as-is; "m:ss" / "h:mm:ss" become seconds. Anything else is None.
    """
    if raw is None:
        return None
    s = str(raw).strip().replace(",", ".")
    if not s:
        return None
    m = _TIME.match(s)
    if m:
        a, b, c = m.group(1), m.group(2), m.group(3)
        if c is None:
            return int(a) * 60 + int(b)
        return int(a) * 3600 + int(b) * 60 + int(c)
    num = re.match(r"^\s*(-?\d+(?:\.\d+)?)", s)
    return float(num.group(1)) if num else None

def trend(samples: Sequence[ProgressSample]) -> Trend:
    """Direction of the last change between the two most recent readable samples."""
    values: List[float] = [v for v in (metric_value(s.value) for s in samples) if v is not None]
    if len(values) < 2:
        return "flat"
    prev, last = values[-2], values[-1]
    if last > prev:
        return "up"
    if last < prev:
        return "down"
    return "flat"
