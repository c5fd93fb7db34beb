"""
Small, UI-agnostic helpers shared by app.py and pages/.
"""
from __future__ import annotations
from typing import Any, Dict, List

import pandas as pd

from .constants import METRIC_FIELDS
from .models import Athlete

ROSTER_COLUMNS: List[str] = ["id", "name", "payment_status", "cut_day", "referral_source"] + METRIC_FIELDS

def roster_to_dataframe(athletes: List[Athlete]) -> pd.DataFrame:
    rows = [{c: getattr(a, c) for c in ROSTER_COLUMNS} for a in athletes]
    return pd.DataFrame(rows, columns=ROSTER_COLUMNS)

def _norm(v: Any):
    if v is None:
        return None
    try:
        if pd.isna(v):
            return None
    except (TypeError, ValueError):
        pass
    return str(v)

def changed_fields(before: pd.DataFrame, after: pd.DataFrame) -> Dict[str, Dict[str, Any]]:
    """
    Compare the roster table before/after an inline edit.
    Returns {athlete_id: {field: new_value}}; rows are matched by id.
    """
    old = {str(r["id"]): r for r in before.to_dict(orient="records")}
    out: Dict[str, Dict[str, Any]] = {}
    for r in after.to_dict(orient="records"):
        aid = str(r.get("id", ""))
        prev = old.get(aid)
        if prev is None:
            continue
        diff = {c: _norm(r.get(c)) for c in ROSTER_COLUMNS
                if c != "id" and _norm(r.get(c)) != _norm(prev.get(c))}
        if diff:
            out[aid] = diff
    return out
