"""
Athlete self check-in login: pick a name, type the access code.

Access codes are not unique across athletes; a code only unlocks the athlete
it is compared against. There is no master code.
"""
from __future__ import annotations
import logging
from typing import Dict, List, Optional

from pydantic import ValidationError

from .adapters import BackendAdapter
from .constants import ATHLETES_TABLE
from .models import Athlete, athlete_from_row

logger = logging.getLogger(__name__)

async def login_choices(adapter: BackendAdapter, table: str = ATHLETES_TABLE) -> List[Dict[str, str]]:
    res = await adapter.select(table, columns="id, name", order="name")
    if not res.ok:
        logger.warning("Could not load athlete names: %s", res.error.message)
        return []
    return [{"id": str(r.get("id")), "name": str(r.get("name") or "")} for r in res.data or []]

def verify_access_code(athlete: Athlete, code: str) -> bool:
    stored = (athlete.access_code or "").strip().upper()
    entered = (code or "").strip().upper()
    return bool(stored) and stored == entered

async def login(adapter: BackendAdapter, athlete_id: str, code: str,
                table: str = ATHLETES_TABLE) -> Optional[Athlete]:
    res = await adapter.select(table, eq={"id": athlete_id}, limit=1)
    if not res.ok or not res.data:
        logger.info("Login failed: athlete %s not found", athlete_id)
        return None
    try:
        athlete = athlete_from_row(res.data[0])
    except ValidationError as exc:
        logger.error("Stored athlete %s is unreadable: %s", athlete_id, exc)
        return None
    return athlete if verify_access_code(athlete, code) else None
