"""
Backend adapters: one async table interface over either a Supabase project
or an in-memory table set.

Every operation resolves to an AdapterResult; failures travel in `error`,
nothing is raised to the caller.
"""
from __future__ import annotations
import asyncio
import logging
from abc import ABC, abstractmethod
from copy import deepcopy
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .config import AppConfig, load_fixtures
from .models import AdapterResult, new_temp_id, unknown_fields

logger = logging.getLogger(__name__)

Row = Dict[str, Any]

def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()

def _sort_key(col: str):
    # rows missing the column (or holding None) sort lowest
    def key(row: Row):
        v = row.get(col)
        if v is None:
            return (0, 0, "")
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return (1, 0, v)
        if isinstance(v, str):
            return (1, 1, v)
        return (1, 2, str(v))
    return key

def _check_columns(table: str, rows: List[Row]) -> Optional[AdapterResult]:
    bad = sorted({k for r in rows for k in unknown_fields(table, r)})
    if bad:
        return AdapterResult.fail(f"Unknown column(s) for {table}: {', '.join(bad)}", code="unknown_column")
    return None

class BackendAdapter(ABC):
    """Capability interface shared by the remote and local-only stores."""

    name = "backend"

    @abstractmethod
    async def select(self, table: str, columns: str = "*", eq: Optional[Dict[str, Any]] = None,
                     order: Optional[str] = None, ascending: bool = True,
                     limit: Optional[int] = None) -> AdapterResult: ...

    @abstractmethod
    async def insert(self, table: str, rows: List[Row]) -> AdapterResult: ...

    @abstractmethod
    async def update(self, table: str, fields: Row, column: str, value: Any) -> AdapterResult: ...

    @abstractmethod
    async def delete(self, table: str, column: str, value: Any) -> AdapterResult: ...

    @abstractmethod
    async def upsert(self, table: str, rows: List[Row], on_conflict: str = "id") -> AdapterResult: ...

# -----------------------
# Local-only store
# -----------------------
class InMemoryAdapter(BackendAdapter):
    """
    Tables live in process memory, seeded with fixture rows. Writes apply
    synchronously; each call still yields once to the event loop so callers
    see the same calling convention as the network client.
    """

    name = "memory"

    def __init__(self, fixtures: Optional[Dict[str, List[Row]]] = None, warn: bool = True):
        self.tables: Dict[str, List[Row]] = deepcopy(fixtures) if fixtures is not None else {}
        self.warn = warn

    @classmethod
    def from_config(cls, config: AppConfig) -> "InMemoryAdapter":
        return cls(load_fixtures(config.fixtures_path))

    def _warn(self, op: str, table: str):
        if self.warn:
            logger.warning("Backend not configured: %s on '%s' served from local memory only.", op, table)

    @staticmethod
    def _project(row: Row, columns: str) -> Row:
        if columns.strip() == "*":
            return deepcopy(row)
        cols = [c.strip() for c in columns.split(",") if c.strip()]
        return {c: deepcopy(row.get(c)) for c in cols}

    async def select(self, table, columns="*", eq=None, order=None, ascending=True, limit=None):
        self._warn("select", table)
        rows = self.tables.get(table, [])
        if eq:
            rows = [r for r in rows if all(r.get(c) == v for c, v in eq.items())]
        if order:
            rows = sorted(rows, key=_sort_key(order), reverse=not ascending)
        if limit is not None:
            rows = rows[:max(limit, 0)]
        out = [self._project(r, columns) for r in rows]
        await asyncio.sleep(0)
        return AdapterResult(data=out)

    async def insert(self, table, rows):
        self._warn("insert", table)
        rejected = _check_columns(table, rows)
        if rejected:
            await asyncio.sleep(0)
            return rejected
        stored = []
        for r in rows:
            row = deepcopy(r)
            if not row.get("id"):
                row["id"] = new_temp_id()
            row.setdefault("created_at", _now_iso())
            stored.append(row)
        self.tables.setdefault(table, []).extend(stored)
        await asyncio.sleep(0)
        return AdapterResult(data=deepcopy(stored))

    async def update(self, table, fields, column, value):
        self._warn("update", table)
        rejected = _check_columns(table, [fields])
        if rejected:
            await asyncio.sleep(0)
            return rejected
        touched = []
        for row in self.tables.get(table, []):
            if row.get(column) == value:
                row.update(deepcopy(fields))
                touched.append(deepcopy(row))
        await asyncio.sleep(0)
        return AdapterResult(data=touched)

    async def delete(self, table, column, value):
        self._warn("delete", table)
        rows = self.tables.get(table, [])
        removed = []
        for i, row in enumerate(rows):
            if row.get(column) == value:
                removed.append(rows.pop(i))
                break
        await asyncio.sleep(0)
        return AdapterResult(data=removed)

    async def upsert(self, table, rows, on_conflict="id"):
        self._warn("upsert", table)
        rejected = _check_columns(table, rows)
        if rejected:
            await asyncio.sleep(0)
            return rejected
        current = self.tables.setdefault(table, [])
        stored = []
        for r in rows:
            row = deepcopy(r)
            key = row.get(on_conflict)
            match = next((x for x in current if key is not None and x.get(on_conflict) == key), None)
            if match is not None:
                match.update(row)
                stored.append(deepcopy(match))
                continue
            if on_conflict == "id" and not row.get("id"):
                row["id"] = new_temp_id()
            row.setdefault("created_at", _now_iso())
            current.append(row)
            stored.append(deepcopy(row))
        await asyncio.sleep(0)
        return AdapterResult(data=stored)

# -----------------------
# Supabase
# -----------------------
class SupabaseAdapter(BackendAdapter):
    """
    Wraps a supabase Client. Query builders are assembled on the caller's
    thread; the blocking `.execute()` runs in a worker thread.
    """

    name = "supabase"

    def __init__(self, client):
        self.client = client

    @classmethod
    def from_config(cls, config: AppConfig) -> "SupabaseAdapter":
        from supabase import create_client
        return cls(create_client(config.supabase_url, config.supabase_key))

    async def _run(self, op: str, table: str, query) -> AdapterResult:
        try:
            resp = await asyncio.to_thread(query.execute)
        except Exception as exc:
            # postgrest APIError carries message/code/details; anything else is transport
            logger.error("Supabase %s on '%s' failed: %s", op, table, exc)
            return AdapterResult.fail(
                str(getattr(exc, "message", None) or exc),
                code=getattr(exc, "code", None),
                details=getattr(exc, "details", None),
            )
        data = getattr(resp, "data", None)
        return AdapterResult(data=data if data is not None else [])

    async def select(self, table, columns="*", eq=None, order=None, ascending=True, limit=None):
        q = self.client.table(table).select(columns)
        for c, v in (eq or {}).items():
            q = q.eq(c, v)
        if order:
            q = q.order(order, desc=not ascending)
        if limit is not None:
            q = q.limit(limit)
        return await self._run("select", table, q)

    async def insert(self, table, rows):
        rejected = _check_columns(table, rows)
        if rejected:
            return rejected
        return await self._run("insert", table, self.client.table(table).insert(rows))

    async def update(self, table, fields, column, value):
        rejected = _check_columns(table, [fields])
        if rejected:
            return rejected
        return await self._run("update", table, self.client.table(table).update(fields).eq(column, value))

    async def delete(self, table, column, value):
        return await self._run("delete", table, self.client.table(table).delete().eq(column, value))

    async def upsert(self, table, rows, on_conflict="id"):
        rejected = _check_columns(table, rows)
        if rejected:
            return rejected
        return await self._run("upsert", table, self.client.table(table).upsert(rows, on_conflict=on_conflict))

def make_adapter(config: AppConfig) -> BackendAdapter:
    """Pick the adapter once, at startup, from the configuration check."""
    if config.remote_configured:
        return SupabaseAdapter.from_config(config)
    logger.warning("SUPABASE_URL/SUPABASE_KEY not set; running in local-only demo mode.")
    return InMemoryAdapter.from_config(config)
