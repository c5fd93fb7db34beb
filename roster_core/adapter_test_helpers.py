"""
Internal helpers for tests (not imported by app).
"""
from __future__ import annotations
import asyncio
from types import SimpleNamespace
from typing import Any, Dict, List, Optional, Set

from .adapters import InMemoryAdapter
from .models import AdapterResult, Athlete

def quick_athlete(aid: str, name: str, status: str = "pending", **fields) -> Athlete:
    return Athlete(id=aid, name=name, payment_status=status, **fields)

def athlete_rows(*athletes: Athlete) -> List[Dict[str, Any]]:
    return [a.model_dump(exclude_none=True) for a in athletes]

class FailingAdapter(InMemoryAdapter):
    """In-memory store whose listed operations always come back with an error."""

    def __init__(self, fixtures=None, fail: Optional[Set[str]] = None, message: str = "forced failure"):
        super().__init__(fixtures, warn=False)
        self.fail = set(fail or ())
        self.message = message

    async def _maybe_fail(self, op: str) -> Optional[AdapterResult]:
        if op in self.fail:
            await asyncio.sleep(0)
            return AdapterResult.fail(self.message, code="forced")
        return None

    async def select(self, table, *args, **kwargs):
        return await self._maybe_fail("select") or await super().select(table, *args, **kwargs)

    async def insert(self, table, rows):
        return await self._maybe_fail("insert") or await super().insert(table, rows)

    async def update(self, table, fields, column, value):
        return await self._maybe_fail("update") or await super().update(table, fields, column, value)

    async def delete(self, table, column, value):
        return await self._maybe_fail("delete") or await super().delete(table, column, value)

    async def upsert(self, table, rows, on_conflict="id"):
        return await self._maybe_fail("upsert") or await super().upsert(table, rows, on_conflict)

class GatedAdapter(FailingAdapter):
    """Write calls park on `gate` until the test opens it."""

    def __init__(self, fixtures=None, fail: Optional[Set[str]] = None):
        super().__init__(fixtures, fail)
        self.gate = asyncio.Event()
        self.calls: List[str] = []

    async def _maybe_fail(self, op: str):
        self.calls.append(op)
        if op != "select":
            await self.gate.wait()
        return await super()._maybe_fail(op)

class FakeQuery:
    """Records the builder chain the Supabase adapter assembles."""

    def __init__(self, client: "FakeSupabaseClient", table: str):
        self.client = client
        self.chain: List[tuple] = [("table", table)]

    def __getattr__(self, name):
        def step(*args, **kwargs):
            self.chain.append((name, args, kwargs))
            return self
        return step

    def execute(self):
        self.client.executed.append(self.chain)
        if self.client.raise_with is not None:
            raise self.client.raise_with
        return SimpleNamespace(data=self.client.data)

class FakeSupabaseClient:
    def __init__(self, data: Any = None, raise_with: Optional[Exception] = None):
        self.data = data if data is not None else []
        self.raise_with = raise_with
        self.executed: List[List[tuple]] = []

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)
