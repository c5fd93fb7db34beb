"""
Optimistic mutation controller.

Every roster mutation is applied to the RosterStore first and then sent to
the backend adapter. A failed single-record write puts the roster back
exactly as it was before the mutation; a batch import always reloads the
roster from the backend instead of reconciling locally.

Mutations are not queued: two writes to the same athlete may be in flight at
once, and whichever completes last decides the local state.
"""
from __future__ import annotations
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ValidationError

from .adapters import BackendAdapter
from .config import AppConfig
from .constants import NEW_ATHLETE_DEFAULTS, is_metric_field
from .importer import hydrate_record
from .models import (
    AdapterResult, Athlete, AthleteDraft, ProgressSample, WorkoutLog,
    athlete_from_row, generate_access_code, new_temp_id,
)
from .store import RosterStore

logger = logging.getLogger(__name__)

MutationKind = Literal["update", "insert", "delete"]
MutationState = Literal["idle", "optimistic", "confirmed", "rolled_back"]

class MutationReceipt(BaseModel):
    kind: MutationKind
    athlete_id: Optional[str] = None
    temp_id: Optional[str] = None
    state: MutationState = "idle"
    error: Optional[str] = None

    @property
    def confirmed(self) -> bool:
        return self.state == "confirmed"

class ImportReport(BaseModel):
    submitted: int = 0
    inserted: int = 0
    skipped: int = 0
    error: Optional[str] = None

def _error_text(res: AdapterResult) -> str:
    return res.error.message if res.error else "backend returned no rows"

class MutationController:
    def __init__(self, adapter: BackendAdapter, store: Optional[RosterStore] = None,
                 config: Optional[AppConfig] = None):
        self.adapter = adapter
        self.store = store if store is not None else RosterStore()
        self.config = config or AppConfig()

    @property
    def table(self) -> str:
        return self.config.athletes_table

    # -----------------------
    # Load
    # -----------------------
    async def refresh(self) -> bool:
        res = await self.adapter.select(self.table)
        if not res.ok:
            logger.error("Roster fetch failed: %s", _error_text(res))
            return False
        athletes = []
        for row in res.data or []:
            try:
                athletes.append(athlete_from_row(row))
            except ValidationError as exc:
                logger.warning("Skipping unreadable athlete row %s: %s", row.get("id"), exc)
        self.store.replace(athletes)
        return True

    # -----------------------
    # Update
    # -----------------------
    async def update_athlete(self, athlete_id: str, fields: Dict[str, Any]) -> MutationReceipt:
        receipt = MutationReceipt(kind="update", athlete_id=athlete_id)
        if "id" in fields:
            receipt.state, receipt.error = "rolled_back", "id is immutable"
            return receipt

        patch = dict(fields)
        current = self.store.find(athlete_id)
        if current is not None:
            try:
                merged = Athlete.model_validate({**current.model_dump(), **fields})
            except ValidationError as exc:
                receipt.state, receipt.error = "rolled_back", str(exc)
                return receipt
            patch = {k: getattr(merged, k) for k in fields}

        snapshot = self.store.snapshot()
        self.store.apply(lambda rs: [a.model_copy(update=patch) if a.id == athlete_id else a for a in rs])
        receipt.state = "optimistic"

        res = await self.adapter.update(self.table, patch, "id", athlete_id)
        if not res.ok:
            logger.error("Update of athlete %s failed, restoring roster: %s", athlete_id, _error_text(res))
            self.store.restore(snapshot)
            receipt.state, receipt.error = "rolled_back", _error_text(res)
            return receipt

        receipt.state = "confirmed"
        await self._record_progress(athlete_id, patch)
        return receipt

    async def toggle_payment_status(self, athlete_id: str) -> MutationReceipt:
        current = self.store.find(athlete_id)
        status = current.payment_status if current else "pending"
        return await self.update_athlete(athlete_id, {"payment_status": "pending" if status == "active" else "active"})

    async def _record_progress(self, athlete_id: str, patch: Dict[str, Any]):
        samples = [
            ProgressSample(athlete_id=athlete_id, field_name=k, value=str(v)).model_dump(exclude_none=True)
            for k, v in patch.items() if is_metric_field(k) and v not in (None, "")
        ]
        if not samples:
            return
        res = await self.adapter.insert(self.config.progress_table, samples)
        if not res.ok:
            logger.warning("Progress samples for %s not stored: %s", athlete_id, _error_text(res))

    # -----------------------
    # Insert
    # -----------------------
    async def add_athlete(self, draft: Union[AthleteDraft, Dict[str, Any], None] = None) -> MutationReceipt:
        receipt = MutationReceipt(kind="insert")
        try:
            if draft is None:
                draft = AthleteDraft(**NEW_ATHLETE_DEFAULTS)
            elif isinstance(draft, dict):
                draft = AthleteDraft(**draft)
        except ValidationError as exc:
            receipt.state, receipt.error = "rolled_back", str(exc)
            return receipt
        if not draft.access_code:
            draft = draft.model_copy(update={"access_code": generate_access_code()})

        temp_id = new_temp_id()
        receipt.temp_id = receipt.athlete_id = temp_id
        optimistic = Athlete(id=temp_id, **draft.model_dump())
        self.store.apply(lambda rs: rs + [optimistic])
        receipt.state = "optimistic"

        res = await self.adapter.insert(self.table, [draft.model_dump(exclude_none=True)])
        confirmed = None
        if res.ok and res.data:
            try:
                confirmed = athlete_from_row(res.data[0])
            except ValidationError as exc:
                logger.error("Backend returned an unreadable athlete row: %s", exc)
        if confirmed is None:
            logger.error("Insert failed, dropping optimistic athlete %s: %s", temp_id, _error_text(res))
            self.store.apply(lambda rs: [a for a in rs if a.id != temp_id])
            receipt.state, receipt.error = "rolled_back", _error_text(res)
            return receipt

        # swap in place, list position unchanged
        self.store.apply(lambda rs: [confirmed if a.id == temp_id else a for a in rs])
        receipt.athlete_id = confirmed.id
        receipt.state = "confirmed"
        return receipt

    # -----------------------
    # Delete
    # -----------------------
    async def delete_athlete(self, athlete_id: str) -> MutationReceipt:
        receipt = MutationReceipt(kind="delete", athlete_id=athlete_id)
        snapshot = self.store.snapshot()
        self.store.apply(lambda rs: [a for a in rs if a.id != athlete_id])
        receipt.state = "optimistic"

        res = await self.adapter.delete(self.table, "id", athlete_id)
        if not res.ok:
            logger.error("Delete of athlete %s failed, restoring roster: %s", athlete_id, _error_text(res))
            self.store.restore(snapshot)
            receipt.state, receipt.error = "rolled_back", _error_text(res)
            return receipt
        receipt.state = "confirmed"
        return receipt

    # -----------------------
    # Batch import
    # -----------------------
    async def import_athletes(self, records: List[Dict[str, Any]]) -> ImportReport:
        report = ImportReport(submitted=len(records))
        rows = []
        for rec in records:
            try:
                rows.append(AthleteDraft(**hydrate_record(rec)).model_dump(exclude_none=True))
            except ValidationError as exc:
                report.skipped += 1
                logger.warning("Import record skipped: %s", exc)

        if rows:
            res = await self.adapter.insert(self.table, rows)
            if res.ok:
                report.inserted = len(res.data or [])
            else:
                report.error = _error_text(res)
                logger.error("Batch import of %d athletes failed: %s", len(rows), report.error)

        # too large to merge optimistically; reload whatever the backend now holds
        await self.refresh()
        return report

    # -----------------------
    # Check-ins and derived views
    # -----------------------
    async def record_check_in(self, athlete_id: str, energy: int = 3, rpe: int = 5,
                              notes: str = "", when: Optional[datetime] = None) -> AdapterResult:
        try:
            log = WorkoutLog(athlete_id=athlete_id, energy=energy, rpe=rpe, notes=notes,
                             date=(when or datetime.now(timezone.utc)).isoformat())
        except ValidationError as exc:
            return AdapterResult.fail(str(exc), code="invalid_check_in")
        res = await self.adapter.insert(self.config.workout_logs_table, [log.model_dump(exclude_none=True)])
        if not res.ok:
            logger.warning("Check-in for %s not stored: %s", athlete_id, _error_text(res))
        return res

    async def todays_logs(self, today: Optional[date] = None) -> List[Dict[str, Any]]:
        res = await self.adapter.select(self.config.workout_logs_table, order="created_at",
                                        ascending=False, limit=self.config.logs_fetch_limit)
        if not res.ok:
            logger.warning("Log fetch error: %s", _error_text(res))
            return []
        prefix = (today or datetime.now(timezone.utc).date()).isoformat()
        # filter by day client-side; date may be a full ISO string or plain YYYY-MM-DD
        out = []
        for log in res.data or []:
            stamp = log.get("date") or log.get("created_at")
            if stamp and str(stamp).startswith(prefix):
                out.append(log)
        return out

    def trained_today_view(self, logs: List[Dict[str, Any]], only_trained: bool = False) -> List[Athlete]:
        if not only_trained:
            return self.store.view()
        trained = {log.get("athlete_id") for log in logs}
        return self.store.view(predicate=lambda a: a.id in trained)

    def pending_count(self) -> int:
        return len(self.store.view(predicate=lambda a: a.payment_status == "pending"))

    async def progress_for(self, athlete_id: str, field_name: str) -> List[ProgressSample]:
        res = await self.adapter.select(self.config.progress_table,
                                        eq={"athlete_id": athlete_id, "field_name": field_name},
                                        order="created_at", ascending=True)
        if not res.ok:
            logger.warning("Progress fetch for %s/%s failed: %s", athlete_id, field_name, _error_text(res))
            return []
        return [ProgressSample(**{k: v for k, v in r.items() if k in ProgressSample.model_fields})
                for r in res.data or []]
