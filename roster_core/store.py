"""
Single-writer container for the in-memory roster.
"""
from __future__ import annotations
from typing import Callable, List, Optional

from .models import Athlete

Listener = Callable[[List[Athlete]], None]

class RosterStore:
    def __init__(self, records: Optional[List[Athlete]] = None):
        self._records: List[Athlete] = [a.model_copy(deep=True) for a in (records or [])]
        self._listeners: List[Listener] = []

    @property
    def records(self) -> List[Athlete]:
        return [a.model_copy(deep=True) for a in self._records]

    def __len__(self) -> int:
        return len(self._records)

    def ids(self) -> List[str]:
        return [a.id for a in self._records]

    def find(self, athlete_id: str) -> Optional[Athlete]:
        for a in self._records:
            if a.id == athlete_id:
                return a.model_copy(deep=True)
        return None

    def index_of(self, athlete_id: str) -> int:
        for i, a in enumerate(self._records):
            if a.id == athlete_id:
                return i
        return -1

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _emit(self):
        for listener in list(self._listeners):
            listener(self.records)

    # --- snapshot / restore ---
    def snapshot(self) -> List[Athlete]:
        return self.records

    def restore(self, snapshot: List[Athlete]):
        self._records = [a.model_copy(deep=True) for a in snapshot]
        self._emit()

    def replace(self, records: List[Athlete]):
        self.restore(records)

    def apply(self, mutation: Callable[[List[Athlete]], List[Athlete]]):
        """Read-modify-write: `mutation` gets a copy of the roster and returns the new one."""
        self._records = list(mutation(self.records))
        self._emit()

    # --- derived views (never touch the base list) ---
    def view(self, predicate: Optional[Callable[[Athlete], bool]] = None,
             key: Optional[Callable[[Athlete], object]] = None,
             reverse: bool = False) -> List[Athlete]:
        out = [a for a in self.records if predicate is None or predicate(a)]
        if key is not None:
            out = sorted(out, key=key, reverse=reverse)
        return out
