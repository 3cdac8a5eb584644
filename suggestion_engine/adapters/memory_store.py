"""In-process state store."""

from __future__ import annotations

from suggestion_engine.adapters.store import StateStore
from suggestion_engine.schema import UserState


class MemoryStateStore(StateStore):
    """Keeps a private copy of the state; readers never see later mutations."""

    def __init__(self, state: UserState | None = None):
        self._state = state.copy() if state is not None else None

    def load(self) -> UserState | None:
        snapshot = self._state
        return snapshot.copy() if snapshot is not None else None

    def save(self, state: UserState) -> None:
        self._state = state.copy()

    def reset(self) -> int:
        removed = 0 if self._state is None else 1
        self._state = None
        return removed
