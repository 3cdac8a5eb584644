"""Persistence contract for the single user-state document."""

from __future__ import annotations

from suggestion_engine.config import EngineConfig
from suggestion_engine.schema import UserState


class StateStore:
    """Load, save and reset one :class:`UserState`.

    ``load`` returns ``None`` when nothing has been saved yet and raises
    ``PersistenceUnavailable`` when the backend cannot be reached.
    """

    def load(self) -> UserState | None:
        raise NotImplementedError

    def save(self, state: UserState) -> None:
        raise NotImplementedError

    def reset(self) -> int:
        """Remove the stored document and return how many were removed."""

        raise NotImplementedError

    def load_or_default(self, config: EngineConfig | None = None) -> UserState:
        """Return the stored state, or a fresh default one when none exists."""

        state = self.load()
        if state is None:
            state = UserState.default(config)
        return state
