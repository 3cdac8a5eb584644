"""JSON file state store."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

from suggestion_engine.adapters.store import StateStore
from suggestion_engine.config import EngineConfig
from suggestion_engine.errors import CorruptState, PersistenceUnavailable
from suggestion_engine.schema import UserState


class JsonStateStore(StateStore):
    """Stores the user state as one JSON document, replaced atomically on save."""

    def __init__(self, path: str | Path, config: EngineConfig | None = None):
        self.path = Path(path)
        self.config = config or EngineConfig()

    def load(self) -> UserState | None:
        try:
            with open(self.path, encoding="utf-8") as handle:
                payload = json.load(handle)
        except FileNotFoundError:
            return None
        except ValueError as exc:
            raise CorruptState(f"State file {self.path} is not valid UTF-8 JSON", str(self.path)) from exc
        except OSError as exc:
            raise PersistenceUnavailable(f"Cannot read state file {self.path}") from exc

        if not isinstance(payload, dict):
            raise CorruptState("JSON payload must be an object", str(self.path))
        return UserState.from_dict(payload, self.config)

    def save(self, state: UserState) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        except OSError as exc:
            raise PersistenceUnavailable(f"Cannot write state file {self.path}") from exc

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(state.to_dict(), handle)
            os.replace(temp_path, self.path)
        except OSError as exc:
            raise PersistenceUnavailable(f"Cannot write state file {self.path}") from exc
        finally:
            if os.path.exists(temp_path):
                os.unlink(temp_path)

    def reset(self) -> int:
        try:
            self.path.unlink()
        except FileNotFoundError:
            return 0
        except OSError as exc:
            raise PersistenceUnavailable(f"Cannot remove state file {self.path}") from exc
        return 1
