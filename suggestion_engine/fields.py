"""Per-tag probability fields over the modeled month."""

from __future__ import annotations

import numpy as np

from suggestion_engine.config import EngineConfig
from suggestion_engine.errors import MalformedInput, UnknownTag


class ProbabilityFieldStore:
    """Read and bulk-replace the probability field of each tag.

    Fields are kept as ``(days_modeled, slots_per_day)`` matrices inside the
    user state; callers work with the flattened length-N view. Every value
    is clamped to ``[0, 1]`` on the way in and on the way out.
    """

    def __init__(self, probabilities: dict[str, np.ndarray], config: EngineConfig | None = None):
        self.config = config or EngineConfig()
        self._probabilities = probabilities

    @property
    def tags(self) -> list[str]:
        return list(self._probabilities)

    def _matrix(self, tag: str) -> np.ndarray:
        if tag not in self.config.tags or tag not in self._probabilities:
            raise UnknownTag(tag)
        return self._probabilities[tag]

    def matrix(self, tag: str) -> np.ndarray:
        """Return a copy of the day-by-slot view of ``tag``'s field."""

        return np.clip(self._matrix(tag), 0.0, 1.0)

    def read(self, tag: str) -> np.ndarray:
        return self.matrix(tag).ravel()

    def replace(self, tag: str, values) -> None:
        current = self._matrix(tag)
        array = np.asarray(values, dtype=float)
        if array.size != current.size:
            raise MalformedInput(f"Field for '{tag}' must have {current.size} values, got {array.size}", array.size)
        if not np.all(np.isfinite(array)):
            raise MalformedInput(f"Field for '{tag}' contains non-finite values")
        self._probabilities[tag] = np.clip(array.reshape(current.shape), 0.0, 1.0)

    def flatten(self) -> dict[str, np.ndarray]:
        return {tag: self.read(tag) for tag in self.tags if tag in self.config.tags}

    def is_uniform(self, tag: str) -> bool:
        """True while the field holds no learned signal."""

        return bool(np.all(self._matrix(tag) == self.config.initial_probability))
