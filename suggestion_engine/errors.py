"""Typed errors raised by the engine and its collaborators."""

from __future__ import annotations


class EngineError(Exception):
    """Base class for every error the engine reports to callers."""


class MissingParameter(EngineError, ValueError):
    def __init__(self, name: str):
        super().__init__(f"Missing `{name}` parameter")
        self.name = name


class MalformedInput(EngineError, ValueError):
    def __init__(self, message: str, value=None):
        super().__init__(message)
        self.value = value


class NotFoundError(EngineError, LookupError):
    pass


class UnknownTag(NotFoundError):
    def __init__(self, tag: str):
        super().__init__(f"Unknown tag '{tag}'")
        self.tag = tag


class PersistenceUnavailable(EngineError, RuntimeError):
    pass


class CorruptState(MalformedInput):
    """The stored user state cannot be decoded."""


class ResetFailed(EngineError, RuntimeError):
    pass
