"""Parsing of raw request parameters into engine inputs."""

from __future__ import annotations

from datetime import datetime

from suggestion_engine.errors import MalformedInput, MissingParameter

_TRUE = {"true", "1", "yes"}
_FALSE = {"false", "0", "no"}


def require(params: dict, name: str) -> str:
    value = params.get(name)
    if value is None:
        raise MissingParameter(name)
    return value


def optional(params: dict, name: str) -> str | None:
    """Return the parameter, treating an empty string as absent."""

    value = params.get(name)
    return value or None


def parse_timestamp(value: str, name: str = "start_date") -> datetime:
    try:
        timestamp = datetime.fromisoformat(value.strip())
    except Exception as exc:  # noqa: BLE001
        raise MalformedInput(f"`{name}` is not an ISO-8601 timestamp: '{value}'", value) from exc
    return timestamp.replace(tzinfo=None)


def parse_length(value: str, name: str = "length") -> int:
    try:
        minutes = int(value)
    except Exception as exc:  # noqa: BLE001
        raise MalformedInput(f"`{name}` is not an integer: '{value}'", value) from exc
    if minutes < 0:
        raise MalformedInput(f"`{name}` must not be negative", value)
    return minutes


def parse_bool(value: str, name: str = "accepted") -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUE:
        return True
    if normalized in _FALSE:
        return False
    raise MalformedInput(f"`{name}` must be true or false: '{value}'", value)
