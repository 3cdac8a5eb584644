"""Keyword-based activity tagging."""

from __future__ import annotations

from suggestion_engine.config import EngineConfig


def normalize(text: str, punctuation: str = "-") -> str:
    stripped = text.translate({ord(char): None for char in punctuation})
    return stripped.lower()


def keyword_counts(text: str, config: EngineConfig | None = None) -> dict[str, int]:
    """Count how many of each tag's keywords occur in ``text``."""

    config = config or EngineConfig()
    normalized = normalize(text, config.punctuation)
    return {tag: sum(1 for word in words if word in normalized) for tag, words in config.keywords.items()}


def infer_tag(text: str, config: EngineConfig | None = None) -> str:
    """Return the matching tag with the fewest keyword hits, or the fallback tag.

    Tags with equal counts keep keyword-table order.
    """
    # TODO: confirm with product whether most-hits should win instead.

    config = config or EngineConfig()
    matched = [(tag, count) for tag, count in keyword_counts(text, config).items() if count > 0]
    if not matched:
        return config.fallback_tag
    return min(matched, key=lambda item: item[1])[0]
