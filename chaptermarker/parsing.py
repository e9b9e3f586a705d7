"""Shared parsing helpers for runtime and config value normalization."""

from __future__ import annotations

from .errors import InvalidArgumentError


_TRUE_BOOLEAN_TOKENS = frozenset({"1", "true", "yes", "on"})
_FALSE_BOOLEAN_TOKENS = frozenset({"0", "false", "no", "off"})


def normalize_optional_string(value: object) -> str | None:
    """Normalize an optional value to a stripped non-empty string.

    Args:
        value: Arbitrary input value.

    Returns:
        Stripped string value, or `None` when the value is empty after trimming.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text


def parse_permissive_boolean(value: object) -> bool | None:
    """Parse a permissive boolean token and return `None` for invalid values."""

    if isinstance(value, bool):
        return value

    normalized = normalize_optional_string(value)
    if normalized is None:
        return None

    token = normalized.lower()
    if token in _TRUE_BOOLEAN_TOKENS:
        return True
    if token in _FALSE_BOOLEAN_TOKENS:
        return False
    return None


def parse_index_list(value: str | None, *, strict: bool = False) -> list[int]:
    """Parse a comma-separated list of 0-based chapter indices.

    Tokens are trimmed. Numeric tokens are truncated toward zero (`1.5` -> 1).
    Non-numeric tokens are dropped unless `strict` is set, in which case they
    raise. Order and duplicates are preserved as given.

    Raises:
        InvalidArgumentError: For a non-numeric token in strict mode.
    """

    if value is None:
        return []

    indices: list[int] = []
    for raw_token in value.split(","):
        token = raw_token.strip()
        if not token:
            continue
        try:
            indices.append(int(float(token)))
        except (ValueError, OverflowError) as exc:
            if strict:
                raise InvalidArgumentError(
                    stage="config",
                    detail=f"Invalid chapter index `{token}`. Indices must be numbers.",
                    hint="Use a comma-separated list such as `8,15,18`.",
                ) from exc
    return indices
