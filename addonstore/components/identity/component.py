"""
Identity component.

Every identifier supplied from outside the core (addon ids, owner ids,
record ids) passes through normalize() before it is stored or indexed.
The canonical form is a UUID. Accepted inputs:

- a UUID instance (returned unchanged)
- a string in any form uuid.UUID parses: hyphenated, bare 32 hex digits,
  braced, or urn:uuid:, in either case, surrounded by optional whitespace

Anything else (ints, bytes, None, malformed strings) is rejected. Values
are never coerced.
"""

from __future__ import annotations

from uuid import UUID

from addonstore.domain.errors import InvalidIdentifierError


def normalize(raw: object) -> UUID:
    """
    Return the canonical form of raw.

    Raises:
        InvalidIdentifierError: raw is not a structurally valid identifier.
    """
    if isinstance(raw, UUID):
        return raw
    if not isinstance(raw, str):
        raise InvalidIdentifierError(raw)

    try:
        return UUID(raw.strip())
    except ValueError as e:
        raise InvalidIdentifierError(raw) from e


def try_normalize(raw: object) -> UUID | None:
    """Canonical form of raw, or None when it is not a valid identifier."""
    try:
        return normalize(raw)
    except InvalidIdentifierError:
        return None


def is_valid(raw: object) -> bool:
    return try_normalize(raw) is not None
