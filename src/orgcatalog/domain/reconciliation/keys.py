"""Identity key extraction for candidate records.

Responsibilities of this stage:
- derive deterministic exact-match keys from one record
- scope identifier keys by scheme so equal codes from different schemes
  never collide
- avoid side effects

Two records sharing any key are exact matches regardless of other fields.
"""

from __future__ import annotations

import unicodedata
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Hashable

    from orgcatalog.domain.model import CandidateRecord

    from .contracts import IdentityKey


NAME_KEY: Final[str] = "name"
IDENTIFIER_KEY: Final[str] = "identifier"

# Dashes and slashes separate words ("Health-Care" -> "health care"); other
# punctuation is dropped in place ("Dept." -> "dept").
_SEPARATING_PUNCTUATION: Final[frozenset[str]] = frozenset("-‐‑‒–—/\\_")


def normalize_name(value: str | None) -> str | None:
    """Lower-case, strip punctuation and collapse whitespace."""

    if value is None:
        return None
    text = unicodedata.normalize("NFKC", value)
    text = text.casefold()
    text = "".join(_strip_punctuation(ch) for ch in text)
    text = " ".join(text.split())
    return text or None


def _strip_punctuation(ch: str) -> str:
    if not unicodedata.category(ch).startswith("P"):
        return ch
    return " " if ch in _SEPARATING_PUNCTUATION else ""


def identity_keys(record: CandidateRecord) -> tuple[IdentityKey, ...]:
    """Return the exact-match keys for ``record``.

    Keys are ``("name", normalized_name)`` and one
    ``("identifier", scheme, value)`` per populated identifier.
    """

    keys: list[IdentityKey] = [(NAME_KEY, normalize_name(record.name))]
    for scheme, value in sorted(record.identifiers.items()):
        keys.append((IDENTIFIER_KEY, _normalize_scheme(scheme), _normalize_identifier(value)))
    return _filter_and_dedupe_keys(tuple(keys))


def _normalize_scheme(scheme: str | None) -> str | None:
    if scheme is None:
        return None
    return " ".join(scheme.casefold().split()) or None


def _normalize_identifier(value: str | None) -> str | None:
    if value is None:
        return None
    return str(value).strip() or None


def _filter_and_dedupe_keys(keys: tuple[IdentityKey, ...]) -> tuple[IdentityKey, ...]:
    """Drop incomplete keys and dedupe while preserving first-seen order."""

    seen: set[IdentityKey] = set()
    filtered: list[IdentityKey] = []
    for key in keys:
        if not _all_key_values_present(key) or key in seen:
            continue
        seen.add(key)
        filtered.append(key)
    return tuple(filtered)


def _all_key_values_present(key: IdentityKey) -> bool:
    return all(_is_key_value_present(value) for value in key)


def _is_key_value_present(value: Hashable) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value != ""
    return True
