from __future__ import annotations

import re
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

"""Record linkage across the three candidate sheets.

Covers header-insensitive field access, join-key normalization, per-source
candidate indexing and the primary-driven linker that yields matched row
triples.

Two distinct normalization rules apply:
- field names: lower-case, all whitespace and underscores removed
  ("Chapter_Completion" == "chapter completion" == "ChapterCompletion")
- candidate keys: trimmed and lower-cased only (inner spaces are kept)
"""

__all__ = [
    "NAME_FIELD",
    "EMAIL_FIELD",
    "LinkedRows",
    "build_index",
    "candidate_keys",
    "link_records",
    "lookup",
    "normalize_candidate_key",
    "normalize_field_name",
    "resolve",
]

NAME_FIELD = "Name"
EMAIL_FIELD = "Email"

_FIELD_FOLD_RE = re.compile(r"[\s_]")


def normalize_field_name(name: Any) -> str:
    """Canonical form of a header / target field name."""
    if name is None:
        return ""
    return _FIELD_FOLD_RE.sub("", str(name).lower())


def normalize_candidate_key(value: Any) -> str:
    """Canonical form of a name / email used only for join lookups."""
    if value is None:
        return ""
    return str(value).strip().lower()


def resolve(row: Mapping[str, Any], target: str) -> Any:
    """Return the value of ``target`` in ``row`` ignoring case, spaces and underscores.

    Exact match after normalization only. With two headers that fold to the
    same key the earliest one in insertion order wins. Returns None when no
    header matches.
    """
    wanted = normalize_field_name(target)
    for key, value in row.items():
        if normalize_field_name(key) == wanted:
            return value
    return None


def candidate_keys(row: Mapping[str, Any]) -> tuple[str, str]:
    """(name_key, email_key) for a row; either may be empty."""
    return (
        normalize_candidate_key(resolve(row, NAME_FIELD)),
        normalize_candidate_key(resolve(row, EMAIL_FIELD)),
    )


def build_index(rows: Sequence[Mapping[str, Any]]) -> dict[str, Mapping[str, Any]]:
    """Build the name/email -> row lookup for a secondary source.

    Two insertion policies share one dict and are intentionally different:
    - name key: always written, so the LAST row with a given name wins
    - email key: written only if the key is not present yet, so the FIRST
      row with a given email wins and never overwrites an existing entry
      (including a name entry that happens to equal the email string)

    Source data uses name as the primary join key and email only as a
    fallback; keep the asymmetry (pinned by tests).
    """
    index: dict[str, Mapping[str, Any]] = {}
    for row in rows:
        name_key, email_key = candidate_keys(row)
        if name_key:
            index[name_key] = row
        if email_key and email_key not in index:
            index[email_key] = row
    return index


def lookup(
    index: Mapping[str, Mapping[str, Any]], name_key: str, email_key: str
) -> Mapping[str, Any] | None:
    """Name first, email only when the name lookup misses."""
    row = index.get(name_key) if name_key else None
    if row is None and email_key:
        row = index.get(email_key)
    return row


@dataclass(frozen=True)
class LinkedRows:
    """One primary row with its resolved secondary / tertiary rows."""
    ordinal: int  # 0-based position in the original primary sequence
    join_key: str  # name key, or email key when the name is empty
    primary: Mapping[str, Any]
    secondary: Mapping[str, Any]
    tertiary: Mapping[str, Any]


def link_records(
    primary_rows: Sequence[Mapping[str, Any]],
    secondary_rows: Sequence[Mapping[str, Any]],
    tertiary_rows: Sequence[Mapping[str, Any]],
) -> Iterator[LinkedRows]:
    """Yield primary rows (in original order) matched in both other sources.

    Rows without any join key, or missing from either index, are skipped
    silently. The ordinal always refers to the original primary position.
    """
    secondary_index = build_index(secondary_rows)
    tertiary_index = build_index(tertiary_rows)

    for ordinal, primary in enumerate(primary_rows):
        name_key, email_key = candidate_keys(primary)
        if not name_key and not email_key:
            continue
        secondary = lookup(secondary_index, name_key, email_key)
        tertiary = lookup(tertiary_index, name_key, email_key)
        if secondary is None or tertiary is None:
            continue
        yield LinkedRows(
            ordinal=ordinal,
            join_key=name_key or email_key,
            primary=primary,
            secondary=secondary,
            tertiary=tertiary,
        )
