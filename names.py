"""
Text rules shared by every name field.

All free-text names are normalized before they are stored or split:
surrounding whitespace is stripped and every internal whitespace run
collapses to a single space.

Splitting a full name happens on the *last* space. This is lossy on
purpose: ``"Anna Maria Smith"`` becomes ``("Anna Maria", "Smith")``, so a
first/last pair only survives a join-then-split round trip when the last
name contains no space of its own.
"""
from typing import Optional, Tuple


def normalize_name(value: Optional[str]) -> Optional[str]:
    """Trim and collapse whitespace; blank input normalizes to ``None``."""
    if value is None:
        return None
    collapsed = " ".join(value.split())
    return collapsed or None


def has_interior_whitespace(value: Optional[str]) -> bool:
    normalized = normalize_name(value)
    return normalized is not None and " " in normalized


def split_full_name(full_name: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """
    Split a full name into ``(first_name, last_name)``.

    Text before the final space is the first name, text after it the last
    name. Without any space the whole name is the first name and the last
    name stays unset.
    """
    normalized = normalize_name(full_name)
    if normalized is None:
        return None, None
    first, sep, last = normalized.rpartition(" ")
    if not sep:
        return normalized, None
    return first, last


def join_name(first_name: Optional[str], last_name: Optional[str]) -> Optional[str]:
    parts = [part for part in (first_name, last_name) if part]
    return " ".join(parts) or None
