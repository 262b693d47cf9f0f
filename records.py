"""
Immutable domain values for identity records.

Rows never leave the store as ORM objects. Each mutation builds a new
value from the previous one plus the requested changes, so the derived
``full_name`` and the duplicated name sub-record are recomputed in one
place instead of by side-effecting setters.
"""
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from names import join_name, normalize_name


@dataclass(frozen=True)
class NameChanges:
    """Requested name fields; ``None`` means "leave untouched"."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "first_name", normalize_name(self.first_name))
        object.__setattr__(self, "last_name", normalize_name(self.last_name))

    @property
    def is_empty(self) -> bool:
        return self.first_name is None and self.last_name is None


@dataclass(frozen=True)
class NameRecord:
    first_name: Optional[str]
    last_name: Optional[str]
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def with_changes(self, changes: NameChanges) -> "NameRecord":
        return replace(
            self,
            first_name=changes.first_name if changes.first_name is not None else self.first_name,
            last_name=changes.last_name if changes.last_name is not None else self.last_name,
        )


@dataclass(frozen=True)
class IdentityRecord:
    username: str
    full_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    name: Optional[NameRecord] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def has_split_names(self) -> bool:
        return self.first_name is not None

    def with_names(self, changes: NameChanges) -> "IdentityRecord":
        """
        Apply ``changes`` to the record and, field by field, to its name
        sub-record in the same step. A record without a sub-record gets one
        copied from its resulting names.
        """
        first = changes.first_name if changes.first_name is not None else self.first_name
        last = changes.last_name if changes.last_name is not None else self.last_name
        if self.name is None:
            name = NameRecord(first_name=first, last_name=last)
        else:
            name = self.name.with_changes(changes)
        return replace(
            self,
            full_name=join_name(first, last),
            first_name=first,
            last_name=last,
            name=name,
        )


def new_identity(username: str, changes: NameChanges) -> IdentityRecord:
    """Build a not-yet-persisted record with both name copies written."""
    return IdentityRecord(username=username).with_names(changes)
