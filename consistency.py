from enum import Enum

from records import IdentityRecord


class ConsistencyState(str, Enum):
    CONSISTENT = "consistent"
    NOT_APPLICABLE = "not_applicable"
    INCONSISTENT = "inconsistent"


def check(record: IdentityRecord) -> ConsistencyState:
    """
    Compare the record's split names with its name sub-record.

    Read-side audit only: a mismatch is reported, never repaired.
    """
    name = record.name
    if name is None:
        return ConsistencyState.NOT_APPLICABLE
    if name.first_name != record.first_name or name.last_name != record.last_name:
        return ConsistencyState.INCONSISTENT
    return ConsistencyState.CONSISTENT
