"""
Lazy migration of legacy identity records.

Records written before split names existed only carry ``full_name``;
records written before the name table existed carry no sub-record.
``upgrade`` derives whatever is missing, always from older data towards
the newer shape. It is deterministic, so running it again on its own
output changes nothing and two concurrent passes converge.
"""
import logging
from dataclasses import replace
from typing import List, Optional

from errors import PersistenceError
from names import split_full_name
from records import IdentityRecord, NameRecord

logger = logging.getLogger(__name__)


def needs_migration(record: IdentityRecord) -> bool:
    missing_split = not record.has_split_names and record.full_name is not None
    return missing_split or record.name is None


def upgrade(record: IdentityRecord) -> IdentityRecord:
    if not record.has_split_names and record.full_name is not None:
        first_name, last_name = split_full_name(record.full_name)
        record = replace(record, first_name=first_name, last_name=last_name)
    if record.name is None:
        record = replace(
            record, name=NameRecord(first_name=record.first_name, last_name=record.last_name)
        )
    return record


class MigrationEngine:
    def __init__(self, store):
        self.store = store

    def migrate_one(self, record: IdentityRecord) -> Optional[IdentityRecord]:
        """
        Persist the upgraded record; already migrated records come back untouched.

        Stored records are re-read first, so a write that landed after
        ``record`` was loaded is upgraded rather than overwritten. Returns
        ``None`` when the record has been deleted in the meantime.
        """
        if record.id is not None:
            record = self.store.find_by_key(record.id)
            if record is None:
                return None
        if not needs_migration(record):
            return record
        return self.store.save(upgrade(record))

    def migrate_all(self) -> List[IdentityRecord]:
        """
        Migrate every record the store reports as eligible.

        A record that fails to persist is left out of the result and stays
        eligible for the next pass.
        """
        migrated = []
        for record in self.store.find_migration_eligible():
            try:
                result = self.migrate_one(record)
            except PersistenceError:
                logger.exception("Migration of user %s failed, leaving it for the next pass", record.username)
                continue
            if result is not None:
                migrated.append(result)
        logger.info("Migrated %d user(s)", len(migrated))
        return migrated
