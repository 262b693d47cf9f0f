from typing import List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql import func

from errors import DuplicateKeyError, PersistenceError
from models import Name, User
from records import IdentityRecord, NameRecord


def _name_record(row: Optional[Name]) -> Optional[NameRecord]:
    if row is None:
        return None
    return NameRecord(
        id=row.id,
        first_name=row.first_name,
        last_name=row.last_name,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _identity_record(row: User) -> IdentityRecord:
    return IdentityRecord(
        id=row.id,
        username=row.username,
        full_name=row.full_name,
        first_name=row.first_name,
        last_name=row.last_name,
        name=_name_record(row.name),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class UserStore:
    """
    Key-value style access to identity records.

    Every method hands out detached ``IdentityRecord`` values; callers never
    see the SQLAlchemy rows.
    """

    def __init__(self, db: Session):
        self.db = db

    def _row_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def find_by_key(self, user_id: int) -> Optional[IdentityRecord]:
        # Bypass the identity map so callers see writes made since the last load.
        row = self.db.get(User, user_id, populate_existing=True)
        return _identity_record(row) if row is not None else None

    def find_by_username(self, username: str) -> Optional[IdentityRecord]:
        row = self._row_by_username(username)
        return _identity_record(row) if row is not None else None

    def find_name_by_id(self, name_id: int) -> Optional[NameRecord]:
        return _name_record(self.db.get(Name, name_id))

    def find_migration_eligible(self) -> List[IdentityRecord]:
        rows = (
            self.db.query(User)
            .filter(
                or_(
                    and_(User.first_name.is_(None), User.full_name.isnot(None)),
                    ~User.name.has(),
                )
            )
            .order_by(User.id.asc())
            .all()
        )
        return [_identity_record(row) for row in rows]

    def save(self, record: IdentityRecord) -> IdentityRecord:
        """
        Insert or update ``record`` together with its name sub-record.

        An existing sub-record is updated in place, so saving a record that
        was migrated concurrently does not insert a second one.
        """
        try:
            row = self.db.get(User, record.id) if record.id is not None else None
            if row is None:
                row = User(username=record.username)
                self.db.add(row)
            row.full_name = record.full_name
            row.first_name = record.first_name
            row.last_name = record.last_name
            row.updated_at = func.now()
            if record.name is not None:
                if row.name is None:
                    row.name = Name()
                row.name.first_name = record.name.first_name
                row.name.last_name = record.name.last_name
                row.name.updated_at = func.now()
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise DuplicateKeyError(f"User {record.username} already exists.") from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise PersistenceError(f"Could not save user {record.username}.") from exc
        self.db.refresh(row)
        return _identity_record(row)

    def delete_by_username(self, username: str) -> Optional[IdentityRecord]:
        """Delete the user and its name sub-record, returning what was deleted."""
        row = self._row_by_username(username)
        if row is None:
            return None
        snapshot = _identity_record(row)
        try:
            self.db.delete(row)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise PersistenceError(f"Could not delete user {username}.") from exc
        return snapshot
