"""
Resource operations on ``user/{username}``.

Every operation runs the same pipeline: negotiate a generation, decode the
payload, touch the store, audit the two name copies, encode the answer.
An integrity fault never rolls anything back; it only replaces the body
returned to the caller.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import consistency
from codec import LATEST_GENERATION, Generation, Operation, decode, encode, encode_all
from config import RESOURCE_PATH
from consistency import ConsistencyState
from errors import ConflictError, DuplicateKeyError, NotFoundError, integrity_fault_payload
from migration import MigrationEngine, upgrade
from negotiation import is_superseded, negotiate, parse_version, validate_username
from records import IdentityRecord, new_identity
from schemas import UserDTO

logger = logging.getLogger(__name__)


def resource_location(username: str) -> str:
    return f"{RESOURCE_PATH}/{username}"


def latest_location(username: str) -> str:
    return f"{resource_location(username)}?version={LATEST_GENERATION.value}"


@dataclass(frozen=True)
class OperationResult:
    """
    Outcome of an operation.

    ``redirect`` is set when the caller asked for a superseded version; the
    payload is then either the result under the latest version or ``None``
    when the operation was not performed at all.
    """

    payload: Optional[Dict[str, Any]]
    state: ConsistencyState = ConsistencyState.NOT_APPLICABLE
    redirect: Optional[str] = None

    @property
    def faulted(self) -> bool:
        return self.state is ConsistencyState.INCONSISTENT


class UserService:
    def __init__(self, store):
        self.store = store
        self.migrations = MigrationEngine(store)

    def _respond(
        self, record: IdentityRecord, generation: Generation, superseded: bool = False
    ) -> OperationResult:
        redirect = None
        if superseded:
            generation = LATEST_GENERATION
            redirect = latest_location(record.username)

        state = consistency.check(record)
        if state is ConsistencyState.INCONSISTENT:
            logger.warning(
                "Name data of user %s diverged: record=(%r, %r) name=(%r, %r)",
                record.username,
                record.first_name,
                record.last_name,
                record.name.first_name,
                record.name.last_name,
            )
            return OperationResult(dict(integrity_fault_payload()), state, redirect)
        return OperationResult(encode(record, generation).to_payload(), state, redirect)

    def read(self, username: str, version: Optional[str] = None) -> OperationResult:
        parse_version(version)
        record = self.store.find_by_username(username)
        if record is None:
            raise NotFoundError(f"User {username} not found.")
        generation = negotiate(version, Operation.READ, username, stored=record)
        return self._respond(record, generation, is_superseded(version))

    def create(self, username: str, version: Optional[str], payload: UserDTO) -> OperationResult:
        validate_username(username)
        if is_superseded(version):
            # 308 semantics: the client repeats the same request at the new location.
            return OperationResult(None, redirect=latest_location(username))

        generation = negotiate(version, Operation.CREATE, username, payload)
        if self.store.find_by_username(username) is not None:
            raise ConflictError(f"User {username} already exists.")

        record = new_identity(username, decode(payload, generation))
        try:
            saved = self.store.save(record)
        except DuplicateKeyError as exc:
            raise ConflictError(f"User {username} already exists.") from exc
        logger.info("Created user %s (version %s)", username, generation.value)
        return self._respond(saved, generation)

    def update(self, username: str, version: Optional[str], payload: UserDTO) -> OperationResult:
        parse_version(version)
        record = self.store.find_by_username(username)
        if record is None:
            raise NotFoundError(f"User {username} not found.")

        generation = negotiate(version, Operation.UPDATE, username, payload, stored=record)
        changes = decode(payload, generation)
        # Legacy rows are brought to the newest shape before the partial update lands.
        saved = self.store.save(upgrade(record).with_names(changes))
        return self._respond(saved, generation, is_superseded(version))

    def delete(self, username: str, version: Optional[str] = None) -> OperationResult:
        parse_version(version)
        snapshot = self.store.delete_by_username(username)
        if snapshot is None:
            raise NotFoundError(f"User {username} not found.")
        logger.info("Deleted user %s", username)
        generation = negotiate(version, Operation.DELETE, username, stored=snapshot)
        return self._respond(snapshot, generation, is_superseded(version))

    def migrate_all(self) -> List[Dict[str, Any]]:
        return [encode_all(record).to_payload() for record in self.migrations.migrate_all()]
