"""
Representation codec: one object per wire generation.

Generation 1 speaks ``fullName``, generation 2 speaks ``firstName`` and
``lastName``. Each codec knows how to render a record, how to turn a
payload into ``NameChanges`` and which payload shapes it accepts for a
create or an update.
"""
from enum import Enum

from names import has_interior_whitespace, join_name, normalize_name, split_full_name
from records import IdentityRecord, NameChanges
from schemas import UserDTO


class Generation(str, Enum):
    V1 = "1"
    V2 = "2"


class Operation(str, Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


LATEST_GENERATION = Generation.V2
SUPERSEDED_GENERATIONS = frozenset({Generation.V1})


class FullNameCodec:
    generation = Generation.V1

    def encode(self, record: IdentityRecord) -> UserDTO:
        full_name = record.full_name or join_name(record.first_name, record.last_name)
        return UserDTO(username=record.username, fullName=full_name)

    def decode(self, dto: UserDTO) -> NameChanges:
        first_name, last_name = split_full_name(dto.full_name)
        return NameChanges(first_name=first_name, last_name=last_name)

    def accepts(self, dto: UserDTO, operation: Operation) -> bool:
        # A full name only counts when it looks like "First Last"; single
        # words are rejected for create and update alike.
        return has_interior_whitespace(dto.full_name)


class SplitNameCodec:
    generation = Generation.V2

    def encode(self, record: IdentityRecord) -> UserDTO:
        if record.has_split_names:
            first_name, last_name = record.first_name, record.last_name
        else:
            first_name, last_name = split_full_name(record.full_name)
        return UserDTO(username=record.username, firstName=first_name, lastName=last_name)

    def decode(self, dto: UserDTO) -> NameChanges:
        return NameChanges(first_name=dto.first_name, last_name=dto.last_name)

    def accepts(self, dto: UserDTO, operation: Operation) -> bool:
        first_name = normalize_name(dto.first_name)
        last_name = normalize_name(dto.last_name)
        if operation is Operation.CREATE:
            return first_name is not None and last_name is not None
        return first_name is not None or last_name is not None


CODECS = {
    Generation.V1: FullNameCodec(),
    Generation.V2: SplitNameCodec(),
}


def codec_for(generation: Generation):
    return CODECS[generation]


def encode(record: IdentityRecord, generation: Generation) -> UserDTO:
    return codec_for(generation).encode(record)


def decode(dto: UserDTO, generation: Generation) -> NameChanges:
    return codec_for(generation).decode(dto)


def encode_all(record: IdentityRecord) -> UserDTO:
    """Render every name field, used where no generation applies (migration results)."""
    return UserDTO(
        username=record.username,
        fullName=record.full_name,
        firstName=record.first_name,
        lastName=record.last_name,
    )


def detect_generation(record: IdentityRecord) -> Generation:
    """Newest generation the stored record can answer in without derivation."""
    return Generation.V2 if record.has_split_names else Generation.V1
