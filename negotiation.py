"""
Version negotiation.

An explicit ``version`` query parameter always wins. Without one, a
request body is sniffed: split names mean the latest generation, a full
name containing a space means generation 1. Requests without a body take
the generation the stored record can supply.
"""
import re
from typing import Optional

from codec import LATEST_GENERATION, Generation, Operation, codec_for, detect_generation
from config import USERNAME_PATTERN
from errors import InvalidInputError, InvalidUsernameError
from records import IdentityRecord
from schemas import UserDTO

_USERNAME_RE = re.compile(USERNAME_PATTERN)

# Latest first, so a payload carrying both shapes is read as the newest one.
_INFERENCE_ORDER = (Generation.V2, Generation.V1)


def validate_username(username: str) -> None:
    if not _USERNAME_RE.fullmatch(username):
        raise InvalidUsernameError(
            "Username must start with a letter and contain 3-20 letters, digits or underscores."
        )


def parse_version(explicit_version: Optional[str]) -> Optional[Generation]:
    """
    Map the raw ``version`` parameter to a generation.

    ``None`` means the caller did not ask for one. An empty value carries no
    number and selects the latest generation.
    """
    if explicit_version is None:
        return None
    value = explicit_version.strip()
    if not value:
        return LATEST_GENERATION
    try:
        return Generation(value)
    except ValueError:
        raise InvalidInputError(f"Unsupported version {explicit_version!r}.") from None


def is_superseded(explicit_version: Optional[str]) -> bool:
    generation = parse_version(explicit_version)
    return generation is not None and generation is not LATEST_GENERATION


def negotiate(
    explicit_version: Optional[str],
    operation: Operation,
    username: str,
    payload: Optional[UserDTO] = None,
    stored: Optional[IdentityRecord] = None,
) -> Generation:
    """Pick the generation of a request or raise ``InvalidInputError``."""
    if payload is not None and payload.username is not None and payload.username != username:
        raise InvalidInputError("Username in body does not match the requested resource.")

    generation = parse_version(explicit_version)

    if payload is None:
        if generation is not None:
            return generation
        if stored is not None:
            return detect_generation(stored)
        return LATEST_GENERATION

    if generation is not None:
        if not codec_for(generation).accepts(payload, operation):
            raise InvalidInputError(
                f"Request body is not a valid version {generation.value} {operation.value} payload."
            )
        return generation

    for candidate in _INFERENCE_ORDER:
        if codec_for(candidate).accepts(payload, operation):
            return candidate
    raise InvalidInputError(f"Could not infer a version from the {operation.value} payload.")
