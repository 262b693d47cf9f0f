"""Structured error codes and exceptions for the user service."""

from enum import Enum
from typing import TypedDict


class ErrorCode(str, Enum):
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INVALID_REQUEST = "invalid_request"
    INVALID_USERNAME = "invalid_username"
    INTEGRITY_FAULT = "integrity_fault"
    PERSISTENCE = "persistence_error"
    INTERNAL = "internal_error"


class ErrorPayload(TypedDict):
    error: str
    detail: str


def error_response(code: ErrorCode, detail: str = "") -> ErrorPayload:
    return {"error": code.value, "detail": detail}


class UserServiceError(Exception):
    """Base class for failures surfaced to the caller of an operation."""

    status_code = 500
    code = ErrorCode.INTERNAL

    def __init__(self, detail: str = ""):
        super().__init__(detail)
        self.detail = detail

    def to_payload(self) -> ErrorPayload:
        return error_response(self.code, self.detail)


class NotFoundError(UserServiceError):
    status_code = 404
    code = ErrorCode.NOT_FOUND


class ConflictError(UserServiceError):
    status_code = 403
    code = ErrorCode.CONFLICT


class InvalidInputError(UserServiceError):
    status_code = 400
    code = ErrorCode.INVALID_REQUEST


class InvalidUsernameError(InvalidInputError):
    # Malformed usernames are refused outright rather than reported as bad input.
    status_code = 403
    code = ErrorCode.INVALID_USERNAME


class PersistenceError(UserServiceError):
    status_code = 500
    code = ErrorCode.PERSISTENCE


class DuplicateKeyError(PersistenceError):
    pass


def integrity_fault_payload() -> ErrorPayload:
    """Body substituted for a resource whose two name copies have drifted apart."""
    return error_response(ErrorCode.INTEGRITY_FAULT, "inconsistent data")
