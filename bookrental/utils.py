"""Password hashing, UUID helpers and JSON response shapes."""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any

import bcrypt

BCRYPT_COST = 10

_CANONICAL_UUID = re.compile(
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
)
_COMPACT_UUID = re.compile(r"[0-9a-fA-F]{32}")
_URN_PREFIX = "urn:uuid:"


def hash_password(password: str) -> str:
    """Return a bcrypt hash of the password."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=BCRYPT_COST)).decode()


def check_password_hash(password: str, hashed: str) -> bool:
    """Tell whether the password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode(), hashed.encode())
    except ValueError:
        return False


def generate_uuid() -> str:
    """Return a new random UUID in canonical form."""
    return str(uuid.uuid4())


def is_valid_uuid(value: str) -> bool:
    """Accept canonical, braced, URN-prefixed and 32-digit UUID forms."""
    if len(value) == 36 + len(_URN_PREFIX) and value[: len(_URN_PREFIX)].lower() == _URN_PREFIX:
        value = value[len(_URN_PREFIX):]
    elif len(value) == 38 and value.startswith("{") and value.endswith("}"):
        value = value[1:-1]
    elif len(value) == 32:
        return _COMPACT_UUID.fullmatch(value) is not None
    return len(value) == 36 and _CANONICAL_UUID.fullmatch(value) is not None


@dataclass(frozen=True)
class Response:
    """An HTTP status with the body to send as JSON."""

    status: HTTPStatus
    body: Any


def created(data: Any) -> Response:
    """201 with the data as the body."""
    return Response(HTTPStatus.CREATED, data)


def ok(data: Any) -> Response:
    """200 with the data as the body."""
    return Response(HTTPStatus.OK, data)


def _error(status: HTTPStatus, error: Any) -> Response:
    return Response(status, {"error": error})


def bad_request(error: Any) -> Response:
    """400 with the error under an "error" key."""
    return _error(HTTPStatus.BAD_REQUEST, error)


def not_found(error: Any) -> Response:
    """404 with the error under an "error" key."""
    return _error(HTTPStatus.NOT_FOUND, error)


def internal_server_error(error: Any) -> Response:
    """500 with the error under an "error" key."""
    return _error(HTTPStatus.INTERNAL_SERVER_ERROR, error)


def forbidden(error: Any) -> Response:
    """403 with the error under an "error" key."""
    return _error(HTTPStatus.FORBIDDEN, error)