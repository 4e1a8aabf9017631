"""Domain records shared by the repositories and services."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime


class Role(str, enum.Enum):
    """Access level of a user."""

    ADMIN = "ADMIN"
    USER = "USER"


class TokenType(str, enum.Enum):
    """Kind of an issued token."""

    ACCESS = "access"
    REFRESH = "refresh"


class ServiceError(Exception):
    """A business rule was violated or a requested record does not exist."""


@dataclass
class User:
    """A registered user and, when loaded with them, the books they own."""

    id: str = ""
    name: str = ""
    email: str = ""
    password: str = ""
    role: Role = Role.USER
    created_at: datetime | None = None
    updated_at: datetime | None = None
    books: list[Book] = field(default_factory=list, compare=False, repr=False)


@dataclass
class Book:
    """A book and, when loaded with it, its owner."""

    id: str = ""
    title: str = ""
    author: str = ""
    isbn: str = ""
    description: str = ""
    user_id: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    user: User | None = field(default=None, compare=False, repr=False)


@dataclass
class IssuedToken:
    """A token handed out to a user, kept so it can be revoked."""

    id: str = ""
    user_id: str = ""
    token: str = ""
    token_type: TokenType = TokenType.ACCESS
    expires_at: datetime | None = None
    is_revoked: bool = False
    revoked_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class BookCreate:
    """Fields for a new book owned by the given user."""

    title: str
    author: str
    isbn: str
    description: str = ""
    user_id: str = ""


@dataclass
class BookCreateRequest:
    """Fields for a new book whose owner is supplied separately."""

    title: str
    author: str
    isbn: str
    description: str = ""


@dataclass
class BookUpdate:
    """Changes to a book; empty fields are left as they are."""

    title: str = ""
    author: str = ""
    isbn: str = ""
    description: str = ""
    user_id: str = ""


@dataclass
class LogoutRequest:
    """The refresh token whose owner is logging out."""

    refresh_token: str