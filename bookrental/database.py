"""Opening the SQLite database and creating its schema."""

from __future__ import annotations

import logging
import sqlite3
import time

from .models import Role, User
from .repositories import RepositoryError, UserRepository
from .utils import hash_password

log = logging.getLogger(__name__)

DEFAULT_ADMIN_NAME = "Admin"
DEFAULT_ADMIN_EMAIL = "admin@example.com"
DEFAULT_ADMIN_PASSWORD = "password"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS br_user (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    email TEXT NOT NULL UNIQUE,
    password TEXT NOT NULL,
    role TEXT NOT NULL,
    created_at INTEGER,
    updated_at INTEGER
);
CREATE TABLE IF NOT EXISTS br_book (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    author TEXT NOT NULL,
    isbn TEXT NOT NULL UNIQUE,
    description TEXT NOT NULL DEFAULT '',
    user_id TEXT NOT NULL REFERENCES br_user (id),
    created_at INTEGER,
    updated_at INTEGER
);
CREATE INDEX IF NOT EXISTS idx_br_book_user_id ON br_book (user_id);
CREATE TABLE IF NOT EXISTS br_issued_token (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    token TEXT NOT NULL UNIQUE,
    token_type TEXT NOT NULL,
    expires_at INTEGER NOT NULL,
    is_revoked INTEGER NOT NULL DEFAULT 0,
    revoked_at INTEGER,
    created_at INTEGER,
    updated_at INTEGER
);
CREATE INDEX IF NOT EXISTS idx_br_issued_token_user_id ON br_issued_token (user_id);
"""


class DatabaseError(Exception):
    """The database could not be opened or prepared."""


def connect(path: str, max_retries: int = 5, retry_delay: float = 5.0) -> sqlite3.Connection:
    """Open the database, retrying a few times before giving up."""
    log.info("Attempting to connect to database at %s", path)
    last_error: sqlite3.Error | None = None
    for attempt in range(1, max_retries + 1):
        log.info("Database connection attempt %d of %d", attempt, max_retries)
        try:
            connection = sqlite3.connect(path, isolation_level=None)
            connection.execute("PRAGMA foreign_keys = ON")
        except sqlite3.Error as exc:
            last_error = exc
            log.warning("Failed to connect to database: %s. Retrying in %ss...", exc, retry_delay)
            time.sleep(retry_delay)
            continue
        log.info("Successfully connected to database")
        return connection
    raise DatabaseError(
        f"failed to connect to database after {max_retries} attempts: {last_error}"
    ) from last_error


def migrate(connection: sqlite3.Connection) -> None:
    """Create the tables and make sure the default admin user exists."""
    log.info("Running database migrations")
    try:
        connection.executescript(_SCHEMA)
    except sqlite3.Error as exc:
        raise DatabaseError(f"failed to migrate database: {exc}") from exc
    try:
        _create_default_admin_user(connection)
    except RepositoryError as exc:
        raise DatabaseError(f"failed to create default admin user: {exc}") from exc
    log.info("Database migrations completed")


def _create_default_admin_user(connection: sqlite3.Connection) -> None:
    users = UserRepository(connection)
    if users.find_by_email(DEFAULT_ADMIN_EMAIL) is not None:
        log.info("Default admin user already exists")
        return
    users.create(
        User(
            name=DEFAULT_ADMIN_NAME,
            email=DEFAULT_ADMIN_EMAIL,
            password=hash_password(DEFAULT_ADMIN_PASSWORD),
            role=Role.ADMIN,
        )
    )
    log.info("Default admin user created successfully")