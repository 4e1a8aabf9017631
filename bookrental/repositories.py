"""SQLite-backed storage for users, books and issued tokens."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta, timezone
from typing import Any

from .models import Book, IssuedToken, Role, TokenType, User
from .utils import generate_uuid

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_MICROSECOND = timedelta(microseconds=1)


class RepositoryError(Exception):
    """A database operation failed."""


def _encode_time(value: datetime | None) -> int | None:
    if value is None:
        return None
    return (value.astimezone(timezone.utc) - _EPOCH) // _MICROSECOND


def _decode_time(value: int | None) -> datetime | None:
    if value is None:
        return None
    return _EPOCH + value * _MICROSECOND


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _stamp_new(record: User | Book | IssuedToken) -> None:
    if not record.id:
        record.id = generate_uuid()
    now = _now()
    if record.created_at is None:
        record.created_at = now
    if record.updated_at is None:
        record.updated_at = now


def _transaction_connection(tx: Any) -> sqlite3.Connection:
    if not isinstance(tx, sqlite3.Connection):
        raise RepositoryError("invalid transaction type")
    return tx


class _Repository:
    """Shared plumbing: queries, writes and error mapping."""

    _table = ""
    _columns: tuple[str, ...] = ()
    connection: sqlite3.Connection

    @property
    def _column_list(self) -> str:
        return ", ".join(self._columns)

    def _fetch(self, sql: str, params: Iterable[Any] = ()) -> list[tuple]:
        try:
            return self.connection.execute(sql, tuple(params)).fetchall()
        except sqlite3.Error as exc:
            raise RepositoryError(str(exc)) from exc

    def _select(self, where: str = "", params: Iterable[Any] = (), suffix: str = "") -> list[tuple]:
        sql = f"SELECT {self._column_list} FROM {self._table}"
        if where:
            sql += f" WHERE {where}"
        if suffix:
            sql += f" {suffix}"
        return self._fetch(sql, params)

    def _write(self, sql: str, params: Iterable[Any] = ()) -> int:
        try:
            if self.connection.in_transaction:
                return self.connection.execute(sql, tuple(params)).rowcount
            with self.connection:
                return self.connection.execute(sql, tuple(params)).rowcount
        except sqlite3.Error as exc:
            raise RepositoryError(str(exc)) from exc

    def _insert(self, values: Sequence[Any]) -> None:
        marks = ", ".join("?" * len(self._columns))
        self._write(f"INSERT INTO {self._table} ({self._column_list}) VALUES ({marks})", values)

    def _save(self, values: Sequence[Any]) -> None:
        """Rewrite the row with the record's id, inserting it when absent."""
        assignments = ", ".join(f"{column} = ?" for column in self._columns[1:])
        changed = self._write(
            f"UPDATE {self._table} SET {assignments} WHERE id = ?", (*values[1:], values[0])
        )
        if not changed:
            self._insert(values)

    def _delete_where(self, where: str, params: Iterable[Any]) -> None:
        self._write(f"DELETE FROM {self._table} WHERE {where}", params)


_USER_COLUMNS = ("id", "name", "email", "password", "role", "created_at", "updated_at")
_BOOK_COLUMNS = (
    "id", "title", "author", "isbn", "description", "user_id", "created_at", "updated_at",
)
_TOKEN_COLUMNS = (
    "id", "user_id", "token", "token_type", "expires_at",
    "is_revoked", "revoked_at", "created_at", "updated_at",
)


def _user_from_row(row: tuple) -> User:
    return User(
        id=row[0],
        name=row[1],
        email=row[2],
        password=row[3],
        role=Role(row[4]),
        created_at=_decode_time(row[5]),
        updated_at=_decode_time(row[6]),
    )


def _book_from_row(row: tuple) -> Book:
    return Book(
        id=row[0],
        title=row[1],
        author=row[2],
        isbn=row[3],
        description=row[4],
        user_id=row[5],
        created_at=_decode_time(row[6]),
        updated_at=_decode_time(row[7]),
    )


def _token_from_row(row: tuple) -> IssuedToken:
    return IssuedToken(
        id=row[0],
        user_id=row[1],
        token=row[2],
        token_type=TokenType(row[3]),
        expires_at=_decode_time(row[4]),
        is_revoked=bool(row[5]),
        revoked_at=_decode_time(row[6]),
        created_at=_decode_time(row[7]),
        updated_at=_decode_time(row[8]),
    )


class UserRepository(_Repository):
    """Stores users."""

    _table = "br_user"
    _columns = _USER_COLUMNS

    def __init__(self, connection: sqlite3.Connection) -> None:
        self.connection = connection

    def with_tx(self, tx: Any) -> UserRepository:
        """Return a user repository bound to the given transaction."""
        return UserRepository(_transaction_connection(tx))

    @staticmethod
    def _values(user: User) -> tuple:
        return (
            user.id,
            user.name,
            user.email,
            user.password,
            Role(user.role).value,
            _encode_time(user.created_at),
            _encode_time(user.updated_at),
        )

    def create(self, user: User) -> None:
        """Insert the user, filling in its id and timestamps."""
        _stamp_new(user)
        self._insert(self._values(user))

    def find_by_id(self, user_id: str) -> User | None:
        """Return the user with its books, or None."""
        rows = self._select("id = ?", (user_id,), "ORDER BY id LIMIT 1")
        if not rows:
            return None
        user = _user_from_row(rows[0])
        book_rows = self._fetch(
            f"SELECT {', '.join(_BOOK_COLUMNS)} FROM br_book WHERE user_id = ? ORDER BY rowid",
            (user.id,),
        )
        user.books = [_book_from_row(row) for row in book_rows]
        return user

    def find_by_email(self, email: str) -> User | None:
        """Return the user with this e-mail address, or None."""
        rows = self._select("email = ?", (email,), "ORDER BY id LIMIT 1")
        return _user_from_row(rows[0]) if rows else None

    def find_all(self) -> list[User]:
        """Return every user, without their books."""
        return [_user_from_row(row) for row in self._select(suffix="ORDER BY rowid")]

    def update(self, user: User) -> None:
        """Save every field of the user, inserting it if it is new."""
        if not user.id:
            self.create(user)
            return
        user.updated_at = _now()
        if user.created_at is None:
            user.created_at = user.updated_at
        self._save(self._values(user))

    def delete(self, user_id: str) -> None:
        """Delete the user with this id."""
        self._delete_where("id = ?", (user_id,))


class BookRepository(_Repository):
    """Stores books."""

    _table = "br_book"
    _columns = _BOOK_COLUMNS

    def __init__(self, connection: sqlite3.Connection) -> None:
        self.connection = connection

    def with_tx(self, tx: Any) -> BookRepository:
        """Return a book repository bound to the given transaction."""
        return BookRepository(_transaction_connection(tx))

    @staticmethod
    def _values(book: Book) -> tuple:
        return (
            book.id,
            book.title,
            book.author,
            book.isbn,
            book.description,
            book.user_id,
            _encode_time(book.created_at),
            _encode_time(book.updated_at),
        )

    def _attach_owners(self, books: list[Book]) -> list[Book]:
        owner_ids = sorted({book.user_id for book in books if book.user_id})
        if not owner_ids:
            return books
        marks = ", ".join("?" * len(owner_ids))
        rows = self._fetch(
            f"SELECT {', '.join(_USER_COLUMNS)} FROM br_user WHERE id IN ({marks})", owner_ids
        )
        owners = {user.id: user for user in map(_user_from_row, rows)}
        for book in books:
            book.user = owners.get(book.user_id)
        return books

    def create(self, book: Book) -> None:
        """Insert the book, filling in its id and timestamps."""
        _stamp_new(book)
        self._insert(self._values(book))

    def find_by_id(self, book_id: str) -> Book | None:
        """Return the book with its owner, or None."""
        rows = self._select("id = ?", (book_id,), "ORDER BY id LIMIT 1")
        if not rows:
            return None
        return self._attach_owners([_book_from_row(rows[0])])[0]

    def find_by_isbn(self, isbn: str) -> Book | None:
        """Return the book with this ISBN, or None."""
        rows = self._select("isbn = ?", (isbn,), "ORDER BY id LIMIT 1")
        return _book_from_row(rows[0]) if rows else None

    def find_all(self) -> list[Book]:
        """Return every book with its owner."""
        return self._attach_owners([_book_from_row(row) for row in self._select(suffix="ORDER BY rowid")])

    def find_by_user_id(self, user_id: str) -> list[Book]:
        """Return the books owned by the user, each with its owner."""
        rows = self._select("user_id = ?", (user_id,), "ORDER BY rowid")
        return self._attach_owners([_book_from_row(row) for row in rows])

    def update(self, book: Book) -> None:
        """Save every field of the book, inserting it if it is new."""
        if not book.id:
            self.create(book)
            return
        book.updated_at = _now()
        if book.created_at is None:
            book.created_at = book.updated_at
        self._save(self._values(book))

    def delete(self, book_id: str) -> None:
        """Delete the book with this id."""
        self._delete_where("id = ?", (book_id,))

    def delete_by_user_id(self, user_id: str) -> None:
        """Delete every book owned by the user."""
        self._delete_where("user_id = ?", (user_id,))


class TokenRepository(_Repository):
    """Stores issued tokens."""

    _table = "br_issued_token"
    _columns = _TOKEN_COLUMNS

    def __init__(self, connection: sqlite3.Connection) -> None:
        self.connection = connection

    def with_tx(self, tx: Any) -> TokenRepository:
        """Return a token repository bound to the given transaction."""
        return TokenRepository(_transaction_connection(tx))

    @staticmethod
    def _values(token: IssuedToken) -> tuple:
        return (
            token.id,
            token.user_id,
            token.token,
            TokenType(token.token_type).value,
            _encode_time(token.expires_at),
            int(token.is_revoked),
            _encode_time(token.revoked_at),
            _encode_time(token.created_at),
            _encode_time(token.updated_at),
        )

    def create_token(self, token: IssuedToken) -> None:
        """Insert the token, filling in its id and timestamps."""
        _stamp_new(token)
        self._insert(self._values(token))

    def find_token_by_value(self, value: str) -> IssuedToken | None:
        """Return the token record with this value, or None."""
        rows = self._select("token = ?", (value,), "ORDER BY id LIMIT 1")
        return _token_from_row(rows[0]) if rows else None

    def find_active_tokens_by_user_id(self, user_id: str) -> list[IssuedToken]:
        """Return the user's tokens that are neither revoked nor expired."""
        rows = self._select(
            "user_id = ? AND is_revoked = 0 AND expires_at > ?",
            (user_id, _encode_time(_now())),
            "ORDER BY rowid",
        )
        return [_token_from_row(row) for row in rows]

    def revoke_token(self, token: IssuedToken) -> None:
        """Mark the token revoked now and save it."""
        now = _now()
        token.is_revoked = True
        token.revoked_at = now
        token.updated_at = now
        if not token.id:
            self.create_token(token)
            return
        self._save(self._values(token))

    def revoke_all_user_tokens(self, user_id: str) -> None:
        """Revoke every unrevoked, unexpired token of the user."""
        now = _encode_time(_now())
        self._write(
            "UPDATE br_issued_token SET is_revoked = 1, revoked_at = ?, updated_at = ? "
            "WHERE user_id = ? AND is_revoked = 0 AND expires_at > ?",
            (now, now, user_id, now),
        )

    def delete_by_user_id(self, user_id: str) -> None:
        """Delete every token of the user."""
        self._delete_where("user_id = ?", (user_id,))

    def cleanup_expired_tokens(self) -> None:
        """Delete tokens whose expiry has passed."""
        self._delete_where("expires_at < ?", (_encode_time(_now()),))