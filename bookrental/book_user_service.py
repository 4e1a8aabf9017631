"""Operations that touch books and users together in one transaction."""

from __future__ import annotations

import sqlite3

from .models import Book, BookCreateRequest, ServiceError
from .repositories import BookRepository, RepositoryError, UserRepository
from .transactions import TransactionManager


class BookUserService:
    """Moves books between users and creates books for a user atomically."""

    def __init__(
        self,
        tx_manager: TransactionManager,
        book_repo: BookRepository,
        user_repo: UserRepository,
    ) -> None:
        self.tx_manager = tx_manager
        self.book_repo = book_repo
        self.user_repo = user_repo

    def transfer_book_ownership(self, book_id: str, from_user_id: str, to_user_id: str) -> None:
        """Give the book, currently owned by one user, to another existing user."""

        def transfer(tx: sqlite3.Connection) -> None:
            books = self.book_repo.with_tx(tx)
            users = self.user_repo.with_tx(tx)
            try:
                book = books.find_by_id(book_id)
            except RepositoryError as exc:
                raise ServiceError(f"error finding book: {exc}") from exc
            if book is None:
                raise ServiceError("book not found")
            if book.user_id != from_user_id:
                raise ServiceError("book does not belong to the specified user")
            try:
                to_user = users.find_by_id(to_user_id)
            except RepositoryError as exc:
                raise ServiceError(f"error finding target user: {exc}") from exc
            if to_user is None:
                raise ServiceError("target user not found")
            book.user_id = to_user_id
            try:
                books.update(book)
            except RepositoryError as exc:
                raise ServiceError(f"error updating book owner: {exc}") from exc

        self.tx_manager.with_transaction(transfer)

    def create_book_with_user(self, book_create: BookCreateRequest, user_id: str) -> Book:
        """Create a book owned by an existing user under an unused ISBN."""

        def create(tx: sqlite3.Connection) -> Book:
            books = self.book_repo.with_tx(tx)
            users = self.user_repo.with_tx(tx)
            try:
                user = users.find_by_id(user_id)
            except RepositoryError as exc:
                raise ServiceError(f"error checking user: {exc}") from exc
            if user is None:
                raise ServiceError("user not found")
            try:
                existing = books.find_by_isbn(book_create.isbn)
            except RepositoryError as exc:
                raise ServiceError(f"error checking existing book: {exc}") from exc
            if existing is not None:
                raise ServiceError("ISBN already exists")
            book = Book(
                title=book_create.title,
                author=book_create.author,
                isbn=book_create.isbn,
                description=book_create.description,
                user_id=user_id,
            )
            try:
                books.create(book)
            except RepositoryError as exc:
                raise ServiceError(f"error creating book: {exc}") from exc
            return book

        return self.tx_manager.with_transaction(create)