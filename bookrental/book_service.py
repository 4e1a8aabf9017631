"""Business rules for creating, reading, changing and removing books."""

from __future__ import annotations

from .models import Book, BookCreate, BookUpdate, ServiceError, User
from .repositories import BookRepository, RepositoryError, UserRepository
from .utils import is_valid_uuid


class BookService:
    """Validates book requests before handing them to the repositories."""

    def __init__(self, book_repo: BookRepository, user_repo: UserRepository) -> None:
        self.book_repo = book_repo
        self.user_repo = user_repo

    def _require_user(self, user_id: str) -> User:
        try:
            user = self.user_repo.find_by_id(user_id)
        except RepositoryError as exc:
            raise ServiceError(f"error checking user: {exc}") from exc
        if user is None:
            raise ServiceError("user not found")
        return user

    def _require_unused_isbn(self, isbn: str) -> None:
        try:
            existing = self.book_repo.find_by_isbn(isbn)
        except RepositoryError as exc:
            raise ServiceError(f"error checking existing book: {exc}") from exc
        if existing is not None:
            raise ServiceError("ISBN already exists")

    def _require_book(self, book_id: str) -> Book:
        if not is_valid_uuid(book_id):
            raise ServiceError("invalid book ID")
        try:
            book = self.book_repo.find_by_id(book_id)
        except RepositoryError as exc:
            raise ServiceError(f"error finding book: {exc}") from exc
        if book is None:
            raise ServiceError("book not found")
        return book

    def create(self, book_create: BookCreate) -> Book:
        """Store a new book for an existing user under an unused ISBN."""
        self._require_user(book_create.user_id)
        self._require_unused_isbn(book_create.isbn)
        book = Book(
            title=book_create.title,
            author=book_create.author,
            isbn=book_create.isbn,
            description=book_create.description,
            user_id=book_create.user_id,
        )
        try:
            self.book_repo.create(book)
        except RepositoryError as exc:
            raise ServiceError(f"error creating book: {exc}") from exc
        return book

    def get_by_id(self, book_id: str) -> Book:
        """Return the book with this id."""
        return self._require_book(book_id)

    def get_all(self) -> list[Book]:
        """Return every book."""
        return self.book_repo.find_all()

    def get_by_user_id(self, user_id: str) -> list[Book]:
        """Return the books owned by an existing user."""
        if not is_valid_uuid(user_id):
            raise ServiceError("invalid user ID")
        self._require_user(user_id)
        return self.book_repo.find_by_user_id(user_id)

    def update(self, book_id: str, book_update: BookUpdate) -> Book:
        """Apply the non-empty fields of the update and save the book."""
        book = self._require_book(book_id)
        if book_update.title:
            book.title = book_update.title
        if book_update.author:
            book.author = book_update.author
        if book_update.isbn and book_update.isbn != book.isbn:
            self._require_unused_isbn(book_update.isbn)
            book.isbn = book_update.isbn
        if book_update.description:
            book.description = book_update.description
        if book_update.user_id:
            self._require_user(book_update.user_id)
            book.user_id = book_update.user_id
        try:
            self.book_repo.update(book)
        except RepositoryError as exc:
            raise ServiceError(f"error updating book: {exc}") from exc
        return book

    def delete(self, book_id: str) -> None:
        """Remove an existing book."""
        self._require_book(book_id)
        self.book_repo.delete(book_id)