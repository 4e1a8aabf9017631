# bookrental

The core of a small book rental backend. Users own books, books can move from
one owner to another, and issued access and refresh tokens are stored and
revoked. Data lives in SQLite.

## Installation

```
pip install .
```

To run the tests, install the test extra and run pytest:

```
pip install ".[test]"
pytest
```

## Overview

- `bookrental.models`: the `User`, `Book` and `IssuedToken` records, the request
  types `BookCreate`, `BookCreateRequest`, `BookUpdate` and `LogoutRequest`, the
  `Role` and `TokenType` enums, and `ServiceError`, which the services raise.
- `bookrental.utils`: bcrypt password hashing (`hash_password`,
  `check_password_hash`), UUID helpers (`generate_uuid`, `is_valid_uuid`), and
  JSON `Response` helpers (`ok`, `created`, `bad_request`, `not_found`,
  `forbidden`, `internal_server_error`).
- `bookrental.database`: `connect` opens the database. It retries on failure
  and raises `DatabaseError` once it runs out of attempts. `migrate` creates the
  tables and a default admin user.
- `bookrental.repositories`: `UserRepository`, `BookRepository` and
  `TokenRepository`. A lookup returns `None` when nothing matches, and a
  database failure raises `RepositoryError`.
- `bookrental.transactions`: `TransactionManager` runs work inside one
  transaction. `transaction()` is a context manager and `with_transaction(fn)`
  calls `fn`. Either way the work is committed on success and rolled back on
  error.
- `bookrental.book_service`, `bookrental.book_user_service` and
  `bookrental.token_service` hold the business rules.

## Example

```python
from bookrental.database import connect, migrate
from bookrental.repositories import BookRepository, UserRepository
from bookrental.transactions import TransactionManager
from bookrental.book_service import BookService
from bookrental.book_user_service import BookUserService
from bookrental.models import BookCreate, ServiceError

connection = connect(":memory:")
migrate(connection)

users = UserRepository(connection)
books = BookRepository(connection)
service = BookService(books, users)

owner = users.find_all()[0]
book = service.create(BookCreate(
    title="A Book",
    author="Someone",
    isbn="978-0000000000",
    description="",
    user_id=owner.id,
))

try:
    service.get_by_id("not-a-uuid")
except ServiceError as exc:
    print(exc)  # invalid book ID

transfers = BookUserService(TransactionManager(connection), books, users)
```

Services raise `ServiceError`. The message says what went wrong, for example
`user not found`, `ISBN already exists` or
`book does not belong to the specified user`.