import pytest

from bookrental.book_service import BookService
from bookrental.database import connect, migrate
from bookrental.models import Book, BookCreate, BookUpdate, ServiceError, User
from bookrental.repositories import BookRepository, UserRepository

USER_ID = "11111111-1111-1111-1111-111111111111"
OTHER_USER_ID = "22222222-2222-2222-2222-222222222222"
BOOK_ID = "b1a2c3d4-e5f6-7890-abcd-1234567890ab"
OTHER_BOOK_ID = "c1a2c3d4-e5f6-7890-abcd-1234567890ab"
PASSWORD = "password"


@pytest.fixture
def connection():
    conn = connect(":memory:", max_retries=1, retry_delay=0)
    migrate(conn)
    yield conn
    conn.close()


@pytest.fixture
def service(connection):
    return BookService(BookRepository(connection), UserRepository(connection))


def add_user(connection, user_id):
    UserRepository(connection).create(
        User(id=user_id, name="User", email=f"{user_id}@example.com", password=PASSWORD)
    )


def add_book(connection, book_id, isbn, user_id=USER_ID, title="Old"):
    BookRepository(connection).create(
        Book(id=book_id, title=title, author="Author", isbn=isbn, user_id=user_id)
    )


def test_create_success(service, connection):
    add_user(connection, USER_ID)
    request = BookCreate(title="Book 1", author="Author 1", isbn="1234567890", user_id=USER_ID)
    book = service.create(request)
    assert book.title == "Book 1"
    assert book.user_id == USER_ID
    stored = BookRepository(connection).find_by_isbn("1234567890")
    assert stored.id == book.id


def test_create_user_not_found(service, connection):
    request = BookCreate(title="Book 1", author="Author 1", isbn="1234567890", user_id=USER_ID)
    with pytest.raises(ServiceError, match="user not found"):
        service.create(request)
    assert BookRepository(connection).find_all() == []


def test_create_isbn_exists(service, connection):
    add_user(connection, USER_ID)
    add_book(connection, BOOK_ID, "1234567890")
    request = BookCreate(title="Book 1", author="Author 1", isbn="1234567890", user_id=USER_ID)
    with pytest.raises(ServiceError, match="ISBN already exists"):
        service.create(request)


def test_create_repo_error(service, connection):
    connection.close()
    request = BookCreate(title="Book 1", author="Author 1", isbn="1234567890", user_id=USER_ID)
    with pytest.raises(ServiceError, match="error checking user"):
        service.create(request)


def test_get_by_id_success(service, connection):
    add_user(connection, USER_ID)
    add_book(connection, BOOK_ID, "1234567890")
    assert service.get_by_id(BOOK_ID).id == BOOK_ID


def test_get_by_id_invalid_id(service):
    with pytest.raises(ServiceError, match="invalid book ID"):
        service.get_by_id("invalid")


def test_get_by_id_not_found(service):
    with pytest.raises(ServiceError, match="book not found"):
        service.get_by_id(USER_ID)


def test_get_by_id_repo_error(service, connection):
    connection.close()
    with pytest.raises(ServiceError, match="error finding book"):
        service.get_by_id(BOOK_ID)


def test_get_all_success(service, connection):
    add_user(connection, USER_ID)
    add_book(connection, BOOK_ID, "1")
    add_book(connection, OTHER_BOOK_ID, "2")
    assert [book.id for book in service.get_all()] == [BOOK_ID, OTHER_BOOK_ID]


def test_get_by_user_id_success(service, connection):
    add_user(connection, USER_ID)
    add_user(connection, OTHER_USER_ID)
    add_book(connection, BOOK_ID, "1")
    add_book(connection, OTHER_BOOK_ID, "2", user_id=OTHER_USER_ID)
    assert [book.id for book in service.get_by_user_id(USER_ID)] == [BOOK_ID]


def test_get_by_user_id_invalid_id(service):
    with pytest.raises(ServiceError, match="invalid user ID"):
        service.get_by_user_id("invalid")


def test_get_by_user_id_user_not_found(service):
    with pytest.raises(ServiceError, match="user not found"):
        service.get_by_user_id(USER_ID)


def test_update_success(service, connection):
    add_user(connection, USER_ID)
    add_book(connection, BOOK_ID, "1", title="Old")
    updated = service.update(BOOK_ID, BookUpdate(title="New"))
    assert updated.title == "New"
    assert updated.isbn == "1"
    assert BookRepository(connection).find_by_id(BOOK_ID).title == "New"


def test_update_isbn_exists(service, connection):
    add_user(connection, USER_ID)
    add_book(connection, BOOK_ID, "old")
    add_book(connection, OTHER_BOOK_ID, "new")
    with pytest.raises(ServiceError, match="ISBN already exists"):
        service.update(BOOK_ID, BookUpdate(isbn="new"))
    assert BookRepository(connection).find_by_id(BOOK_ID).isbn == "old"


def test_update_same_isbn_is_accepted(service, connection):
    add_user(connection, USER_ID)
    add_book(connection, BOOK_ID, "old")
    assert service.update(BOOK_ID, BookUpdate(isbn="old", author="Someone")).author == "Someone"


def test_update_user_not_found(service, connection):
    add_user(connection, USER_ID)
    add_book(connection, BOOK_ID, "1")
    with pytest.raises(ServiceError, match="user not found"):
        service.update(BOOK_ID, BookUpdate(user_id=OTHER_USER_ID))


def test_update_moves_book_to_existing_user(service, connection):
    add_user(connection, USER_ID)
    add_user(connection, OTHER_USER_ID)
    add_book(connection, BOOK_ID, "1")
    service.update(BOOK_ID, BookUpdate(user_id=OTHER_USER_ID))
    assert BookRepository(connection).find_by_id(BOOK_ID).user_id == OTHER_USER_ID


def test_update_invalid_id(service):
    with pytest.raises(ServiceError, match="invalid book ID"):
        service.update("invalid", BookUpdate(title="New"))


def test_delete_success(service, connection):
    add_user(connection, USER_ID)
    add_book(connection, BOOK_ID, "1")
    service.delete(BOOK_ID)
    assert BookRepository(connection).find_by_id(BOOK_ID) is None


def test_delete_not_found(service):
    with pytest.raises(ServiceError, match="book not found"):
        service.delete(USER_ID)


def test_delete_invalid_id(service):
    with pytest.raises(ServiceError, match="invalid book ID"):
        service.delete("invalid")