"""Book rental backend core: models, SQLite storage, repositories and services."""

__version__ = "0.1.0"