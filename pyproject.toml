[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bookrental"
version = "0.1.0"
description = "Book rental backend core: users, books and issued tokens stored in SQLite, with services for ownership transfer and token handling"
requires-python = ">=3.10"
keywords = ["books", "rental", "repository", "sqlite", "tokens"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: Dynamic Content",
    "Topic :: Database",
    "Typing :: Typed",
]
dependencies = [
    "bcrypt",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["bookrental"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
