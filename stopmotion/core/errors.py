# File: stopmotion/core/errors.py

"""
Typed errors raised by the project store.

No raw SQLAlchemy exception leaves ProjectStore; storage problems surface as
StorageFailure with the original chained as __cause__.
"""


class StoreError(Exception):
    """Base class for every error raised by ProjectStore."""


class DuplicateUsername(StoreError):
    def __init__(self, username: str):
        super().__init__(f"Username '{username}' is already taken.")
        self.username = username


class InvalidUsername(StoreError):
    def __init__(self, username: str):
        super().__init__("Username must not be empty.")
        self.username = username


class NotFound(StoreError):
    def __init__(self, kind: str, key):
        super().__init__(f"{kind} {key!r} not found.")
        self.kind = kind
        self.key = key


class InvalidCredentials(StoreError):
    def __init__(self, username: str):
        super().__init__(f"Invalid password for user '{username}'.")
        self.username = username


class InvalidDirectory(StoreError):
    def __init__(self, path, reason: str = "not a readable directory"):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class StorageFailure(StoreError):
    """The database rejected or lost a write; the transaction was rolled back."""


class IngestCancelled(StoreError):
    """An in-flight import was cancelled; nothing was written."""
