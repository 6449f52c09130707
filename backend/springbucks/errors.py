"""Exception taxonomy shared by the store, cache and service layers."""


class SpringBucksError(Exception):
    """Base class for all application errors."""


class StoreError(SpringBucksError):
    """The relational store failed; fatal to the current request."""


class NotFoundError(StoreError):
    """A record with the requested identity does not exist."""

    def __init__(self, entity: str, key: object):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} {key!r} not found")


class ConstraintError(StoreError):
    """A save violated a store constraint (e.g. a duplicate coffee name)."""


class CacheUnavailableError(SpringBucksError):
    """The cache substrate could not be reached or timed out."""

    def __init__(self, operation: str, original_error: Exception | None = None):
        self.operation = operation
        message = f"cache {operation} failed"
        if original_error is not None:
            message = f"{message}: {type(original_error).__name__}: {original_error}"
        super().__init__(message)
        if original_error is not None:
            self.__cause__ = original_error


class SerializationError(SpringBucksError):
    """A cache entry could not be encoded or decoded."""
