"""Exceptions raised by the account directory."""


class NotFound(RuntimeError):
    """A key is absent from the record store."""

    def __init__(self, key: str) -> None:
        super().__init__(f'No such key: {key}')
        self.key = key


class StorageError(RuntimeError):
    """The record store failed to complete an operation."""


class MalformedRecord(RuntimeError):
    """A stored record could not be decoded, or lacks required fields."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f'Malformed record at {key}: {reason}')
        self.key = key
        self.reason = reason


class DuplicateConflict(RuntimeError):
    """An account with the same username or email address already exists."""

    def __init__(self, field: str) -> None:
        super().__init__(f'An account with that {field} already exists')
        self.field = field


class AuthenticationFailed(RuntimeError):
    """Failed to authenticate user with provided credentials."""


class InvalidToken(RuntimeError):
    """Token is malformed, or was signed with a different secret."""


class ExpiredToken(InvalidToken):
    """Token has expired."""
