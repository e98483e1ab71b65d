"""Token store specific exceptions."""


class TokenStoreError(Exception):
    """Base class for persistence layer errors."""


class PersistenceError(TokenStoreError):
    """Raised when the store call fails in transport or violates a constraint."""

    def __init__(self, message: str, detail: object = None) -> None:
        super().__init__(message)
        self.detail = detail


class TokenNotFoundError(TokenStoreError):
    """Raised when no token (or one of its joined rows) matches the requested code."""

    def __init__(self, token_code: str) -> None:
        super().__init__(f"Token not found: {token_code}")
        self.token_code = token_code
