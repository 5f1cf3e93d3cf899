"""Typed exceptions for auth failures."""


class AuthError(Exception):
    """Base class for authentication/authorization errors."""


class InvalidTokenError(AuthError):
    """
    Identity token is missing, malformed, expired or rejected by the provider.
    """


class NotAuthorizedError(AuthError):
    """Authenticated, but the role does not allow this operation."""

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"Not allowed: {action}")
