"""Authentication and authorization modules."""

from auth.exceptions import (
    AuthError,
    InvalidTokenError,
    NotAuthorizedError,
)
from auth.types import (
    Session,
    VerifiedIdentity,
)
