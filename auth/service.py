"""Authentication service - turns a verified identity into a Session."""

import logging
from typing import Protocol

from auth.exceptions import InvalidTokenError, NotAuthorizedError
from auth.types import Session, VerifiedIdentity
from core.services.staff_service import StaffService

logger = logging.getLogger(__name__)


class IdentityVerifier(Protocol):
    """
    Checks a bearer token with the external identity provider.

    Implementations raise InvalidTokenError for anything they do not vouch
    for.
    """

    def verify(self, token: str) -> VerifiedIdentity: ...


class AuthService:
    """Orchestrates sign-in.

    Handles:
    - Token verification (delegated to the identity provider)
    - First-sight profile creation in the staff roster
    - Role lookup for the resulting Session
    """

    def __init__(self, verifier: IdentityVerifier, staff: StaffService):
        self._verifier = verifier
        self._staff = staff

    def authenticate(self, token: str) -> Session:
        """Verify a bearer token and establish the caller's Session.

        Raises:
            InvalidTokenError: Token missing or rejected by the provider.
        """
        if not token:
            raise InvalidTokenError("Missing token")

        identity = self._verifier.verify(token)
        return self.establish_session(identity)

    def establish_session(self, identity: VerifiedIdentity) -> Session:
        """Build a Session for a verified identity.

        The role comes from the roster record keyed by the provider uid,
        which is created as a barber profile the first time the person
        signs in.
        """
        record = self._staff.ensure_profile(identity)

        return Session(
            user_id=identity.uid,
            email=identity.email or record.email,
            display_name=identity.display_name or record.name,
            role=record.role,
        )


def require_admin(session: Session, action: str) -> None:
    """
    Raises:
        NotAuthorizedError: If the session is not an admin.
    """
    if not session.is_admin:
        logger.warning(f"User {session.user_id} denied {action}")
        raise NotAuthorizedError(action)
