"""Security middleware for FastAPI - bearer token validation and session."""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from auth.exceptions import InvalidTokenError
from auth.service import AuthService
from api.base import error_response, request_id_of, ErrorCodes


class AuthMiddleware(BaseHTTPMiddleware):
    """Middleware that validates the bearer token and establishes a Session.

    For protected routes:
    1. Extracts the token from the 'Authorization: Bearer' header
    2. Verifies it and resolves the roster role via AuthService
    3. Sets the Session on request.state

    Public paths bypass authentication entirely.
    """

    PUBLIC_PATHS = [
        "/health",
        "/docs",
        "/openapi.json",
    ]

    def __init__(self, app, auth_service: AuthService):
        super().__init__(app)
        self._auth_service = auth_service

    def _is_public_path(self, path: str) -> bool:
        """Check if path is in public paths list."""
        for public_path in self.PUBLIC_PATHS:
            if path == public_path or path.startswith(public_path + "/"):
                return True
        return False

    @staticmethod
    def _bearer_token(request: Request) -> str | None:
        header = request.headers.get("Authorization", "")
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            return None
        return token.strip()

    async def dispatch(self, request: Request, call_next):
        """Process request through middleware."""
        path = request.url.path

        # Skip auth for public paths
        if self._is_public_path(path):
            return await call_next(request)

        token = self._bearer_token(request)
        if not token:
            return self._unauthorized(request, ErrorCodes.NOT_AUTHENTICATED, "Authentication required")

        try:
            session = self._auth_service.authenticate(token)
        except InvalidTokenError:
            return self._unauthorized(request, ErrorCodes.INVALID_TOKEN, "Invalid or expired token")

        request.state.user_id = session.user_id
        request.state.session = session

        return await call_next(request)

    @staticmethod
    def _unauthorized(request: Request, code: str, message: str) -> JSONResponse:
        return JSONResponse(
            status_code=401,
            content=error_response(code, message, request_id_of(request)).model_dump(mode="json"),
        )
