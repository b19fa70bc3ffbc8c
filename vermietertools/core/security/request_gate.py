# vermietertools/core/security/request_gate.py
"""
Request Gate - the single place where the session cookie is read.

The gate resolves the caller's identity once per request and stores it on
request.state; protected routes and pages only ever read it from there.
"""

from typing import Optional
from urllib.parse import quote
import logging

from fastapi import HTTPException, Request, Response

from vermietertools.core.exceptions import ConfigurationError, UnauthenticatedError
from vermietertools.core.security.session_manager import SESSION_TTL, SessionManager
from vermietertools.models.identity import Identity

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "session-token"
SESSION_MAX_AGE_SECONDS = int(SESSION_TTL.total_seconds())  # 604800


class RequestGate:
    """Resolves identities from inbound requests and manages the cookie."""

    def __init__(
        self,
        session_manager: SessionManager,
        *,
        secure_cookies: bool = False,
        login_path: str = "/login"
    ):
        self.session_manager = session_manager
        self.secure_cookies = secure_cookies
        self.login_path = login_path

    async def attach(self, request: Request) -> Optional[Identity]:
        """
        Resolve the identity for this request, exactly once.

        Later calls return the cached result from request.state.
        """
        state = request.state
        if getattr(state, "identity_resolved", False):
            return state.identity

        token = request.cookies.get(SESSION_COOKIE_NAME) or None
        identity = await self.session_manager.resolve_identity(token) if token else None

        state.session_token = token
        state.identity = identity
        state.identity_resolved = True
        return identity

    @staticmethod
    def session_token(request: Request) -> Optional[str]:
        """Token seen by attach(); downstream code never parses cookies."""
        return getattr(request.state, "session_token", None)

    def cookie_settings(self) -> dict:
        return {
            "httponly": True,
            "secure": self.secure_cookies,
            "samesite": "lax",
            "path": "/",
        }

    def set_session_cookie(self, response: Response, token: str) -> None:
        response.set_cookie(
            SESSION_COOKIE_NAME,
            token,
            max_age=SESSION_MAX_AGE_SECONDS,
            **self.cookie_settings()
        )

    def clear_session_cookie(self, response: Response) -> None:
        response.delete_cookie(SESSION_COOKIE_NAME, **self.cookie_settings())

    def login_redirect_url(self, request: Request) -> str:
        next_url = request.url.path
        if request.url.query:
            next_url += "?" + request.url.query
        return f"{self.login_path}?next={quote(next_url, safe='/')}"


# =============================================================================
# FastAPI dependencies
# =============================================================================

def get_request_gate(request: Request) -> RequestGate:
    gate = getattr(request.app.state, "request_gate", None)
    if gate is None:
        raise ConfigurationError("RequestGate not initialized", component="RequestGate")
    return gate


async def current_identity_optional(request: Request) -> Optional[Identity]:
    return await get_request_gate(request).attach(request)


async def require_identity(request: Request) -> Identity:
    """
    Gate for API routes: structured 401 when there is no valid session.
    """
    identity = await current_identity_optional(request)
    if identity is None:
        logger.debug(f"Unauthenticated API access: {request.method} {request.url.path}")
        raise UnauthenticatedError()
    return identity


async def require_page_identity(request: Request) -> Identity:
    """
    Gate for page routes: redirect to the login page instead of an error.
    """
    gate = get_request_gate(request)
    identity = await gate.attach(request)
    if identity is None:
        raise HTTPException(status_code=303, headers={"Location": gate.login_redirect_url(request)})
    return identity
