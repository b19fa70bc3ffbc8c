"""
Security module for Vermietertools.

Centralizes the authentication core:
- Password hashing (bcrypt)
- Session lifecycle with lazy expiry
- Request Gate: one identity resolution per request
- Ownership scoping for user-owned data

Routes only depend on the gate, never on cookies or stores directly.
"""

from .authentication import Authenticator
from .ownership import scope_to_owner
from .passwords import PasswordHasher
from .request_gate import (
    SESSION_COOKIE_NAME,
    SESSION_MAX_AGE_SECONDS,
    RequestGate,
    current_identity_optional,
    get_request_gate,
    require_identity,
    require_page_identity,
)
from .session_manager import SESSION_TTL, SessionManager

__all__ = [
    'Authenticator',
    'PasswordHasher',
    'RequestGate',
    'SessionManager',
    'SESSION_COOKIE_NAME',
    'SESSION_MAX_AGE_SECONDS',
    'SESSION_TTL',
    'current_identity_optional',
    'get_request_gate',
    'require_identity',
    'require_page_identity',
    'scope_to_owner',
]
