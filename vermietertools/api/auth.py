# vermietertools/api/auth.py
"""
Authentication endpoints: login, logout, registration and "who am I".

Thin layer: credential checks live in Authenticator, sessions in
SessionManager, cookies in RequestGate.
"""

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from vermietertools.core.exceptions import StorageError
from vermietertools.core.rate_limit_config import RATE_LIMITS, limiter
from vermietertools.core.security import (
    Authenticator,
    RequestGate,
    SessionManager,
    get_request_gate,
    require_identity,
)
from vermietertools.models.auth_models import (
    AuthResponse,
    ErrorResponse,
    LoginRequest,
    MessageResponse,
    PublicUser,
    RegisterRequest,
)
from vermietertools.models.identity import Identity, UserRecord

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def get_authenticator(request: Request) -> Authenticator:
    return request.app.state.authenticator


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


async def _establish_session(
    user: UserRecord,
    response: Response,
    sessions: SessionManager,
    gate: RequestGate
) -> PublicUser:
    token = await sessions.create_session(user.id)
    gate.set_session_cookie(response, token)
    return PublicUser(**user.to_identity().public())


@router.post("/login", response_model=AuthResponse, responses=ERROR_RESPONSES)
@limiter.limit(RATE_LIMITS["login"])
async def login(
    request: Request,
    response: Response,
    payload: LoginRequest,
    authenticator: Authenticator = Depends(get_authenticator),
    sessions: SessionManager = Depends(get_session_manager),
    gate: RequestGate = Depends(get_request_gate),
):
    """
    POST /api/auth/login

    1. Both fields required (400, storage untouched)
    2. Unknown email and wrong password give the same 401
    3. On success: new session, HTTP-only cookie, public user fields
    """
    user = await authenticator.authenticate(payload.email, payload.password)
    public_user = await _establish_session(user, response, sessions, gate)

    logger.info(f"✅ Login for user {user.id}")
    return AuthResponse(message="Erfolgreich angemeldet", user=public_user)


@router.post("/register", status_code=201, response_model=AuthResponse,
             responses={**ERROR_RESPONSES, 409: {"model": ErrorResponse}})
@limiter.limit(RATE_LIMITS["register"])
async def register(
    request: Request,
    response: Response,
    payload: RegisterRequest,
    authenticator: Authenticator = Depends(get_authenticator),
    sessions: SessionManager = Depends(get_session_manager),
    gate: RequestGate = Depends(get_request_gate),
):
    """
    POST /api/auth/register

    Creates the user and signs them in right away, like a login.
    """
    user = await authenticator.register(payload.name, payload.email, payload.password)
    public_user = await _establish_session(user, response, sessions, gate)

    return AuthResponse(message="Registrierung erfolgreich", user=public_user)


@router.post("/logout", response_model=MessageResponse, responses={500: {"model": ErrorResponse}})
async def logout(
    request: Request,
    sessions: SessionManager = Depends(get_session_manager),
    gate: RequestGate = Depends(get_request_gate),
):
    """
    POST /api/auth/logout

    Always succeeds when the store is reachable, even without a session.
    The cookie is cleared in every case.
    """
    await gate.attach(request)
    try:
        await sessions.destroy_session(gate.session_token(request))
    except StorageError as e:
        logger.error(f"Logout failed: {e}")
        failed = JSONResponse(status_code=500, content={"error": "Fehler beim Abmelden", "code": e.error_code})
        gate.clear_session_cookie(failed)
        return failed

    done = JSONResponse(content={"message": "Erfolgreich abgemeldet"})
    gate.clear_session_cookie(done)
    return done


@router.get("/me", response_model=PublicUser, responses={401: {"model": ErrorResponse}})
@router.get("/identity", response_model=PublicUser, responses={401: {"model": ErrorResponse}})
async def me(identity: Identity = Depends(require_identity)):
    """GET /api/auth/me - public fields of the signed-in user"""
    return PublicUser(**identity.public())
