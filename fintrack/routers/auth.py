"""
Authentication endpoints: GitHub OAuth sign-in, session lookup and sign-out.
"""
import secrets
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import RedirectResponse
import structlog

from ..config import Settings
from ..middleware.logging import get_client_ip
from ..models.auth import SessionResponse
from ..services.auth import AuthService
from ..utils.constants import OAUTH_STATE_COOKIE_NAME, OAUTH_STATE_MAX_AGE
from ..utils.dependencies import CurrentSession, get_app_settings, get_auth_service
from ..utils.exceptions import ValidationError

logger = structlog.get_logger()
router = APIRouter(prefix="/auth", tags=["authentication"])


def set_session_cookie(response: Response, settings: Settings, token: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_max_age_seconds,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.is_production
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.is_production
    )


@router.get(
    "/signin/github",
    summary="Start GitHub Sign-in",
    description="Redirect to GitHub's authorization page."
)
async def signin_github(
    settings: Settings = Depends(get_app_settings),
    auth_service: AuthService = Depends(get_auth_service)
) -> RedirectResponse:
    url, state = auth_service.begin_sign_in()
    response = RedirectResponse(url, status_code=status.HTTP_302_FOUND)
    response.set_cookie(
        key=OAUTH_STATE_COOKIE_NAME,
        value=state,
        max_age=OAUTH_STATE_MAX_AGE,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.is_production
    )
    return response


@router.get(
    "/callback/github",
    summary="GitHub OAuth Callback",
    description="Complete sign-in, open a session and redirect to the frontend."
)
async def callback_github(
    request: Request,
    code: Optional[str] = None,
    state: Optional[str] = None,
    settings: Settings = Depends(get_app_settings),
    auth_service: AuthService = Depends(get_auth_service)
) -> RedirectResponse:
    """Exchange the authorization code and set the session cookie."""
    expected_state = request.cookies.get(OAUTH_STATE_COOKIE_NAME)
    if not state or not expected_state or not secrets.compare_digest(state.encode(), expected_state.encode()):
        logger.warning("OAuth state mismatch", client_ip=get_client_ip(request))
        raise ValidationError(
            message="Invalid OAuth state",
            code="OAUTH_STATE_MISMATCH",
            details={"state": "Missing" if not state else "Mismatch"}
        )
    
    user, session = await auth_service.complete_sign_in(
        code,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent")
    )
    logger.info("Sign-in completed", user_id=user.id, session_id=session.id)
    
    response = RedirectResponse(settings.frontend_url, status_code=status.HTTP_302_FOUND)
    set_session_cookie(response, settings, session.token)
    response.delete_cookie(OAUTH_STATE_COOKIE_NAME, path="/")
    return response


@router.get(
    "/session",
    response_model=SessionResponse,
    summary="Current Session",
    description="Return the signed-in user and the session expiry."
)
async def get_session(current: CurrentSession) -> SessionResponse:
    return SessionResponse.from_session(current)


async def _sign_out(request: Request, settings: Settings, auth_service: AuthService) -> None:
    token = request.cookies.get(settings.session_cookie_name)
    await auth_service.sign_out(token)


@router.get("/signout", summary="Sign Out (redirect)")
async def signout_redirect(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    auth_service: AuthService = Depends(get_auth_service)
) -> RedirectResponse:
    await _sign_out(request, settings, auth_service)
    response = RedirectResponse(settings.frontend_url, status_code=status.HTTP_302_FOUND)
    clear_session_cookie(response, settings)
    return response


@router.post("/signout", summary="Sign Out")
async def signout(
    request: Request,
    response: Response,
    settings: Settings = Depends(get_app_settings),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    await _sign_out(request, settings, auth_service)
    clear_session_cookie(response, settings)
    return {"message": "Signed out successfully"}
