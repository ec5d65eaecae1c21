"""
Authentication endpoints.

Google sign-in, the current user, logout and the credit balance.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Cookie, Depends, HTTPException, Query, Response
from fastapi.responses import RedirectResponse

from api.dependencies import get_auth_service
from api.middleware.auth import get_account, get_optional_account

from .exceptions import AuthNotConfiguredError, OAuthExchangeError, OAuthStateError
from .interfaces import IAuthService
from .models import AuthTokenResponse, CreditsResponse, LogoutResponse, User

logger = logging.getLogger(__name__)

router = APIRouter()

# The state cookie is only sent back to the Google sign-in routes
OAUTH_STATE_COOKIE = "modelcompare_oauth_state"
OAUTH_STATE_COOKIE_PATH = "/api/auth/google"
OAUTH_STATE_MAX_AGE = 600


@router.get("/user", response_model=User)
async def get_user(account: User = Depends(get_account)) -> User:
    """The bearer-token user, else the device user; 401 when neither is present."""
    return account


@router.get("/google")
async def google_sign_in(
    auth: IAuthService = Depends(get_auth_service),
) -> RedirectResponse:
    """
    Redirect to Google's consent screen.

    A fresh state goes both into the redirect and into an httponly cookie;
    the callback accepts only a state matching the cookie.
    """
    state = auth.new_oauth_state()
    try:
        url = auth.google_authorization_url(state)
    except AuthNotConfiguredError as e:
        raise HTTPException(status_code=503, detail=e.message)

    response = RedirectResponse(url, status_code=302)
    response.set_cookie(
        OAUTH_STATE_COOKIE,
        state,
        max_age=OAUTH_STATE_MAX_AGE,
        path=OAUTH_STATE_COOKIE_PATH,
        httponly=True,
        samesite="lax",
    )
    return response


@router.get("/google/callback", response_model=AuthTokenResponse)
async def google_callback(
    response: Response,
    code: str = Query(..., min_length=1),
    state: Optional[str] = Query(default=None),
    expected_state: Optional[str] = Cookie(default=None, alias=OAUTH_STATE_COOKIE),
    auth: IAuthService = Depends(get_auth_service),
) -> AuthTokenResponse:
    """Exchange Google's authorization code for a signed bearer token."""
    try:
        auth.verify_oauth_state(state, expected_state)
    except OAuthStateError as e:
        raise HTTPException(status_code=400, detail=e.message)
    response.delete_cookie(OAUTH_STATE_COOKIE, path=OAUTH_STATE_COOKIE_PATH)

    try:
        return await auth.complete_google_sign_in(code)
    except AuthNotConfiguredError as e:
        raise HTTPException(status_code=503, detail=e.message)
    except OAuthExchangeError as e:
        raise HTTPException(status_code=502, detail=e.message)


@router.post("/logout", response_model=LogoutResponse)
async def logout() -> LogoutResponse:
    """Tokens are stateless; the client discards its copy."""
    return LogoutResponse(success=True)


@router.get("/credits", response_model=CreditsResponse)
async def get_credits(account: Optional[User] = Depends(get_optional_account)) -> CreditsResponse:
    """Current credit balance, 0 when no user can be identified."""
    return CreditsResponse(credits=account.credits if account else 0)
