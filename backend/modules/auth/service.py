"""
Authentication service implementation.

Signs and validates bearer tokens with python-jose, manages anonymous
device users, and runs the Google OAuth code exchange over httpx.
"""

import hashlib
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional
from urllib.parse import urlencode

import httpx
from jose import ExpiredSignatureError, JWTError, jwt

from shared.config import Settings, get_settings
from shared.models import AuthenticatedUser

from .exceptions import (
    AuthNotConfiguredError,
    ExpiredTokenError,
    InvalidTokenError,
    MissingTokenError,
    OAuthExchangeError,
    OAuthStateError,
    UserNotFoundError,
)
from .interfaces import IAuthService, IUserRepository
from .models import AuthTokenResponse, GoogleProfile, JWTPayload, User

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"


def hash_device_id(device_id: str) -> str:
    """Salted sha256 of a device id, so raw identifiers are never stored."""
    return hashlib.sha256(f"modelcompare_{device_id}".encode("utf-8")).hexdigest()


class AuthService(IAuthService):
    """
    Implementation of the authentication service.

    ``http_client`` is optional; when omitted a short-lived
    ``httpx.AsyncClient`` is opened per sign-in.
    """

    def __init__(
        self,
        users: IUserRepository,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self._users = users
        self._settings = settings or get_settings()
        self._http = http_client

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    def issue_token(self, user: User) -> str:
        if not self._settings.jwt_secret:
            raise AuthNotConfiguredError("JWT signing")

        now = datetime.now(timezone.utc)
        claims = {
            "sub": user.id,
            "email": user.email,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(hours=self._settings.jwt_expiry_hours)).timestamp()),
        }
        return jwt.encode(claims, self._settings.jwt_secret, algorithm=self._settings.jwt_algorithm)

    def validate_token(self, token: str) -> AuthenticatedUser:
        if not token:
            raise MissingTokenError()
        if not self._settings.jwt_secret:
            raise AuthNotConfiguredError("JWT validation")

        try:
            payload = JWTPayload(
                **jwt.decode(
                    token,
                    self._settings.jwt_secret,
                    algorithms=[self._settings.jwt_algorithm],
                )
            )
        except ExpiredSignatureError:
            raise ExpiredTokenError()
        except (JWTError, ValueError) as e:
            raise InvalidTokenError(f"Invalid token: {e}")

        return AuthenticatedUser(
            id=payload.sub,
            email=payload.email,
            email_verified=payload.email is not None,
            auth_method="jwt",
            last_sign_in=datetime.fromtimestamp(payload.iat, tz=timezone.utc),
        )

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def get_user(self, user_id: str) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def ensure_device_user(self, device_id: str) -> User:
        device_hash = hash_device_id(device_id)
        user = self._users.get_by_device_hash(device_hash)
        if user is None:
            user = self._users.create(device_hash)
            logger.info("Created device user %s", user.id)
        return user

    # ------------------------------------------------------------------
    # Google OAuth
    # ------------------------------------------------------------------

    def _require_google(self) -> None:
        if not (self._settings.google_client_id and self._settings.google_client_secret):
            raise AuthNotConfiguredError("Google sign-in")

    @staticmethod
    def new_oauth_state() -> str:
        """Random value binding one sign-in redirect to its callback."""
        return secrets.token_urlsafe(32)

    @staticmethod
    def verify_oauth_state(received: Optional[str], expected: Optional[str]) -> None:
        """
        Check the callback's state against the one issued with the redirect.

        Raises:
            OAuthStateError: Either value is missing or they differ
        """
        if not received or not expected:
            raise OAuthStateError("Missing OAuth state")
        if not secrets.compare_digest(received, expected):
            logger.warning("Rejected Google callback with mismatched state")
            raise OAuthStateError()

    def google_authorization_url(self, state: str) -> str:
        self._require_google()
        params = {
            "client_id": self._settings.google_client_id,
            "redirect_uri": self._settings.google_callback_url,
            "response_type": "code",
            "scope": "openid email profile",
            "access_type": "online",
            "state": state,
        }
        return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"

    async def _fetch_google_profile(self, client: httpx.AsyncClient, code: str) -> GoogleProfile:
        try:
            token_response = await client.post(
                GOOGLE_TOKEN_URL,
                data={
                    "code": code,
                    "client_id": self._settings.google_client_id,
                    "client_secret": self._settings.google_client_secret,
                    "redirect_uri": self._settings.google_callback_url,
                    "grant_type": "authorization_code",
                },
            )
            token_response.raise_for_status()
            access_token = token_response.json()["access_token"]

            profile_response = await client.get(
                GOOGLE_USERINFO_URL,
                headers={"Authorization": f"Bearer {access_token}"},
            )
            profile_response.raise_for_status()
        except (httpx.HTTPError, KeyError) as e:
            logger.warning("Google OAuth exchange failed: %s", e)
            raise OAuthExchangeError(f"Google sign-in failed: {e}") from e

        return GoogleProfile(**profile_response.json())

    async def complete_google_sign_in(self, code: str) -> AuthTokenResponse:
        self._require_google()

        if self._http is not None:
            profile = await self._fetch_google_profile(self._http, code)
        else:
            async with httpx.AsyncClient(timeout=10.0) as client:
                profile = await self._fetch_google_profile(client, code)

        # Google accounts reuse the device-hash lookup with a stable prefix
        device_hash = hash_device_id(f"google_{profile.sub}")
        user = self._users.get_by_device_hash(device_hash)
        if user is None:
            user = self._users.create(
                device_hash,
                email=profile.email,
                first_name=profile.given_name,
                last_name=profile.family_name,
                profile_image_url=profile.picture,
            )
            logger.info("Created Google user %s", user.id)
        else:
            user = self._users.update_profile(
                user.id,
                email=profile.email,
                first_name=profile.given_name,
                last_name=profile.family_name,
                profile_image_url=profile.picture,
            )

        return AuthTokenResponse(
            access_token=self.issue_token(user),
            expires_in=self._settings.jwt_expiry_hours * 3600,
            user=user,
        )
