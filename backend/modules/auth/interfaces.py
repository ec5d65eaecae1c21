"""
Authentication module interfaces.

Other modules should depend on these protocols, not the concrete
implementations. Billing uses IUserRepository to move credits.
"""

from typing import Optional, Protocol, runtime_checkable

from shared.models import AuthenticatedUser

from .models import AuthTokenResponse, User


@runtime_checkable
class IUserRepository(Protocol):
    """Persistence for users and their credit balances."""

    def get(self, user_id: str) -> Optional[User]:
        ...

    def get_by_device_hash(self, device_hash: str) -> Optional[User]:
        ...

    def create(
        self,
        device_hash: str,
        email: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        profile_image_url: Optional[str] = None,
    ) -> User:
        """Create a user with the default credit balance."""
        ...

    def update_profile(
        self,
        user_id: str,
        email: Optional[str],
        first_name: Optional[str],
        last_name: Optional[str],
        profile_image_url: Optional[str],
    ) -> User:
        ...

    def adjust_credits(self, user_id: str, delta: int) -> User:
        """
        Add ``delta`` credits (negative to deduct). The balance never drops
        below zero.

        Raises:
            UserNotFoundError: If the user does not exist
        """
        ...

    def grant_purchase_credits(self, payment_intent_id: str, user_id: str, credits: int) -> Optional[User]:
        """
        Add a purchase's credits once per payment intent.

        Returns:
            The updated user, or None if the intent was already fulfilled

        Raises:
            UserNotFoundError: If the user does not exist
        """
        ...

    def set_stripe_customer_id(self, user_id: str, customer_id: str) -> User:
        ...


@runtime_checkable
class IAuthService(Protocol):
    """
    Interface for authentication operations.

    Two identities are supported: signed bearer tokens issued after a
    Google sign-in, and anonymous users keyed by an ``x-device-id`` header.
    """

    def validate_token(self, token: str) -> AuthenticatedUser:
        """
        Validate a bearer token and return the authenticated user.

        Raises:
            MissingTokenError: Empty token
            ExpiredTokenError: Token past its expiry
            InvalidTokenError: Bad signature or malformed claims
        """
        ...

    def issue_token(self, user: User) -> str:
        ...

    def get_user(self, user_id: str) -> User:
        """
        Raises:
            UserNotFoundError: If the user does not exist
        """
        ...

    def ensure_device_user(self, device_id: str) -> User:
        """Find the user for a device id, creating one on first sight."""
        ...

    def new_oauth_state(self) -> str:
        ...

    def verify_oauth_state(self, received: Optional[str], expected: Optional[str]) -> None:
        """
        Raises:
            OAuthStateError: The callback's state is missing or was not issued
        """
        ...

    def google_authorization_url(self, state: str) -> str:
        ...

    async def complete_google_sign_in(self, code: str) -> AuthTokenResponse:
        """
        Exchange an OAuth code, upsert the user and sign a token.

        Raises:
            AuthNotConfiguredError: Google or JWT secrets are missing
            OAuthExchangeError: Google rejected the code
        """
        ...
