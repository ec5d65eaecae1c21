"""
User repositories.

Two implementations of IUserRepository:
- InMemoryUserRepository: used when no DATABASE_URL is configured
- PostgresUserRepository: the ``users`` table
"""

import secrets
import threading
import time
from datetime import datetime, timezone
from typing import Any, Optional

from shared.repository import BaseRepository

from .exceptions import UserNotFoundError
from .models import DEFAULT_CREDITS, User


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryUserRepository:
    """Process-local user storage."""

    def __init__(self):
        self._users: dict[str, User] = {}
        self._fulfilled_intents: set[str] = set()
        self._lock = threading.Lock()

    def get(self, user_id: str) -> Optional[User]:
        return self._users.get(user_id)

    def get_by_device_hash(self, device_hash: str) -> Optional[User]:
        return next((u for u in self._users.values() if u.device_id == device_hash), None)

    def create(
        self,
        device_hash: str,
        email: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        profile_image_url: Optional[str] = None,
    ) -> User:
        user = User(
            id=f"anonymous_{int(time.time() * 1000)}_{secrets.token_hex(6)}",
            device_id=device_hash,
            email=email,
            first_name=first_name,
            last_name=last_name,
            profile_image_url=profile_image_url,
            credits=DEFAULT_CREDITS,
        )
        with self._lock:
            self._users[user.id] = user
        return user

    def _update(self, user_id: str, **changes: Any) -> User:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                raise UserNotFoundError(user_id)
            if "credits_delta" in changes:
                changes["credits"] = max(user.credits + changes.pop("credits_delta"), 0)
            updated = user.model_copy(update={**changes, "updated_at": _now()})
            self._users[user_id] = updated
        return updated

    def update_profile(
        self,
        user_id: str,
        email: Optional[str],
        first_name: Optional[str],
        last_name: Optional[str],
        profile_image_url: Optional[str],
    ) -> User:
        return self._update(
            user_id,
            email=email,
            first_name=first_name,
            last_name=last_name,
            profile_image_url=profile_image_url,
        )

    def adjust_credits(self, user_id: str, delta: int) -> User:
        return self._update(user_id, credits_delta=delta)

    def set_stripe_customer_id(self, user_id: str, customer_id: str) -> User:
        return self._update(user_id, stripe_customer_id=customer_id)

    def grant_purchase_credits(self, payment_intent_id: str, user_id: str, credits: int) -> Optional[User]:
        with self._lock:
            if payment_intent_id in self._fulfilled_intents:
                return None
            if user_id not in self._users:
                raise UserNotFoundError(user_id)
            self._fulfilled_intents.add(payment_intent_id)
        return self._update(user_id, credits_delta=credits)


class PostgresUserRepository(BaseRepository[User]):
    """Users in Postgres. Credit changes are single UPDATE statements."""

    _COLUMNS = (
        "id, email, first_name, last_name, profile_image_url, device_id, "
        "credits, stripe_customer_id, created_at, updated_at"
    )

    def get(self, user_id: str) -> Optional[User]:
        row = self._db.fetch_one(
            f"SELECT {self._COLUMNS} FROM users WHERE id = %s", (user_id,)
        )
        return self._map_row(row) if row else None

    def get_by_device_hash(self, device_hash: str) -> Optional[User]:
        row = self._db.fetch_one(
            f"SELECT {self._COLUMNS} FROM users WHERE device_id = %s", (device_hash,)
        )
        return self._map_row(row) if row else None

    def create(
        self,
        device_hash: str,
        email: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        profile_image_url: Optional[str] = None,
    ) -> User:
        row = self._db.fetch_one(
            f"""
            INSERT INTO users (device_id, email, first_name, last_name, profile_image_url, credits)
            VALUES (%s, %s, %s, %s, %s, %s)
            RETURNING {self._COLUMNS}
            """,
            (device_hash, email, first_name, last_name, profile_image_url, DEFAULT_CREDITS),
        )
        return self._map_row(row)

    def _returning(self, user_id: str, row: Optional[dict[str, Any]]) -> User:
        if row is None:
            raise UserNotFoundError(user_id)
        return self._map_row(row)

    def update_profile(
        self,
        user_id: str,
        email: Optional[str],
        first_name: Optional[str],
        last_name: Optional[str],
        profile_image_url: Optional[str],
    ) -> User:
        row = self._db.fetch_one(
            f"""
            UPDATE users
            SET email = %s, first_name = %s, last_name = %s,
                profile_image_url = %s, updated_at = NOW()
            WHERE id = %s
            RETURNING {self._COLUMNS}
            """,
            (email, first_name, last_name, profile_image_url, user_id),
        )
        return self._returning(user_id, row)

    def adjust_credits(self, user_id: str, delta: int) -> User:
        row = self._db.fetch_one(
            f"""
            UPDATE users
            SET credits = GREATEST(credits + %s, 0), updated_at = NOW()
            WHERE id = %s
            RETURNING {self._COLUMNS}
            """,
            (delta, user_id),
        )
        return self._returning(user_id, row)

    def set_stripe_customer_id(self, user_id: str, customer_id: str) -> User:
        row = self._db.fetch_one(
            f"""
            UPDATE users SET stripe_customer_id = %s, updated_at = NOW()
            WHERE id = %s
            RETURNING {self._COLUMNS}
            """,
            (customer_id, user_id),
        )
        return self._returning(user_id, row)

    def grant_purchase_credits(self, payment_intent_id: str, user_id: str, credits: int) -> Optional[User]:
        """Record the intent and add its credits in one transaction."""
        with self._db.transaction() as cursor:
            cursor.execute(
                """
                INSERT INTO credit_purchases (payment_intent_id, user_id, credits)
                VALUES (%s, %s, %s)
                ON CONFLICT (payment_intent_id) DO NOTHING
                RETURNING payment_intent_id
                """,
                (payment_intent_id, user_id, credits),
            )
            if cursor.fetchone() is None:
                return None

            cursor.execute(
                f"""
                UPDATE users
                SET credits = GREATEST(credits + %s, 0), updated_at = NOW()
                WHERE id = %s
                RETURNING {self._COLUMNS}
                """,
                (credits, user_id),
            )
            row = cursor.fetchone()
            if row is None:
                raise UserNotFoundError(user_id)
        return self._map_row(dict(row))

    def _map_row(self, row: dict[str, Any]) -> User:
        return User(
            id=str(row["id"]),
            email=row.get("email"),
            first_name=row.get("first_name"),
            last_name=row.get("last_name"),
            profile_image_url=row.get("profile_image_url"),
            device_id=row.get("device_id"),
            credits=row.get("credits") or 0,
            stripe_customer_id=row.get("stripe_customer_id"),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
