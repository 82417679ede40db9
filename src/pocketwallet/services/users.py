"""User identity and wallet preferences."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from sqlmodel import Session, select

from ..errors import NotFound
from ..logging_config import get_logger
from ..models.user import OVERPAYMENT_POLICIES, PAYMENT_BEHAVIORS, User
from .common import require_user

SessionFactory = Callable[[], Session]

LOCAL_USERNAME = "local"
PREFERENCE_FIELDS = (
    "allow_negative_balance",
    "start_of_week",
    "payment_behavior",
    "credit_card_overpayment",
)

logger = get_logger("users")


@dataclass(slots=True)
class Preferences:
    allow_negative_balance: bool = False
    start_of_week: int = 0
    payment_behavior: str = "warn"
    credit_card_overpayment: str = "cap"


def _validate_preference(name: str, value):
    if name not in PREFERENCE_FIELDS:
        raise ValueError(f"Unknown preference: {name}")
    if name == "allow_negative_balance":
        if not isinstance(value, bool):
            raise ValueError("allow_negative_balance must be a boolean")
    elif name == "start_of_week":
        if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 6:
            raise ValueError("start_of_week must be between 0 (Sunday) and 6 (Saturday)")
    elif name == "payment_behavior":
        if value not in PAYMENT_BEHAVIORS:
            raise ValueError(f"payment_behavior must be one of {', '.join(PAYMENT_BEHAVIORS)}")
    elif value not in OVERPAYMENT_POLICIES:
        raise ValueError(
            f"credit_card_overpayment must be one of {', '.join(OVERPAYMENT_POLICIES)}"
        )
    return value


def _preferences_of(user: User) -> Preferences:
    return Preferences(**{name: getattr(user, name) for name in PREFERENCE_FIELDS})


def ensure_user(username: str, session_factory: SessionFactory) -> User:
    """Return the user named *username*, creating it with default preferences."""

    username = (username or "").strip()
    if not username:
        raise ValueError("Username is required")
    with session_factory() as session:
        user = session.exec(select(User).where(User.username == username)).first()
        if user is None:
            user = User(username=username)
            session.add(user)
            session.commit()
            logger.info("Created user", extra={"username": username})
        session.refresh(user)
        session.expunge(user)
        return user


def ensure_local_user(session_factory: SessionFactory) -> User:
    """Single-user installs run as one local account."""

    return ensure_user(LOCAL_USERNAME, session_factory)


def get_preferences(user_id: Optional[int], session_factory: SessionFactory) -> Preferences:
    uid = require_user(user_id)
    with session_factory() as session:
        user = session.get(User, uid)
        if user is None:
            raise NotFound("user", uid)
        return _preferences_of(user)


def update_preferences(
    user_id: Optional[int], session_factory: SessionFactory, **changes
) -> Preferences:
    """Validate and store preference changes; unknown names are rejected."""

    uid = require_user(user_id)
    cleaned = {name: _validate_preference(name, value) for name, value in changes.items()}
    with session_factory() as session:
        user = session.get(User, uid)
        if user is None:
            raise NotFound("user", uid)
        for name, value in cleaned.items():
            setattr(user, name, value)
        session.add(user)
        session.commit()
        logger.info("Preferences updated", extra={"user_id": uid, "changes": sorted(cleaned)})
        return _preferences_of(user)


__all__ = [
    "LOCAL_USERNAME",
    "Preferences",
    "ensure_local_user",
    "ensure_user",
    "get_preferences",
    "update_preferences",
]
