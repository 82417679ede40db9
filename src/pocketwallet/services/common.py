"""Helpers shared by the domain services."""

from __future__ import annotations

from typing import Optional, Type, TypeVar

from sqlmodel import Session, SQLModel

from ..errors import InvalidDueDate, NotFound, Unauthenticated, Unauthorized

ModelT = TypeVar("ModelT", bound=SQLModel)


def require_user(user_id: Optional[int]) -> int:
    """Return *user_id*, raising ``Unauthenticated`` when it is missing."""

    if user_id is None:
        raise Unauthenticated()
    return user_id


def load_owned(
    session: Session, model: Type[ModelT], entity_id: int, *, user_id: int, entity: str
) -> ModelT:
    """Fetch a row by primary key and check that *user_id* owns it."""

    obj = session.get(model, entity_id)
    if obj is None:
        raise NotFound(entity, entity_id)
    if obj.user_id != user_id:  # type: ignore[attr-defined]
        raise Unauthorized(entity, entity_id)
    return obj


def validate_day_of_month(day: Optional[int], *, field: str = "due_day") -> Optional[int]:
    """Allow ``None``; otherwise require an int in 1..31."""

    if day is None:
        return None
    if isinstance(day, bool) or not isinstance(day, int) or not 1 <= day <= 31:
        raise InvalidDueDate(f"{field} must be between 1 and 31, got {day!r}")
    return day


def detach(session: Session, *objects: SQLModel) -> None:
    """Refresh committed rows and hand them back detached from *session*."""

    for obj in objects:
        session.refresh(obj)
        session.expunge(obj)
