"""Query helpers for the User aggregate."""

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from identity.user.user import User
from shared.exceptions import NotFound, ValidationFailed


def get_user(session: Session, user_id: str) -> User:
    user = session.get(User, user_id)
    if user is None:
        raise NotFound("User not found", details={"user_id": user_id})
    return user


def find_by_mobile(session: Session, mobile: str) -> User | None:
    return session.scalars(select(User).where(User.mobile == mobile)).first()


def find_by_email(session: Session, email: str) -> User | None:
    return session.scalars(select(User).where(User.email == email)).first()


def list_users(session: Session) -> list[User]:
    return list(session.scalars(select(User).order_by(User.created_at.desc())))


def ensure_contact_available(session: Session, mobile=None, email=None, exclude_id=None) -> None:
    """Raise ValidationFailed if another user already holds the mobile number or email."""
    conditions = []
    if mobile:
        conditions.append(User.mobile == mobile)
    if email:
        conditions.append(User.email == email)
    if not conditions:
        return

    query = select(User).where(or_(*conditions))
    if exclude_id is not None:
        query = query.where(User.id != exclude_id)

    errors: dict[str, list[str]] = {}
    for existing in session.scalars(query):
        if mobile and existing.mobile == mobile:
            errors["mobile"] = ["Mobile number is already in use"]
        if email and existing.email == email:
            errors["email"] = ["Email is already in use"]
    if errors:
        raise ValidationFailed(errors)


def flush_contact_changes(session: Session) -> None:
    """Flush pending user writes, reporting a lost race on the unique contact columns as ValidationFailed."""
    try:
        session.flush()
    except IntegrityError:
        raise ValidationFailed({"user": ["User with this mobile number or email already exists"]}) from None
