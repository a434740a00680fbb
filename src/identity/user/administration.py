"""Back-office user management — commands and handler.

Every operation here expects the caller to hold the admin capability; the
web layer enforces that before dispatching.
"""

from dataclasses import dataclass, field

import structlog
from sqlalchemy import delete

from identity.shared.email import normalize_email
from identity.user.registration import RegisterUser, RegisterUserHandler
from identity.user.repository import (
    ensure_contact_available,
    find_by_email,
    flush_contact_changes,
    get_user,
    list_users,
)
from identity.user.user import User
from ordering.cart.cart import CartLine
from shared.exceptions import ValidationFailed
from shared.store import Store

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class UpdateUser:
    """Only the keys present in ``changes`` are applied; ``password`` resets the password."""

    user_id: str
    changes: dict = field(default_factory=dict)


@dataclass(frozen=True)
class DeleteUser:
    user_id: str
    requested_by: str


@dataclass(frozen=True)
class PromoteToAdmin:
    """Grant the admin capability to the account with this email, creating it if needed."""

    email: str
    password: str
    name: str = "Administrator"
    mobile: str | None = None


class UserAdministrationHandler:
    def __init__(self, store: Store):
        self.store = store

    def list_users(self) -> list[User]:
        with self.store.session() as session:
            return list_users(session)

    def get_user(self, user_id: str) -> User:
        with self.store.session() as session:
            return get_user(session, user_id)

    def create_user(self, command: RegisterUser) -> User:
        return RegisterUserHandler(self.store).register_user(command)

    def update_user(self, command: UpdateUser) -> User:
        changes = dict(command.changes)
        password = changes.pop("password", None)
        profile_changes = {k: v for k, v in changes.items() if k in ("name", "mobile", "email", "address")}

        with self.store.unit_of_work() as session:
            user = get_user(session, command.user_id)
            user.update_profile(**profile_changes)
            if password:
                user.change_password(password)
            with session.no_autoflush:
                ensure_contact_available(
                    session,
                    mobile=user.mobile if "mobile" in profile_changes else None,
                    email=user.email if "email" in profile_changes else None,
                    exclude_id=user.id,
                )
            flush_contact_changes(session)

        logger.info(
            "user_updated",
            user_id=command.user_id,
            fields=sorted(profile_changes),
            password_reset=bool(password),
        )
        return user

    def delete_user(self, command: DeleteUser) -> None:
        if command.user_id == command.requested_by:
            raise ValidationFailed({"user_id": ["You cannot delete your own account"]})

        with self.store.unit_of_work() as session:
            user = get_user(session, command.user_id)
            # Orders are kept as history; only the transient cart goes with the account
            session.execute(delete(CartLine).where(CartLine.user_id == user.id))
            session.delete(user)

        logger.info("user_deleted", user_id=command.user_id, deleted_by=command.requested_by)

    def promote_to_admin(self, command: PromoteToAdmin) -> User:
        with self.store.unit_of_work() as session:
            user = find_by_email(session, normalize_email(command.email))
            if user is not None:
                user.grant_admin()
                logger.info("user_promoted_to_admin", user_id=user.id)
                return user

        if not command.mobile:
            raise ValidationFailed({"mobile": ["Mobile number is required to create a new admin account"]})

        return RegisterUserHandler(self.store).register_user(
            RegisterUser(
                name=command.name,
                mobile=command.mobile,
                email=command.email,
                password=command.password,
            ),
            is_admin=True,
        )
