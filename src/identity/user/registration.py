"""User registration — command and handler."""

from dataclasses import dataclass

import structlog

from identity.user.repository import ensure_contact_available, flush_contact_changes
from identity.user.user import User
from shared.store import Store

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RegisterUser:
    """Create a new customer account. Registration never grants the admin capability."""

    name: str
    mobile: str
    email: str
    password: str
    address: str | None = None


class RegisterUserHandler:
    def __init__(self, store: Store):
        self.store = store

    def register_user(self, command: RegisterUser, is_admin: bool = False) -> User:
        user = User.register(
            name=command.name,
            mobile=command.mobile,
            email=command.email,
            password=command.password,
            address=command.address,
            is_admin=is_admin,
        )

        with self.store.unit_of_work() as session:
            ensure_contact_available(session, mobile=user.mobile, email=user.email)
            session.add(user)
            flush_contact_changes(session)

        logger.info("user_registered", user_id=user.id, is_admin=user.is_admin)
        return user
