"""Profile — read and partially update the caller's own account."""

from dataclasses import dataclass, field

import structlog

from identity.user.repository import ensure_contact_available, flush_contact_changes, get_user
from identity.user.user import User
from shared.store import Store

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class UpdateProfile:
    """Only the keys present in ``changes`` are applied (name, mobile, email, address)."""

    user_id: str
    changes: dict = field(default_factory=dict)


class ProfileHandler:
    def __init__(self, store: Store):
        self.store = store

    def get_profile(self, user_id: str) -> User:
        with self.store.session() as session:
            return get_user(session, user_id)

    def update_profile(self, command: UpdateProfile) -> User:
        changes = {k: v for k, v in command.changes.items() if k in ("name", "mobile", "email", "address")}

        with self.store.unit_of_work() as session:
            user = get_user(session, command.user_id)
            user.update_profile(**changes)
            # Check before the pending change is flushed into the unique columns
            with session.no_autoflush:
                ensure_contact_available(
                    session,
                    mobile=user.mobile if "mobile" in changes else None,
                    email=user.email if "email" in changes else None,
                    exclude_id=user.id,
                )
            flush_contact_changes(session)

        logger.info("profile_updated", user_id=command.user_id, fields=sorted(changes))
        return user
