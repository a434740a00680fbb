"""Login — exchanges a mobile number or email plus password for a bearer token.

Users and admins sign in through the same path; the token carries the
``admin`` role when the account holds the capability.
"""

from dataclasses import dataclass

import structlog

from identity.shared.email import normalize_email
from identity.shared.phone import normalize_mobile
from identity.tokens import IdentityVerifier
from identity.user.repository import find_by_email, find_by_mobile
from identity.user.user import User
from shared.exceptions import Unauthorized, ValidationFailed
from shared.store import Store

logger = structlog.get_logger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


@dataclass(frozen=True)
class Login:
    password: str
    mobile: str | None = None
    email: str | None = None


@dataclass(frozen=True)
class LoginResult:
    token: str
    user: User


class LoginHandler:
    def __init__(self, store: Store, verifier: IdentityVerifier):
        self.store = store
        self.verifier = verifier

    def login(self, command: Login) -> LoginResult:
        if not command.mobile and not command.email:
            raise ValidationFailed({"login": ["Mobile number or email is required"]})
        if not command.password:
            raise ValidationFailed({"password": ["Password is required"]})

        with self.store.session() as session:
            if command.mobile:
                user = find_by_mobile(session, normalize_mobile(command.mobile))
            else:
                user = find_by_email(session, normalize_email(command.email))

        # Same message for unknown account and wrong password
        if user is None or not user.check_password(command.password):
            logger.info("login_failed", mobile=command.mobile, email=command.email)
            raise Unauthorized(INVALID_CREDENTIALS)

        token = self.verifier.issue(user.id, roles=user.roles)
        logger.info("login_succeeded", user_id=user.id, is_admin=user.is_admin)
        return LoginResult(token=token, user=user)
