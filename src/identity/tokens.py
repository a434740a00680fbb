"""Bearer tokens: issuing signed tokens at login and verifying them on every request.

There is a single claims schema for every caller::

    {"sub": <user id>, "roles": ["admin"] | [], "iat": <issued at>, "exp": <expiry>}

Admin access is the presence of the ``admin`` role (see ``Subject.is_admin``),
never a separate credential. The web layer re-reads roles from the stored
user on every request, so the claim only reflects the account at login.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import jwt
import structlog

from identity.user.user import ADMIN_ROLE
from shared.config import Config
from shared.exceptions import Unauthorized

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Subject:
    """A verified caller."""

    id: str
    roles: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_admin(self) -> bool:
        return ADMIN_ROLE in self.roles


class IdentityVerifier:
    """Issues and verifies HMAC-signed JWTs."""

    def __init__(self, secret: str, algorithm: str = "HS256", ttl_seconds: int = 30 * 24 * 60 * 60):
        if not secret:
            raise ValueError("A token signing secret is required")
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = timedelta(seconds=ttl_seconds)

    @classmethod
    def from_config(cls, config: Config) -> "IdentityVerifier":
        return cls(secret=config.jwt_secret, algorithm=config.jwt_algorithm, ttl_seconds=config.token_ttl_seconds)

    def issue(self, user_id: str, roles=(), now: datetime | None = None) -> str:
        issued_at = now or datetime.now(UTC)
        claims = {
            "sub": str(user_id),
            "roles": list(roles),
            "iat": issued_at,
            "exp": issued_at + self._ttl,
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> Subject:
        """Return the subject carried by a valid token, or raise Unauthorized."""
        if not token:
            raise Unauthorized("Missing bearer token")

        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            raise Unauthorized("Token has expired") from None
        except jwt.InvalidTokenError as exc:
            logger.info("token_rejected", reason=str(exc))
            raise Unauthorized("Invalid token") from None

        roles = claims.get("roles") or []
        if not isinstance(roles, list) or not all(isinstance(role, str) for role in roles):
            raise Unauthorized("Invalid token")

        return Subject(id=str(claims["sub"]), roles=tuple(roles))

    def verify_header(self, authorization: str | None) -> Subject:
        """Verify an ``Authorization: Bearer <token>`` header value."""
        if not authorization:
            raise Unauthorized("Missing or invalid Authorization header")

        scheme, _, token = authorization.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            raise Unauthorized("Missing or invalid Authorization header")

        return self.verify(token.strip())
