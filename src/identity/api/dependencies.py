"""FastAPI dependencies: application services from ``app.state`` and the verified caller."""

from fastapi import Depends, Header, Request

from identity.tokens import IdentityVerifier, Subject
from identity.user.user import User
from ordering.pricing import PricingPolicy
from shared.exceptions import Forbidden, Unauthorized
from shared.logging import add_context
from shared.store import Store


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_verifier(request: Request) -> IdentityVerifier:
    return request.app.state.verifier


def get_pricing_policy(request: Request) -> PricingPolicy:
    return request.app.state.pricing_policy


def current_subject(
    authorization: str | None = Header(default=None),
    verifier: IdentityVerifier = Depends(get_verifier),
    store: Store = Depends(get_store),
) -> Subject:
    """The caller identified by the ``Authorization: Bearer`` header; Unauthorized otherwise.

    The token only names the account. The account must still exist, and its
    roles are read from the stored user rather than from the token claims.
    """
    claimed = verifier.verify_header(authorization)

    with store.session() as session:
        user = session.get(User, claimed.id)
        if user is None:
            raise Unauthorized("Account no longer exists")
        subject = Subject(id=user.id, roles=tuple(user.roles))

    add_context(user_id=subject.id)
    return subject


def require_admin(subject: Subject = Depends(current_subject)) -> Subject:
    if not subject.is_admin:
        raise Forbidden("Admin role required")
    return subject
