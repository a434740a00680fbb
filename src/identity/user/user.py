"""User aggregate: credential-holding identity with profile fields and the admin capability."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from identity.shared.email import is_valid_email, normalize_email
from identity.shared.passwords import MIN_PASSWORD_LENGTH, hash_password, verify_password
from identity.shared.phone import is_valid_mobile, normalize_mobile
from shared.exceptions import ValidationFailed
from shared.store import Base, new_id, utcnow

ADMIN_ROLE = "admin"

# Sentinel for distinguishing "not provided" from None in partial updates
_UNSET = object()


def _validate_contact(errors: dict, name=_UNSET, mobile=_UNSET, email=_UNSET):
    if name is not _UNSET and (not name or not name.strip()):
        errors.setdefault("name", []).append("Name is required")
    elif name is not _UNSET and len(name) > 100:
        errors.setdefault("name", []).append("Name must be at most 100 characters")

    if mobile is not _UNSET and not mobile:
        errors.setdefault("mobile", []).append("Mobile number is required")
    elif mobile is not _UNSET and (len(mobile) > 20 or not is_valid_mobile(mobile)):
        errors.setdefault("mobile", []).append(f"Invalid mobile number: {mobile!r}")

    if email is not _UNSET and not email:
        errors.setdefault("email", []).append("Email is required")
    elif email is not _UNSET and (len(email) > 254 or not is_valid_email(email)):
        errors.setdefault("email", []).append(f"Invalid email address: {email!r}")


def _validate_password(errors: dict, password):
    if not password:
        errors.setdefault("password", []).append("Password is required")
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors.setdefault("password", []).append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(100))
    mobile: Mapped[str] = mapped_column(String(20), unique=True, index=True)
    email: Mapped[str] = mapped_column(String(254), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(128))
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def register(cls, name, mobile, email, password, address=None, is_admin=False):
        """Validate the fields and build a new user with a hashed password."""
        name = name.strip() if name else name
        mobile = normalize_mobile(mobile) if mobile else mobile
        email = normalize_email(email) if email else email

        errors: dict[str, list[str]] = {}
        _validate_contact(errors, name=name, mobile=mobile, email=email)
        _validate_password(errors, password)
        if errors:
            raise ValidationFailed(errors)

        now = utcnow()
        return cls(
            id=new_id(),
            name=name,
            mobile=mobile,
            email=email,
            password_hash=hash_password(password),
            address=address,
            is_admin=is_admin,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Behaviour
    # -------------------------------------------------------------------
    @property
    def roles(self) -> list[str]:
        return [ADMIN_ROLE] if self.is_admin else []

    def check_password(self, password: str) -> bool:
        return verify_password(password, self.password_hash)

    def change_password(self, password: str) -> None:
        errors: dict[str, list[str]] = {}
        _validate_password(errors, password)
        if errors:
            raise ValidationFailed(errors)
        self.password_hash = hash_password(password)
        self.updated_at = utcnow()

    def update_profile(self, name=_UNSET, mobile=_UNSET, email=_UNSET, address=_UNSET):
        """Partial update: only the provided fields change."""
        if name is not _UNSET and name is not None:
            name = name.strip()
        if mobile is not _UNSET and mobile is not None:
            mobile = normalize_mobile(mobile)
        if email is not _UNSET and email is not None:
            email = normalize_email(email)

        errors: dict[str, list[str]] = {}
        _validate_contact(errors, name=name, mobile=mobile, email=email)
        if errors:
            raise ValidationFailed(errors)

        if name is not _UNSET:
            self.name = name
        if mobile is not _UNSET:
            self.mobile = mobile
        if email is not _UNSET:
            self.email = email
        if address is not _UNSET:
            self.address = address
        self.updated_at = utcnow()

    def grant_admin(self) -> None:
        self.is_admin = True
        self.updated_at = utcnow()
