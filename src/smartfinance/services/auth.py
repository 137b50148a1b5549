"""Authentication and user management services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError
from flask_login import UserMixin
from sqlmodel import select

from ..errors import ConflictError, NotFoundError, ValidationFailed
from ..infra.database import SessionFactory
from ..models.user import User

_hasher = PasswordHasher()
MIN_PASSWORD_LENGTH = 6
_THEMES = {"light", "dark", "system"}


@dataclass(frozen=True)
class SessionUser(UserMixin):
    """What Flask-Login keeps for the signed-in user."""

    id: int
    email: str
    name: str

    def get_id(self) -> str:
        return str(self.id)

    @classmethod
    def from_user(cls, user: User) -> "SessionUser":
        return cls(id=user.id, email=user.email, name=user.name)  # type: ignore[arg-type]


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def get_user(user_id: int, session_factory: SessionFactory) -> Optional[User]:
    with session_factory() as session:
        return session.get(User, user_id)


def get_user_by_email(email: str, session_factory: SessionFactory) -> Optional[User]:
    """Fetch a user by (case-insensitive) email."""
    with session_factory() as session:
        return session.exec(select(User).where(User.email == normalize_email(email))).first()


def create_user(
    *,
    name: str,
    email: str,
    password: str,
    session_factory: SessionFactory,
) -> User:
    """Create a new user with an argon2 password hash."""

    name = (name or "").strip()
    email = normalize_email(email)
    if not name or not email or not password:
        raise ValidationFailed("Name, email, and password are required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationFailed(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )
    password_hash = _hasher.hash(password)
    with session_factory() as session:
        existing = session.exec(select(User).where(User.email == email)).first()
        if existing:
            raise ConflictError("User with this email already exists")
        user = User(name=name, email=email, password_hash=password_hash)
        session.add(user)
        session.commit()
        session.refresh(user)
        return user


def authenticate(
    *,
    email: str,
    password: str,
    session_factory: SessionFactory,
) -> Optional[User]:
    """Validate credentials and return the user when correct."""

    email = normalize_email(email)
    if not email or not password:
        return None
    with session_factory() as session:
        user = session.exec(select(User).where(User.email == email)).first()
        if user is None:
            return None
        try:
            _hasher.verify(user.password_hash, password)
        except (VerifyMismatchError, InvalidHash, VerificationError):
            return None

        if _hasher.check_needs_rehash(user.password_hash):
            user.password_hash = _hasher.hash(password)
            session.add(user)
            session.commit()
            session.refresh(user)
        return user


def update_preferences(
    *,
    user_id: int,
    changes: dict,
    session_factory: SessionFactory,
    currencies: tuple[str, ...],
    date_formats: tuple[str, ...],
) -> User:
    """Apply profile/preference changes after checking allowed values."""

    if "currency" in changes and changes["currency"] not in currencies:
        raise ValidationFailed(f"Unsupported currency: {changes['currency']}")
    if "date_format" in changes and changes["date_format"] not in date_formats:
        raise ValidationFailed(f"Unsupported date format: {changes['date_format']}")
    if "theme" in changes and changes["theme"] not in _THEMES:
        raise ValidationFailed(f"Unsupported theme: {changes['theme']}")
    if "name" in changes and not (changes["name"] or "").strip():
        raise ValidationFailed("Name cannot be empty")

    with session_factory() as session:
        user = session.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        for key, value in changes.items():
            setattr(user, key, value.strip() if key == "name" else value)
        user.touch()
        session.add(user)
        session.commit()
        session.refresh(user)
        return user
