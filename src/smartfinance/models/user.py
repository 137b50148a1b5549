"""User model supporting authentication and display preferences."""

from __future__ import annotations

from typing import ClassVar, Optional

from sqlmodel import Field

from .base import TimestampedModel


class User(TimestampedModel, table=True):
    """Application user with credentials and preferences."""

    __tablename__: ClassVar[str] = "user"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(nullable=False, unique=True, index=True, max_length=254)
    name: str = Field(nullable=False, max_length=100)
    password_hash: str = Field(nullable=False, max_length=255)
    avatar: Optional[str] = Field(default=None, max_length=512)

    currency: str = Field(default="USD", nullable=False, max_length=3)
    date_format: str = Field(default="MM/DD/YYYY", nullable=False, max_length=10)
    theme: str = Field(default="system", nullable=False, max_length=8)
