"""Auth payloads."""

from __future__ import annotations

from pydantic import Field

from ...forms import PayloadForm


class RegisterForm(PayloadForm):
    name: str = Field(default="", max_length=100)
    email: str = Field(default="", max_length=254)
    password: str = ""


class LoginForm(PayloadForm):
    email: str = ""
    password: str = ""


__all__ = ["LoginForm", "RegisterForm"]
