"""Domain exceptions and their HTTP mapping."""

from __future__ import annotations


class DomainError(ValueError):
    """Base class for errors the API reports back to the caller."""

    status_code = 400

    def __init__(self, message: str, *, details: dict[str, list[str]] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationFailed(DomainError):
    """Request payload failed form validation."""


class NotFoundError(DomainError):
    status_code = 404


class ConflictError(DomainError):
    """A unique resource (e.g. a user email) already exists."""


class AuthenticationError(DomainError):
    status_code = 401


class GoalCompletedError(DomainError):
    """Contribution attempted against a goal that is already completed."""


class ContributionError(DomainError):
    """Contribution amount or source is missing or invalid."""


class SignatureError(DomainError):
    """Payment or webhook signature did not match."""


class PaymentError(DomainError):
    """The payment gateway call failed."""

    status_code = 502


__all__ = [
    "AuthenticationError",
    "ConflictError",
    "ContributionError",
    "DomainError",
    "GoalCompletedError",
    "NotFoundError",
    "PaymentError",
    "SignatureError",
    "ValidationFailed",
]
