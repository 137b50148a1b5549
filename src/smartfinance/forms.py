"""Shared pydantic plumbing for JSON request payloads."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError

from .errors import ValidationFailed

FormT = TypeVar("FormT", bound=BaseModel)

_VALUE_ERROR_PREFIX = "Value error, "


class PayloadForm(BaseModel):
    """Base for request bodies; accepts camelCase aliases or field names."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
        extra="ignore",
    )


def validation_errors(exc: ValidationError) -> dict[str, list[str]]:
    """Flatten a pydantic error into ``{field: [messages]}``."""

    structured: dict[str, list[str]] = {}
    for error in exc.errors(include_url=False):
        loc = error.get("loc", ())
        key = ".".join(str(part) for part in loc) if loc else "__root__"
        message = error.get("msg", "Invalid value")
        if message.startswith(_VALUE_ERROR_PREFIX):
            message = message[len(_VALUE_ERROR_PREFIX):]
        structured.setdefault(key, []).append(message)
    return structured


def parse_payload(form_cls: type[FormT], data: Any) -> FormT:
    """Validate ``data`` against ``form_cls`` or raise :class:`ValidationFailed`."""

    if not isinstance(data, Mapping):
        raise ValidationFailed("Request body must be a JSON object")
    try:
        return form_cls.model_validate(dict(data))
    except ValidationError as exc:
        details = validation_errors(exc)
        first = next(iter(details.values()))[0]
        raise ValidationFailed(first, details=details) from exc


def naive_utc(value: datetime | None) -> datetime | None:
    """Drop tzinfo after converting to UTC; stored datetimes are naive UTC."""

    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def coerce_date(value: Any) -> Any:
    """Accept ``YYYY-MM-DD`` or a full ISO timestamp for date fields."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and len(value.strip()) > 10:
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00")).date()
        except ValueError:
            return value
    return value


def parse_datetime_arg(value: str | None, *, field: str) -> datetime | None:
    """Parse a query-string timestamp; blank means no filter."""

    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError as exc:
        raise ValidationFailed(
            f"Invalid {field}", details={field: ["Enter a valid ISO date"]}
        ) from exc
    return naive_utc(parsed)


def parse_bool_arg(value: str | None) -> bool | None:
    if value is None or value == "":
        return None
    return value.strip().lower() in {"1", "true", "yes", "on"}


def parse_int_arg(value: str | None, default: int) -> int:
    try:
        return int(value) if value else default
    except ValueError:
        return default


__all__ = [
    "PayloadForm",
    "coerce_date",
    "naive_utc",
    "parse_bool_arg",
    "parse_datetime_arg",
    "parse_int_arg",
    "parse_payload",
    "validation_errors",
]
