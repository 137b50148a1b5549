"""Settings payloads."""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from ...forms import PayloadForm


class PreferencesForm(PayloadForm):
    name: Optional[str] = Field(default=None, max_length=100)
    avatar: Optional[str] = Field(default=None, max_length=512)
    currency: Optional[str] = None
    date_format: Optional[str] = Field(default=None, alias="dateFormat")
    theme: Optional[str] = None

    def changes(self) -> dict[str, object]:
        """Only the fields the caller sent, with ``avatar`` the one nullable column."""

        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if getattr(self, name) is not None or name == "avatar"
        }


class SendEmailForm(PayloadForm):
    to: Optional[str] = None
    subject: str = Field(default="Test email from Smart Finance Tracker", max_length=200)
    text: str = "This is a test email from Smart Finance Tracker."
    html: str = ""


__all__ = ["PreferencesForm", "SendEmailForm"]
