"""Verification-code and Telegram chat-binding schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import ConfigDict, Field

from .base import ApiModel, Record, migration, utcnow


class VerificationEntry(Record):
    """A pending code for one external identity (Telegram username)."""
    collection = "verification"

    telegram: str
    code: str
    created_at: datetime = Field(default_factory=utcnow)
    expires_at: datetime

    def is_live(self, now: datetime) -> bool:
        return now < self.expires_at


@migration("verification")
def _verification_v0_to_v1(doc: dict[str, Any]) -> dict[str, Any]:
    doc["code"] = str(doc.get("code", ""))
    return doc


class ChatBinding(Record):
    """Telegram username bound to the chat that should receive its codes."""
    collection = "telegram_bindings"

    telegram: str
    chat_id: int
    bound_at: datetime = Field(default_factory=utcnow)


class SendCodeRequest(ApiModel):
    telegram: str = Field(min_length=1)


class VerifyCodeRequest(ApiModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    telegram: str = Field(min_length=1)
    code: str = Field(min_length=1)


class SendCodeResponse(ApiModel):
    success: bool = True
    message: str
    dev_code: Optional[str] = None
