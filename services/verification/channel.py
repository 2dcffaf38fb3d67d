# services/verification/channel.py
"""Verification channel: short-lived numeric codes with best-effort delivery.

Codes are stored in the `verification` collection. Delivery goes to the
Telegram chat bound to the username (see `ChatBindings`); when no chat is
bound or no bot is configured the caller gets the code back to display it.
"""

from __future__ import annotations

import logging
import re
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

from aiogram import Bot
from aiogram.exceptions import TelegramAPIError

from packages.common.errors import InvalidOrExpired
from packages.common.messages import t
from packages.common.storage import TELEGRAM_BINDINGS, VERIFICATION, Document, RecordStore
from packages.schemas.base import utcnow
from packages.schemas.verification import ChatBinding, VerificationEntry

log = logging.getLogger(__name__)

CODE_MIN = 100000
CODE_MAX = 999999

_REGISTER_RE = re.compile(r"^/register(?:@\w+)?\s+(\S+)")
_START_RE = re.compile(r"^/start(?:@\w+)?\b")


def generate_code() -> str:
    """Return a 6-digit code in [100000, 999999]."""
    return str(CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1))


class ChatBindings:
    """Username -> Telegram chat id, persisted in `telegram_bindings`."""

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def bind(self, telegram: str, chat_id: int) -> ChatBinding:
        binding = ChatBinding(telegram=telegram, chat_id=chat_id)

        def _bind(docs: list[Document]) -> None:
            docs[:] = [d for d in docs if d.get("telegram") != telegram]
            docs.append(binding.to_doc())

        self.store.update(TELEGRAM_BINDINGS, _bind)
        log.info(f"Bound chat {chat_id} to {telegram}")
        return binding

    def chat_id(self, telegram: str) -> Optional[int]:
        for b in ChatBinding.parse_many(self.store.load(TELEGRAM_BINDINGS)):
            if b.telegram == telegram:
                return b.chat_id
        return None


@dataclass(frozen=True)
class IssuedCode:
    """A freshly issued code and, if delivery applies, the chat to send it to."""
    telegram: str
    code: str
    chat_id: Optional[int] = None

    @property
    def deliverable(self) -> bool:
        return self.chat_id is not None


class VerificationChannel:
    """Issues and checks verification codes; delivers them via Telegram."""

    def __init__(
        self,
        store: RecordStore,
        bindings: ChatBindings,
        bot: Bot | None = None,
        ttl_seconds: int = 300,
        lang: str = "uz",
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.bindings = bindings
        self.bot = bot
        self.ttl = timedelta(seconds=ttl_seconds)
        self.lang = lang
        self.clock = clock

    def issue_code(self, telegram: str) -> IssuedCode:
        """Store a new code for `telegram`, superseding any previous one.

        Expired entries of other identities are pruned in the same write.
        """
        now = self.clock()
        entry = VerificationEntry(
            telegram=telegram, code=generate_code(), created_at=now, expires_at=now + self.ttl
        )

        def _issue(docs: list[Document]) -> None:
            live = [
                e for e in VerificationEntry.parse_many(docs)
                if e.telegram != telegram and e.is_live(now)
            ]
            docs[:] = [e.to_doc() for e in live] + [entry.to_doc()]

        self.store.update(VERIFICATION, _issue)
        log.info(f"Verification code for {telegram}: {entry.code}")

        chat_id = self.bindings.chat_id(telegram) if self.bot is not None else None
        if self.bot is not None and chat_id is None:
            log.info(f"No chat bound for {telegram}; the user needs to message the bot first")
        return IssuedCode(telegram=telegram, code=entry.code, chat_id=chat_id)

    def verify_code(self, telegram: str, code: str) -> None:
        """Consume the live entry matching `telegram` and `code`.

        Raises:
            InvalidOrExpired: no matching entry, or it has expired.
        """
        now = self.clock()

        def _consume(docs: list[Document]) -> None:
            entries = VerificationEntry.parse_many(docs)
            if not any(e.telegram == telegram and e.code == code and e.is_live(now) for e in entries):
                raise InvalidOrExpired()
            docs[:] = [
                e.to_doc() for e in entries
                if not (e.telegram == telegram and e.code == code) and e.is_live(now)
            ]

        self.store.update(VERIFICATION, _consume)
        log.info(f"Verification code for {telegram} accepted")

    async def deliver(self, issued: IssuedCode) -> bool:
        """Send an issued code to its bound chat; failures are logged, never raised."""
        if self.bot is None or issued.chat_id is None:
            return False
        try:
            await self.bot.send_message(chat_id=issued.chat_id, text=t("bot_code", self.lang, code=issued.code))
        except TelegramAPIError as e:
            log.error(f"Error sending Telegram message to {issued.telegram}: {e}")
            return False
        log.info(f"Sent verification code to {issued.telegram} via Telegram")
        return True

    async def reply(self, chat_id: int, text: str) -> None:
        if self.bot is None:
            return
        try:
            await self.bot.send_message(chat_id=chat_id, text=text)
        except TelegramAPIError as e:
            log.error(f"Error replying to chat {chat_id}: {e}")

    def handle_update(self, update: dict[str, Any]) -> Optional[tuple[int, str]]:
        """Process one Bot API update.

        Supports `/start` and `/register <username>`. Returns the (chat_id,
        text) reply to send, or None when the update is ignored.
        """
        message = update.get("message")
        if not isinstance(message, dict) or not isinstance(message.get("chat"), dict):
            return None
        text = message.get("text")
        chat_id = message["chat"].get("id")
        if not isinstance(text, str) or not text.strip() or not isinstance(chat_id, int):
            return None
        text = text.strip()
        m = _REGISTER_RE.match(text)
        if m:
            username = m.group(1)
            self.bindings.bind(username, chat_id)
            return chat_id, t("bot_registered", self.lang, username=username)
        if _START_RE.match(text):
            return chat_id, t("bot_start", self.lang)
        return None
