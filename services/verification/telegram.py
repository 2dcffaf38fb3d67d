# services/verification/telegram.py
"""Telegram bot used to deliver verification codes and webhook replies."""

from aiogram import Bot
from aiogram.client.session.aiohttp import AiohttpSession
from aiogram.client.telegram import TelegramAPIServer


def create_bot(token: str, api_url: str = "https://api.telegram.org", timeout: float = 5.0) -> Bot:
    """Build an aiogram `Bot` for `token` talking to the Bot API at `api_url`.

    Raises:
        aiogram.utils.token.TokenValidationError: the token is malformed.
    """
    session = AiohttpSession(api=TelegramAPIServer.from_base(api_url.rstrip("/")), timeout=timeout)
    return Bot(token=token, session=session)
