# services/verification/routes.py
import hmac
from typing import Any, Dict, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Header

from packages.common.config import Settings
from packages.common.errors import InvalidToken
from packages.common.messages import t
from packages.schemas.verification import SendCodeRequest, SendCodeResponse, VerifyCodeRequest
from services.deps import get_app_settings, get_verification
from .channel import VerificationChannel

router = APIRouter(tags=["verification"])


@router.post("/send-verification", response_model=SendCodeResponse, response_model_exclude_none=True)
def send_verification(
    body: SendCodeRequest,
    background: BackgroundTasks,
    channel: VerificationChannel = Depends(get_verification),
    settings: Settings = Depends(get_app_settings),
) -> SendCodeResponse:
    """Issue a code; it is sent to the bound Telegram chat, or returned as `devCode`."""
    issued = channel.issue_code(body.telegram)
    if issued.deliverable:
        background.add_task(channel.deliver, issued)
        return SendCodeResponse(message=t("code_sent", settings.APP_LANG))
    return SendCodeResponse(message=t("code_created", settings.APP_LANG), dev_code=issued.code)


@router.post("/verify-code")
def verify_code(
    body: VerifyCodeRequest,
    channel: VerificationChannel = Depends(get_verification),
    settings: Settings = Depends(get_app_settings),
) -> Dict[str, Any]:
    channel.verify_code(body.telegram, body.code)
    return {"success": True, "message": t("code_verified", settings.APP_LANG)}


@router.get("/telegram-commands")
def telegram_commands(settings: Settings = Depends(get_app_settings)) -> Dict[str, Any]:
    return {
        "success": True,
        "commands": [
            {"command": "/start", "description": t("cmd_start", settings.APP_LANG)},
            {"command": "/register @username", "description": t("cmd_register", settings.APP_LANG)},
        ],
    }


@router.post("/telegram/webhook")
def telegram_webhook(
    update: Dict[str, Any],
    background: BackgroundTasks,
    channel: VerificationChannel = Depends(get_verification),
    settings: Settings = Depends(get_app_settings),
    secret_token: Optional[str] = Header(default=None, alias="X-Telegram-Bot-Api-Secret-Token"),
) -> Dict[str, Any]:
    """Receive Bot API updates (`setWebhook` target) for /start and /register."""
    expected = settings.TELEGRAM_WEBHOOK_SECRET
    if expected and not hmac.compare_digest(secret_token or "", expected):
        raise InvalidToken(detail="webhook secret mismatch")
    reply = channel.handle_update(update)
    if reply is not None:
        background.add_task(channel.reply, *reply)
    return {"ok": True}
