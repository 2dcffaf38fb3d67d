"""Test platform FastAPI application.

`create_app` wires settings, the JSON record store and the domain services
onto `app.state`, attaches tracing/CORS middleware, the JSON error envelope,
and includes every router under the API prefix.
"""

from typing import Any, Dict, Optional

from aiogram import Bot
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from packages.common.config import Settings, get_settings
from packages.common.errors import install_error_handlers
from packages.common.messages import t
from packages.common.storage import RecordStore
from packages.common.tracing import trace_middleware
from services.accounts.repo import AccountRepo
from services.accounts.routes import router as accounts_router
from services.assessment.engine import SubmissionEngine
from services.assessment.routes import admin_router as assessment_admin_router
from services.assessment.routes import router as assessment_router
from services.catalog.repo import CatalogRepo
from services.catalog.routes import admin_router as catalog_admin_router
from services.catalog.routes import router as catalog_router
from services.verification.channel import ChatBindings, VerificationChannel
from services.verification.routes import router as verification_router
from services.verification.telegram import create_bot


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[RecordStore] = None,
    bot: Optional[Bot] = None,
) -> FastAPI:
    """Build the application.

    Args:
        settings: Settings to use; defaults to `get_settings()`.
        store: Record store; defaults to one rooted at `settings.DATA_DIR`.
        bot: Telegram bot; defaults to one built from `TELEGRAM_BOT_TOKEN`
            (no token disables delivery). A bot built here is closed on shutdown.
    """
    s = settings or get_settings()
    store = store or RecordStore(s.DATA_DIR)
    owned_bot = None
    if bot is None and s.TELEGRAM_BOT_TOKEN:
        bot = owned_bot = create_bot(s.TELEGRAM_BOT_TOKEN, s.TELEGRAM_API_URL, s.TELEGRAM_TIMEOUT_SECONDS)

    app = FastAPI(title="Test Platform API", version="1.0.0")
    app.state.settings = s
    app.state.store = store
    app.state.catalog = catalog = CatalogRepo(store)
    app.state.accounts = AccountRepo(store, catalog, s.BCRYPT_ROUNDS)
    app.state.engine = SubmissionEngine(store, catalog)
    app.state.verification = VerificationChannel(
        store, ChatBindings(store), bot, s.VERIFICATION_TTL_SECONDS, s.APP_LANG
    )

    app.middleware("http")(trace_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=s.allow_origins,
        allow_credentials="*" not in s.allow_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    )
    install_error_handlers(app)

    if owned_bot is not None:
        @app.on_event("shutdown")
        async def _close_bot() -> None:
            """Release the bot's HTTP session."""
            await owned_bot.session.close()

    @app.get("/", tags=["meta"])
    def root() -> Dict[str, Any]:
        return {"status": "ok", "message": t("api_running", s.APP_LANG)}

    for router in (
        accounts_router,
        verification_router,
        catalog_router,
        assessment_router,
        catalog_admin_router,
        assessment_admin_router,
    ):
        app.include_router(router, prefix=s.API_PREFIX)
    return app
