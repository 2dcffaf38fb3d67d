# services/accounts/routes.py
from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from packages.common.auth import Principal, issue_credential
from packages.common.config import Settings
from packages.common.messages import t
from packages.common.rbac import require_admin
from packages.common.tracing import xapi_event
from packages.schemas.accounts import AdminUserView, LoginRequest, LoginResponse, PublicUser, RegisterRequest
from services.deps import get_accounts, get_app_settings
from .repo import AccountRepo

router = APIRouter(tags=["accounts"])


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    accounts: AccountRepo = Depends(get_accounts),
    settings: Settings = Depends(get_app_settings),
) -> LoginResponse:
    """Exchange login/password for a 24h bearer token and the public user view."""
    account = accounts.authenticate(body.login, body.password)
    token = issue_credential(account.id, account.is_admin, settings.JWT_SECRET, settings.JWT_TTL_HOURS)
    xapi_event(account.id, "logged_in", "session")
    return LoginResponse(token=token, user=PublicUser.model_validate(account.model_dump()))


@router.post("/register")
def register(
    body: RegisterRequest,
    accounts: AccountRepo = Depends(get_accounts),
    settings: Settings = Depends(get_app_settings),
) -> Dict[str, Any]:
    """Create a learner account in the chosen direction."""
    account = accounts.register(body)
    xapi_event(account.id, "registered", account.direction)
    return {"success": True, "message": t("registered", settings.APP_LANG)}


@router.get("/admin/users", response_model=List[AdminUserView])
def list_users(
    _: Principal = Depends(require_admin),
    accounts: AccountRepo = Depends(get_accounts),
) -> List[AdminUserView]:
    """List learner accounts (admins excluded, no password hashes)."""
    return [AdminUserView.model_validate(a.model_dump()) for a in accounts.accounts() if not a.is_admin]
