# services/assessment/routes.py
"""Assessment routes:
- /submit-test: grade and record one attempt
- /my-results: the caller's results joined with test titles
- /admin/results, /admin/statistics: admin reporting
"""

from typing import Dict, List

from fastapi import APIRouter, Depends

from packages.common.auth import Principal, get_current_user
from packages.common.config import Settings
from packages.common.messages import t
from packages.common.rbac import require_admin
from packages.schemas.assessment import (
    AdminResultView,
    DirectionStats,
    ResultWithTitle,
    Statistics,
    SubmitRequest,
    SubmitResponse,
)
from services.accounts.repo import AccountRepo
from services.catalog.repo import CatalogRepo
from services.deps import get_accounts, get_app_settings, get_catalog, get_engine
from .engine import SubmissionEngine

router = APIRouter(tags=["assessment"])
admin_router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.post("/submit-test", response_model=SubmitResponse)
def submit_test(
    body: SubmitRequest,
    user: Principal = Depends(get_current_user),
    engine: SubmissionEngine = Depends(get_engine),
) -> SubmitResponse:
    """Grade the caller's answers; a test can be submitted once per account."""
    summary = engine.submit(user.user_id, body.test_id, body.answers, body.time_spent)
    return SubmitResponse(**summary.model_dump())


@router.get("/my-results", response_model=List[ResultWithTitle])
def my_results(
    user: Principal = Depends(get_current_user),
    engine: SubmissionEngine = Depends(get_engine),
    catalog: CatalogRepo = Depends(get_catalog),
    settings: Settings = Depends(get_app_settings),
) -> List[ResultWithTitle]:
    titles = catalog.titles()
    unknown = t("unknown_test", settings.APP_LANG)
    return [
        ResultWithTitle(**r.model_dump(), test_title=titles.get(r.test_id, unknown))
        for r in engine.results_for(user.user_id)
    ]


@admin_router.get("/results", response_model=List[AdminResultView])
def admin_results(
    engine: SubmissionEngine = Depends(get_engine),
    catalog: CatalogRepo = Depends(get_catalog),
    accounts: AccountRepo = Depends(get_accounts),
    settings: Settings = Depends(get_app_settings),
) -> List[AdminResultView]:
    """All results joined with account names and test titles (placeholders when deleted)."""
    titles = catalog.titles()
    names = {a.id: a.full_name for a in accounts.accounts()}
    unknown_test = t("unknown_test", settings.APP_LANG)
    unknown_user = t("unknown_user", settings.APP_LANG)
    return [
        AdminResultView(
            **r.model_dump(),
            test_title=titles.get(r.test_id, unknown_test),
            user_name=names.get(r.user_id, unknown_user),
        )
        for r in engine.results()
    ]


@admin_router.get("/statistics", response_model=Statistics)
def admin_statistics(
    engine: SubmissionEngine = Depends(get_engine),
    catalog: CatalogRepo = Depends(get_catalog),
    accounts: AccountRepo = Depends(get_accounts),
) -> Statistics:
    """Totals plus per-direction counts; results count toward the submitter's direction."""
    users = accounts.accounts()
    tests = catalog.tests()
    results = engine.results()
    user_direction = {u.id: u.direction for u in users}

    per_direction: Dict[str, DirectionStats] = {}
    for d in catalog.directions():
        per_direction[d.name] = DirectionStats(
            users=sum(1 for u in users if u.direction == d.id),
            tests=sum(1 for x in tests if x.direction == d.id),
            results=sum(1 for r in results if user_direction.get(r.user_id) == d.id),
        )
    return Statistics(
        total_users=sum(1 for u in users if not u.is_admin),
        total_tests=len(tests),
        total_results=len(results),
        direction_stats=per_direction,
    )
