# services/catalog/routes.py
from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from packages.common.auth import Principal, get_current_user
from packages.common.config import Settings
from packages.common.errors import AccountNotFound, TestNotFound
from packages.common.messages import t
from packages.common.rbac import require_admin
from packages.schemas.catalog import Direction, DirectionInput, LearnerTest, TestDefinition, TestInput, TestListing
from services.accounts.repo import AccountRepo
from services.assessment.engine import SubmissionEngine
from services.deps import get_accounts, get_app_settings, get_catalog, get_engine
from .repo import CatalogRepo

router = APIRouter(tags=["catalog"])
admin_router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/directions", response_model=List[Direction])
def list_directions(catalog: CatalogRepo = Depends(get_catalog)) -> List[Direction]:
    return catalog.directions()


@router.get("/tests", response_model=List[TestListing])
def list_tests(
    user: Principal = Depends(get_current_user),
    accounts: AccountRepo = Depends(get_accounts),
    catalog: CatalogRepo = Depends(get_catalog),
    engine: SubmissionEngine = Depends(get_engine),
) -> List[TestListing]:
    """Tests of the caller's direction (all tests for admins), flagged `completed`."""
    account = accounts.get(user.user_id)
    if account is None:
        raise AccountNotFound(detail=user.user_id)
    tests = catalog.tests()
    if not account.is_admin:
        tests = [x for x in tests if x.direction == account.direction]
    done = engine.completed_tests(account.id)
    return [
        TestListing.from_definition(x).model_copy(update={"completed": x.id in done})
        for x in tests
    ]


@router.get("/tests/{test_id}", response_model=LearnerTest)
def get_test(
    test_id: str,
    _: Principal = Depends(get_current_user),
    catalog: CatalogRepo = Depends(get_catalog),
) -> LearnerTest:
    """Fetch a test for answering; correct-option markers are stripped."""
    test = catalog.get_test(test_id)
    if test is None:
        raise TestNotFound(detail=test_id)
    return LearnerTest.from_definition(test)


# ----- admin -----

@admin_router.get("/tests", response_model=List[TestDefinition])
def admin_list_tests(catalog: CatalogRepo = Depends(get_catalog)) -> List[TestDefinition]:
    return catalog.tests()


@admin_router.post("/tests")
def admin_create_test(body: TestInput, catalog: CatalogRepo = Depends(get_catalog)) -> Dict[str, Any]:
    test = catalog.create_test(body)
    return {"success": True, "test": test.to_doc()}


@admin_router.put("/tests/{test_id}")
def admin_update_test(
    test_id: str, body: TestInput, catalog: CatalogRepo = Depends(get_catalog)
) -> Dict[str, Any]:
    test = catalog.update_test(test_id, body)
    return {"success": True, "test": test.to_doc()}


@admin_router.delete("/tests/{test_id}")
def admin_delete_test(
    test_id: str,
    catalog: CatalogRepo = Depends(get_catalog),
    settings: Settings = Depends(get_app_settings),
) -> Dict[str, Any]:
    catalog.delete_test(test_id)
    return {"success": True, "message": t("test_deleted", settings.APP_LANG)}


@admin_router.get("/directions", response_model=List[Direction])
def admin_list_directions(catalog: CatalogRepo = Depends(get_catalog)) -> List[Direction]:
    return catalog.directions()


@admin_router.post("/directions")
def admin_add_direction(body: DirectionInput, catalog: CatalogRepo = Depends(get_catalog)) -> Dict[str, Any]:
    direction = catalog.add_direction(body.name)
    return {"success": True, "direction": direction.to_doc()}


@admin_router.delete("/directions/{direction_id}")
def admin_delete_direction(
    direction_id: str,
    catalog: CatalogRepo = Depends(get_catalog),
    settings: Settings = Depends(get_app_settings),
) -> Dict[str, Any]:
    catalog.delete_direction(direction_id)
    return {"success": True, "message": t("direction_deleted", settings.APP_LANG)}
