"""Shared fixtures: a fresh app over a temporary data directory per test."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from packages.common.auth import issue_credential
from packages.common.config import Settings
from packages.common.storage import USERS, RecordStore
from packages.schemas.accounts import Account, RegisterRequest
from services.accounts.passwords import hash_password
from services.app import create_app

JWT_SECRET = "test-secret"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(_env_file=None, JWT_SECRET=JWT_SECRET, DATA_DIR=tmp_path, BCRYPT_ROUNDS=4, APP_LANG="en")


@pytest.fixture
def store(settings) -> RecordStore:
    return RecordStore(settings.DATA_DIR)


@pytest.fixture
def app(settings, store):
    return create_app(settings, store)


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def catalog(app):
    return app.state.catalog


@pytest.fixture
def accounts(app):
    return app.state.accounts


@pytest.fixture
def engine(app):
    return app.state.engine


@pytest.fixture
def direction(catalog):
    return catalog.add_direction("Dasturlash")


@pytest.fixture
def learner(accounts, direction) -> Account:
    return accounts.register(RegisterRequest(
        first_name="Alice",
        last_name="Karimova",
        direction=direction.id,
        phone="+998901112233",
        telegram="@alice",
        login="alice",
        password="wonderland",
    ))


@pytest.fixture
def admin(store, direction) -> Account:
    account = Account(
        id="admin-1",
        first_name="Admin",
        last_name="User",
        direction=direction.id,
        direction_name=direction.name,
        phone="+998901234567",
        telegram="@admin",
        login="admin",
        password=hash_password("admin-pass", rounds=4),
        is_admin=True,
    )
    store.update(USERS, lambda docs: docs.append(account.to_doc()))
    return account


def _bearer(account: Account) -> dict[str, str]:
    return {"Authorization": f"Bearer {issue_credential(account.id, account.is_admin, JWT_SECRET)}"}


@pytest.fixture
def make_headers():
    return _bearer


@pytest.fixture
def learner_headers(learner) -> dict[str, str]:
    return _bearer(learner)


@pytest.fixture
def admin_headers(admin) -> dict[str, str]:
    return _bearer(admin)
