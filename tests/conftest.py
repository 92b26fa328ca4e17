from datetime import date

import pytest
from fastapi.testclient import TestClient

from budgetsheet.core.config import Settings
from budgetsheet.core.security import get_current_identity
from budgetsheet.db.dal import Ledger
from budgetsheet.db.gateway import MemoryGateway
from budgetsheet.main import create_app
from budgetsheet.models.identity import Identity
from budgetsheet.services.categories import CategoryRegistry

TEST_IDENTITY = Identity(email="alice@example.com", name="Alice", access_token="tok-alice")


def make_settings(**overrides) -> Settings:
    values = dict(
        environment="test",
        storage_backend="memory",
        bypass_auth=False,
        google_client_id="client-id",
        google_client_secret="client-secret",
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def app(settings):
    application = create_app(settings_override=settings)
    application.dependency_overrides[get_current_identity] = lambda: TEST_IDENTITY
    return application


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def anon_client(settings):
    """Client without the identity override; exercises real auth."""
    return TestClient(create_app(settings_override=settings))


@pytest.fixture
def gateway():
    return MemoryGateway()


@pytest.fixture
def ledger(gateway):
    return Ledger(gateway)


@pytest.fixture
def registry(ledger):
    return CategoryRegistry(ledger)


@pytest.fixture
def today():
    return date.today()
