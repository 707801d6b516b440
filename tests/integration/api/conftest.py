from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from storefront.api.auth_utils import AuthContext
from storefront.api.deps import Settings, get_auth_context, get_rules, get_settings
from storefront.api.main import app
from storefront.rules.loader import load_rules

ROOT = Path(__file__).resolve().parents[3]

TEST_SECRET = "test-secret"


@pytest.fixture
def override_settings(db_path):
    def _settings():
        s = Settings()
        s.db_path = db_path
        s.rules_path = ROOT / "rules.yaml"
        s.migrations_dir = ROOT / "migrations"
        return s

    rules = load_rules(ROOT / "rules.yaml")
    app.dependency_overrides[get_settings] = _settings
    app.dependency_overrides[get_rules] = lambda: rules
    app.dependency_overrides[get_auth_context] = lambda: AuthContext(TEST_SECRET)
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client(override_settings):
    # No context manager: lifespan (rules + migrations on the real data dir) stays off
    return TestClient(app)


@pytest.fixture
def auth_headers():
    token = AuthContext(TEST_SECRET).issue("admin-1")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def viewer_headers():
    token = AuthContext(TEST_SECRET).issue("viewer-1", roles=("viewer",))
    return {"Authorization": f"Bearer {token}"}
