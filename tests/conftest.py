import os

# Pas de Redis pendant les tests (le lifespan lit cette variable au démarrage de l'app)
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

import pytest
from typing import Generator
from unittest.mock import MagicMock
from fastapi.testclient import TestClient

from storefront.config import Settings
from storefront.app_setup.factory import create_app

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)

@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://kbeauty-test.supabase.co",
        supabase_service_key="service-key",
        stripe_secret_key="sk_test_123",
        base_url="http://shop.test",
    )

@pytest.fixture
def unconfigured_settings() -> Settings:
    """Ni Stripe ni Supabase: chemins 503 / dégradés."""
    return Settings(base_url="http://shop.test")

@pytest.fixture
def app(settings):
    return create_app(settings)

@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c

# Jamais d'accès réseau à Supabase: le client service-role est un MagicMock partagé
@pytest.fixture(autouse=True)
def supabase_mock(monkeypatch) -> MagicMock:
    fake = MagicMock(name="supabase")
    monkeypatch.setattr("storefront.infra.supabase_client.get_service_supabase", lambda settings=None: fake)
    return fake

@pytest.fixture
def cart_payload():
    return {
        "items": [
            {"product_id": "p1", "name": "Snail Cream", "unit_price": 1199.00, "quantity": 2},
        ]
    }
