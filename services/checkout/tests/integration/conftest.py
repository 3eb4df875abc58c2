import pytest
from fastapi.testclient import TestClient

from checkout.app import app, get_order_normalizer
from checkout.normalizer import OrderNormalizer


@pytest.fixture
def client():
    """Test client with a non-production normalizer injected."""
    app.dependency_overrides[get_order_normalizer] = lambda: OrderNormalizer(production=False)
    yield TestClient(app)
    app.dependency_overrides.clear()
