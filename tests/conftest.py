from typing import List

import pytest
from fastapi.testclient import TestClient

from storefront.catalog import CatalogCache
from storefront.core.errors import IndexUnavailable
from storefront.core.models import Product, SiteSettings


def pytest_configure(config):
    """Register custom marks."""
    config.addinivalue_line("markers", "integration: mark test as integration test")


def make_products(count: int) -> List[Product]:
    return [Product(id=f"p{i}", name=f"Product {i}", price=10 * i) for i in range(1, count + 1)]


class FakeStore:
    """Catalog store stand-in that counts fetches."""

    def __init__(self, products: List[Product], site_settings: SiteSettings | None = None,
                 fail: bool = False):
        self.products = products
        self.site_settings = site_settings or SiteSettings()
        self.fail = fail
        self.product_fetches = 0

    def fetch_products(self) -> List[Product]:
        self.product_fetches += 1
        if self.fail:
            raise IndexUnavailable("store is down")
        return list(self.products)

    def fetch_site_settings(self) -> SiteSettings:
        if self.fail:
            raise IndexUnavailable("store is down")
        return self.site_settings


@pytest.fixture
def pharmacy_products() -> List[Product]:
    return [
        Product(id="a", name="Panadol 500mg", price=50, description="Paracetamol",
                imageUrl="http://x/panadol.png"),
        Product(id="b", name="Panadol Extra", price=75),
        Product(id="c", name="Brufen 400mg", price=120, description="Ibuprofen"),
        Product(id="d", name="Disprin", price=25),
    ]


@pytest.fixture
def fake_store(pharmacy_products) -> FakeStore:
    return FakeStore(pharmacy_products, SiteSettings(whatsappNumber="+92 300-1234567"))


@pytest.fixture
def client(fake_store):
    from storefront.main import app, get_catalog

    cache = CatalogCache(fake_store, ttl=60)
    app.dependency_overrides[get_catalog] = lambda: cache
    yield TestClient(app)
    app.dependency_overrides.clear()
