from decimal import Decimal

import pytest

from modules.catalog.repositories.django_repository import CatalogDjangoStore
from modules.catalog.services import (
    CatalogArchiveService,
    CatalogCommitService,
    CatalogQueryService,
    CatalogUpdateService,
)


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def store():
    return CatalogDjangoStore()


@pytest.fixture()
def commit_service(store):
    return CatalogCommitService(store=store)


@pytest.fixture()
def archive_service(store):
    return CatalogArchiveService(store=store)


@pytest.fixture()
def query_service(store):
    return CatalogQueryService(store=store)


@pytest.fixture()
def update_service(store):
    return CatalogUpdateService(store=store)


@pytest.fixture()
def shirt_payload():
    """Two options, 3 x 2 values: six variants, twelve bridges."""
    return {
        "sku_prefix": "shirt",
        "name": "T-Shirt",
        "brand": "Acme",
        "price": Decimal("59.90"),
        "quantity": 10,
        "options": [
            {"name": "Size", "values": ["Small", "Medium", "Large"]},
            {"name": "Color", "values": ["Red", "Blue"]},
        ],
    }


@pytest.fixture()
def mug_payload():
    """No options: a single base variant."""
    return {
        "sku_prefix": "mug",
        "name": "Mug",
        "upc": "012345678905",
        "price": Decimal("34.50"),
        "options": [],
    }
