"""Integration tests for all-or-nothing catalog commits.

A store that fails at a given step (root, option, value, variant, bridge,
outbox) must leave no row behind in any catalog table.
"""

from __future__ import annotations

import pytest
from django.db import DatabaseError

from modules.catalog.exceptions import CatalogStorageError
from modules.catalog.models import (
    Product,
    ProductOption,
    ProductOptionValue,
    ProductRoot,
    ProductVariantBridge,
)
from modules.catalog.repositories.django_repository import CatalogDjangoStore
from modules.catalog.services import CatalogCommitService
from modules.core.models import OutboxEvent

pytestmark = pytest.mark.integration


class FailingStore(CatalogDjangoStore):
    """Raises ``DatabaseError`` on the ``fail_on``-th call of ``method``."""

    def __init__(self, method: str, fail_on: int = 1) -> None:
        self.calls = 0
        original = getattr(self, method)

        def failing(*args, **kwargs):
            self.calls += 1
            if self.calls == fail_on:
                raise DatabaseError(f"{method} failed")
            return original(*args, **kwargs)

        setattr(self, method, failing)


def _assert_no_rows():
    assert ProductRoot.objects.count() == 0
    assert ProductOption.objects.count() == 0
    assert ProductOptionValue.objects.count() == 0
    assert Product.objects.count() == 0
    assert ProductVariantBridge.objects.count() == 0
    assert OutboxEvent.objects.count() == 0


@pytest.mark.parametrize(
    ("method", "fail_on"),
    [
        ("create_product_root", 1),
        ("create_product_option", 1),
        ("create_product_option", 2),
        ("create_product_option_value", 1),
        ("create_product_option_value", 5),
        ("create_product", 1),
        ("create_product", 6),
        ("create_product_variant_bridges", 1),
        ("create_product_variant_bridges", 6),
        ("record_event", 1),
    ],
)
def test_failure_at_any_step_leaves_no_rows(method, fail_on, shirt_payload):
    service = CatalogCommitService(store=FailingStore(method, fail_on))

    with pytest.raises(CatalogStorageError, match=method):
        service.commit_catalog(shirt_payload)

    _assert_no_rows()


def test_failure_on_base_variant_leaves_no_rows(mug_payload):
    service = CatalogCommitService(store=FailingStore("create_product"))

    with pytest.raises(CatalogStorageError):
        service.commit_catalog(mug_payload)

    _assert_no_rows()


def test_commit_after_failure_succeeds(shirt_payload, commit_service):
    failing = CatalogCommitService(store=FailingStore("create_product", 3))
    with pytest.raises(CatalogStorageError):
        failing.commit_catalog(shirt_payload)

    graph = commit_service.commit_catalog(shirt_payload)

    assert len(graph.products) == 6
    assert ProductVariantBridge.objects.count() == 12
