"""Integration tests for CatalogCommitService against the database.

Covers the shirt and mug scenarios, row counts per table, read-back
order, outbox recording and conflicts from pre-checks and constraints.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from modules.catalog.exceptions import (
    CatalogConflict,
    ProductAlreadyExists,
    ProductOptionValueAlreadyExists,
    ProductRootAlreadyExists,
)
from modules.catalog.models import (
    Product,
    ProductOption,
    ProductOptionValue,
    ProductRoot,
    ProductVariantBridge,
)
from modules.catalog.repositories.django_repository import CatalogDjangoStore
from modules.catalog.services import CatalogCommitService
from modules.core.models import EventStatus, OutboxEvent

pytestmark = pytest.mark.integration

SHIRT_SKUS = [
    "shirt_small_red",
    "shirt_small_blue",
    "shirt_medium_red",
    "shirt_medium_blue",
    "shirt_large_red",
    "shirt_large_blue",
]


class TestShirtScenario:
    def test_variants_in_enumeration_order(self, commit_service, shirt_payload):
        graph = commit_service.commit_catalog(shirt_payload)

        assert [p.sku for p in graph.products] == SHIRT_SKUS
        assert graph.products[0].option_summary == "Size: Small, Color: Red"
        assert graph.products[-1].option_summary == "Size: Large, Color: Blue"

    def test_row_counts(self, commit_service, shirt_payload):
        commit_service.commit_catalog(shirt_payload)

        assert ProductRoot.objects.count() == 1
        assert ProductOption.objects.count() == 2
        assert ProductOptionValue.objects.count() == 5
        assert Product.objects.count() == 6
        assert ProductVariantBridge.objects.count() == 12

    def test_each_variant_bridges_one_value_per_option(self, commit_service, shirt_payload):
        graph = commit_service.commit_catalog(shirt_payload)
        values = {v.id: v for o in graph.options for v in o.values}

        small_red = graph.products[0]
        assert [values[i].value for i in small_red.applicable_option_value_ids] == ["Small", "Red"]

        for product in Product.objects.all():
            bridges = product.bridges.order_by("position")
            assert bridges.count() == 2
            options = [b.option_value.option.name for b in bridges]
            assert options == ["Size", "Color"]

    def test_variants_share_base_fields(self, commit_service, shirt_payload):
        commit_service.commit_catalog(shirt_payload)

        root = ProductRoot.objects.get(sku_prefix="shirt")
        for product in Product.objects.all():
            assert product.root_id == root.id
            assert product.price == Decimal("59.90")
            assert product.quantity == 10
            assert product.brand == "Acme"
            assert product.upc is None

    def test_read_back_graph_matches_commit(self, commit_service, query_service, shirt_payload):
        committed = commit_service.commit_catalog(shirt_payload)

        loaded = query_service.get_root_graph(committed.id)

        assert [p.sku for p in loaded.products] == SHIRT_SKUS
        assert [o.name for o in loaded.options] == ["Size", "Color"]
        assert [
            p.applicable_option_value_ids for p in loaded.products
        ] == [p.applicable_option_value_ids for p in committed.products]

    def test_records_product_created_event(self, commit_service, shirt_payload):
        graph = commit_service.commit_catalog(shirt_payload)

        event = OutboxEvent.objects.get()
        assert event.event_type == "CatalogCommitted"
        assert event.topic == "catalog"
        assert event.status == EventStatus.PENDING
        assert event.aggregate_id == str(graph.id)
        assert event.payload["notification"] == "product_created"
        assert event.payload["skus"] == SHIRT_SKUS


class TestMugScenario:
    def test_single_base_variant(self, commit_service, mug_payload):
        graph = commit_service.commit_catalog(mug_payload)

        assert len(graph.products) == 1
        assert graph.products[0].sku == "mug"
        assert graph.products[0].option_summary == ""
        assert graph.products[0].upc == "012345678905"
        assert graph.options == []
        assert ProductVariantBridge.objects.count() == 0
        assert ProductOption.objects.count() == 0

    def test_root_fields_persisted(self, commit_service, mug_payload):
        commit_service.commit_catalog(mug_payload)

        root = ProductRoot.objects.get()
        assert root.name == "Mug"
        assert root.sku_prefix == "mug"
        assert root.quantity_per_package == 1
        assert root.archived_at is None


class TestConflicts:
    def test_same_prefix_twice(self, commit_service, mug_payload):
        commit_service.commit_catalog(mug_payload)

        with pytest.raises(ProductRootAlreadyExists):
            commit_service.commit_catalog(mug_payload)

        assert ProductRoot.objects.count() == 1

    def test_archived_prefix_stays_reserved(self, commit_service, archive_service, mug_payload):
        graph = commit_service.commit_catalog(mug_payload)
        archive_service.archive_root(graph.id)

        with pytest.raises(ProductRootAlreadyExists):
            commit_service.commit_catalog(mug_payload)

    def test_duplicate_value_in_payload_rolls_back(self, commit_service):
        payload = {
            "sku_prefix": "cap",
            "name": "Cap",
            "options": [{"name": "Color", "values": ["Red", "Red"]}],
        }

        with pytest.raises(ProductOptionValueAlreadyExists):
            commit_service.commit_catalog(payload)

        assert ProductRoot.objects.count() == 0
        assert ProductOptionValue.objects.count() == 0

    def test_variant_sku_taken_by_other_root(self, commit_service):
        commit_service.commit_catalog({"sku_prefix": "shirt_small", "name": "Small shirt"})

        with pytest.raises(ProductAlreadyExists):
            commit_service.commit_catalog(
                {
                    "sku_prefix": "shirt",
                    "name": "Shirt",
                    "options": [{"name": "Size", "values": ["Small"]}],
                }
            )

        assert ProductRoot.objects.count() == 1

    def test_unique_constraint_is_authoritative(self, mug_payload):
        """With the pre-check bypassed the database constraint still reports a conflict."""

        class BlindStore(CatalogDjangoStore):
            def product_root_with_sku_prefix_exists(self, tx, sku_prefix):
                return False

        service = CatalogCommitService(store=BlindStore())
        service.commit_catalog(mug_payload)

        with pytest.raises(CatalogConflict):
            service.commit_catalog(mug_payload)

        assert ProductRoot.objects.count() == 1
        assert Product.objects.count() == 1

    def test_duplicate_upc_is_conflict(self, commit_service, mug_payload):
        commit_service.commit_catalog(mug_payload)

        with pytest.raises(CatalogConflict):
            commit_service.commit_catalog({**mug_payload, "sku_prefix": "cup"})

        assert ProductRoot.objects.filter(sku_prefix="cup").count() == 0
