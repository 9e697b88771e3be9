"""Unit tests for the catalog services with a mocked store.

Covers:
- commit_catalog: call order, variant/bridge creation, conflicts
  (RN-CAT-001/002/003), variant bound, storage error translation.
- archive_root / archive_variant: cascade order, single timestamp, not found.
- update_product: SKU immutability, partial update, sale price pairing.
- fast-path reads: database failures surface as CatalogStorageError.
"""

from __future__ import annotations

from datetime import datetime, timezone as dt_timezone
from decimal import Decimal
from unittest.mock import ANY, MagicMock
from uuid import uuid4

import pytest
from django.db import DatabaseError, IntegrityError, OperationalError
from django.utils import timezone

from modules.catalog.events import CatalogArchived, CatalogCommitted, ProductUpdated
from modules.catalog.exceptions import (
    CatalogConflict,
    CatalogStorageError,
    CatalogValidationError,
    ProductAlreadyExists,
    ProductNotFound,
    ProductOptionAlreadyExists,
    ProductOptionValueAlreadyExists,
    ProductRootAlreadyExists,
    ProductRootNotFound,
)
from modules.catalog.models import (
    Product,
    ProductOption,
    ProductOptionValue,
    ProductRoot,
    ProductVariantBridge,
)
from modules.catalog.services import (
    CatalogArchiveService,
    CatalogCommitService,
    CatalogQueryService,
    CatalogUpdateService,
)

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _stamped(entity):
    now = timezone.now()
    entity.created_at = now
    entity.updated_at = now
    return entity


@pytest.fixture()
def mock_store():
    store = MagicMock()
    store.product_root_with_sku_prefix_exists.return_value = False
    store.product_option_with_name_exists.return_value = False
    store.product_option_value_exists_for_option.return_value = False
    store.product_with_sku_exists.return_value = False
    store.create_product_root.side_effect = lambda tx, data: _stamped(ProductRoot(**data))
    store.create_product_option.side_effect = lambda tx, root_id, name, position=0: _stamped(
        ProductOption(root_id=root_id, name=name, position=position)
    )
    store.create_product_option_value.side_effect = (
        lambda tx, option_id, value, position=0: _stamped(
            ProductOptionValue(option_id=option_id, value=value, position=position)
        )
    )
    store.create_product.side_effect = lambda tx, root_id, spec: _stamped(
        Product(root_id=root_id, **spec.as_row())
    )
    store.create_product_variant_bridges.side_effect = lambda tx, product_id, ids: [
        ProductVariantBridge(product_id=product_id, option_value_id=i, position=p)
        for p, i in enumerate(ids)
    ]
    return store


@pytest.fixture()
def commit(mock_store):
    return CatalogCommitService(store=mock_store)


@pytest.fixture()
def archive(mock_store):
    return CatalogArchiveService(store=mock_store)


@pytest.fixture()
def update(mock_store):
    return CatalogUpdateService(store=mock_store)


# ===========================================================================
# commit_catalog
# ===========================================================================


class TestCommitCatalog:
    def test_shirt_creates_six_variants_and_twelve_bridges(self, commit, mock_store, shirt_payload):
        graph = commit.commit_catalog(shirt_payload)

        assert [p.sku for p in graph.products] == [
            "shirt_small_red",
            "shirt_small_blue",
            "shirt_medium_red",
            "shirt_medium_blue",
            "shirt_large_red",
            "shirt_large_blue",
        ]
        assert mock_store.create_product.call_count == 6
        assert mock_store.create_product_variant_bridges.call_count == 6
        assert sum(len(p.applicable_option_value_ids) for p in graph.products) == 12
        assert [o.name for o in graph.options] == ["Size", "Color"]
        assert [v.value for v in graph.options[0].values] == ["Small", "Medium", "Large"]

    def test_creation_order(self, commit, mock_store, shirt_payload):
        commit.commit_catalog(shirt_payload)

        creates = [
            name
            for name, _, _ in mock_store.method_calls
            if name.startswith("create_") or name == "record_event"
        ]
        assert creates[:1] == ["create_product_root"]
        assert creates[1:5] == [
            "create_product_option",
            "create_product_option_value",
            "create_product_option_value",
            "create_product_option_value",
        ]
        assert creates[5:8] == [
            "create_product_option",
            "create_product_option_value",
            "create_product_option_value",
        ]
        assert creates[8:10] == ["create_product", "create_product_variant_bridges"]
        assert creates[-1] == "record_event"

    def test_mug_creates_base_variant_without_bridges(self, commit, mock_store, mug_payload):
        graph = commit.commit_catalog(mug_payload)

        assert len(graph.products) == 1
        product = graph.products[0]
        assert product.sku == "mug"
        assert product.option_summary == ""
        assert product.upc == "012345678905"
        assert product.applicable_option_value_ids == []
        mock_store.create_product_option.assert_not_called()
        mock_store.create_product_variant_bridges.assert_called_once_with(ANY, ANY, ())

    def test_records_catalog_committed_event(self, commit, mock_store, shirt_payload):
        graph = commit.commit_catalog(shirt_payload)

        event = mock_store.record_event.call_args.args[1]
        assert isinstance(event, CatalogCommitted)
        assert event.aggregate_id == graph.id
        assert event.skus == tuple(p.sku for p in graph.products)
        assert event.notification == "product_created"

    def test_existing_prefix_raises_before_transaction(self, commit, mock_store, shirt_payload):
        mock_store.product_root_with_sku_prefix_exists.return_value = True

        with pytest.raises(ProductRootAlreadyExists):
            commit.commit_catalog(shirt_payload)

        mock_store.create_product_root.assert_not_called()

    def test_duplicate_option_name_raises(self, commit, mock_store, shirt_payload):
        mock_store.product_option_with_name_exists.side_effect = [False, True]

        with pytest.raises(ProductOptionAlreadyExists):
            commit.commit_catalog(shirt_payload)

        mock_store.create_product.assert_not_called()

    def test_duplicate_option_value_raises(self, commit, mock_store, shirt_payload):
        mock_store.product_option_value_exists_for_option.side_effect = [False, True]

        with pytest.raises(ProductOptionValueAlreadyExists):
            commit.commit_catalog(shirt_payload)

    def test_taken_variant_sku_raises(self, commit, mock_store, shirt_payload):
        mock_store.product_with_sku_exists.side_effect = lambda tx, sku: sku == "shirt_large_red"

        with pytest.raises(ProductAlreadyExists, match="shirt_large_red"):
            commit.commit_catalog(shirt_payload)

        mock_store.record_event.assert_not_called()

    def test_invalid_payload_raises_validation_error(self, commit, mock_store):
        with pytest.raises(CatalogValidationError):
            commit.commit_catalog({"sku_prefix": "bad prefix!", "name": "x"})

        mock_store.product_root_with_sku_prefix_exists.assert_not_called()

    def test_variant_bound(self, commit, mock_store, shirt_payload, settings):
        settings.CATALOG_MAX_VARIANTS = 5

        with pytest.raises(CatalogValidationError, match="6 variants"):
            commit.commit_catalog(shirt_payload)

        mock_store.create_product_root.assert_not_called()

    def test_unique_integrity_error_is_conflict(self, commit, mock_store, shirt_payload):
        mock_store.create_product_root.side_effect = IntegrityError(
            "UNIQUE constraint failed: product_roots.sku_prefix"
        )

        with pytest.raises(CatalogConflict) as exc_info:
            commit.commit_catalog(shirt_payload)

        assert isinstance(exc_info.value.__cause__, IntegrityError)

    def test_other_integrity_error_is_storage_error(self, commit, mock_store, shirt_payload):
        mock_store.create_product.side_effect = IntegrityError(
            "NOT NULL constraint failed: products.name"
        )

        with pytest.raises(CatalogStorageError):
            commit.commit_catalog(shirt_payload)

    def test_database_error_is_storage_error(self, commit, mock_store, shirt_payload):
        mock_store.create_product_variant_bridges.side_effect = DatabaseError("disk full")

        with pytest.raises(CatalogStorageError, match="disk full") as exc_info:
            commit.commit_catalog(shirt_payload)

        assert isinstance(exc_info.value.__cause__, DatabaseError)
        mock_store.record_event.assert_not_called()


# ===========================================================================
# Archival
# ===========================================================================


class TestArchiveRoot:
    def test_cascade_order_and_single_timestamp(self, archive, mock_store):
        root = ProductRoot(sku_prefix="shirt", name="T-Shirt")
        mock_store.product_root_exists.return_value = True
        mock_store.get_product_root_for_update.return_value = root
        mock_store.archive_product_root.side_effect = lambda tx, id, at: at

        archived_at = archive.archive_root(root.id)

        names = [name for name, _, _ in mock_store.method_calls if name.startswith("archive_")]
        assert names == [
            "archive_product_variant_bridges_for_root",
            "archive_products_for_root",
            "archive_product_option_values_for_root",
            "archive_product_options_for_root",
            "archive_product_root",
        ]
        stamps = {
            call.args[2] for call in mock_store.method_calls if call[0].startswith("archive_")
        }
        assert stamps == {archived_at}

    def test_records_catalog_archived_event(self, archive, mock_store):
        root = ProductRoot(sku_prefix="shirt", name="T-Shirt")
        mock_store.product_root_exists.return_value = True
        mock_store.get_product_root_for_update.return_value = root
        mock_store.archive_product_root.side_effect = lambda tx, id, at: at

        archived_at = archive.archive_root(root.id)

        event = mock_store.record_event.call_args.args[1]
        assert isinstance(event, CatalogArchived)
        assert event.occurred_on == archived_at
        assert event.sku_prefix == "shirt"

    def test_missing_root_raises_without_writes(self, archive, mock_store):
        mock_store.product_root_exists.return_value = False

        with pytest.raises(ProductRootNotFound):
            archive.archive_root(uuid4())

        mock_store.archive_product_root.assert_not_called()
        mock_store.archive_products_for_root.assert_not_called()

    def test_root_archived_concurrently_raises(self, archive, mock_store):
        mock_store.product_root_exists.return_value = True
        mock_store.get_product_root_for_update.return_value = None

        with pytest.raises(ProductRootNotFound):
            archive.archive_root(uuid4())

        mock_store.archive_products_for_root.assert_not_called()

    def test_storage_failure_is_translated(self, archive, mock_store):
        mock_store.product_root_exists.return_value = True
        mock_store.get_product_root_for_update.return_value = ProductRoot(sku_prefix="x", name="x")
        mock_store.archive_product_option_values_for_root.side_effect = DatabaseError("lost")

        with pytest.raises(CatalogStorageError):
            archive.archive_root(uuid4())

        mock_store.archive_product_root.assert_not_called()


class TestArchiveVariant:
    def test_bridges_then_variant(self, archive, mock_store):
        product = Product(sku="shirt_small_red", name="T-Shirt")
        mock_store.product_exists.return_value = True
        mock_store.get_product.return_value = product
        mock_store.archive_product.side_effect = lambda tx, id, at: at

        archive.archive_variant(product.id)

        names = [name for name, _, _ in mock_store.method_calls if name.startswith("archive_")]
        assert names == ["archive_product_variant_bridges_for_product", "archive_product"]

    def test_missing_variant_raises(self, archive, mock_store):
        mock_store.product_exists.return_value = False

        with pytest.raises(ProductNotFound):
            archive.archive_variant(uuid4())

        mock_store.archive_product.assert_not_called()


# ===========================================================================
# update_product
# ===========================================================================


class TestUpdateProduct:
    def _existing(self, mock_store, **overrides):
        defaults = {"sku": "shirt_small_red", "name": "T-Shirt", "price": Decimal("10.00")}
        defaults.update(overrides)
        product = _stamped(Product(**defaults))
        mock_store.get_product_by_sku.return_value = product
        mock_store.update_product.side_effect = lambda tx, p: p.updated_at
        return product

    def test_partial_update(self, update, mock_store):
        product = self._existing(mock_store, description="Original")

        update.update_product("shirt_small_red", {"price": Decimal("12.50")})

        assert product.price == Decimal("12.50")
        assert product.description == "Original"
        event = mock_store.record_event.call_args.args[1]
        assert isinstance(event, ProductUpdated)
        assert event.changed_fields == ("price",)

    def test_changing_sku_is_rejected(self, update, mock_store):
        self._existing(mock_store)

        with pytest.raises(CatalogValidationError, match="cannot be changed"):
            update.update_product("shirt_small_red", {"sku": "shirt_small_green"})

        mock_store.update_product.assert_not_called()

    def test_echoing_same_sku_is_allowed(self, update, mock_store):
        self._existing(mock_store)

        update.update_product("shirt_small_red", {"sku": "shirt_small_red", "quantity": 3})

        mock_store.update_product.assert_called_once()

    def test_nulling_required_field_is_rejected(self, update, mock_store):
        self._existing(mock_store)

        with pytest.raises(CatalogValidationError, match="name"):
            update.update_product("shirt_small_red", {"name": None})

    def test_on_sale_without_sale_price_is_rejected(self, update, mock_store):
        self._existing(mock_store)

        with pytest.raises(CatalogValidationError, match="sale_price"):
            update.update_product("shirt_small_red", {"on_sale": True})

        mock_store.update_product.assert_not_called()

    def test_archived_product_not_found(self, update, mock_store):
        self._existing(mock_store, archived_at=datetime(2024, 1, 1, tzinfo=dt_timezone.utc))

        with pytest.raises(ProductNotFound):
            update.update_product("shirt_small_red", {"quantity": 1})

    def test_no_changes_skips_write(self, update, mock_store):
        product = self._existing(mock_store)

        assert update.update_product("shirt_small_red", {}) == product.updated_at
        mock_store.update_product.assert_not_called()
        mock_store.record_event.assert_not_called()


# ===========================================================================
# Fast-path reads
# ===========================================================================


class TestReadFailures:
    def test_prefix_check_failure_is_storage_error(self, commit, mock_store, shirt_payload):
        mock_store.product_root_with_sku_prefix_exists.side_effect = OperationalError(
            "connection lost"
        )

        with pytest.raises(CatalogStorageError, match="connection lost") as exc_info:
            commit.commit_catalog(shirt_payload)

        assert isinstance(exc_info.value.__cause__, OperationalError)
        mock_store.create_product_root.assert_not_called()

    def test_root_existence_check_failure_is_storage_error(self, archive, mock_store):
        mock_store.product_root_exists.side_effect = OperationalError("connection lost")

        with pytest.raises(CatalogStorageError):
            archive.archive_root(uuid4())

        mock_store.archive_product_root.assert_not_called()

    def test_variant_existence_check_failure_is_storage_error(self, archive, mock_store):
        mock_store.product_exists.side_effect = OperationalError("connection lost")

        with pytest.raises(CatalogStorageError):
            archive.archive_variant(uuid4())

    def test_query_failure_is_storage_error(self, mock_store):
        mock_store.get_product_root.side_effect = OperationalError("connection lost")
        query = CatalogQueryService(store=mock_store)

        with pytest.raises(CatalogStorageError) as exc_info:
            query.get_root_graph(uuid4())

        assert isinstance(exc_info.value.__cause__, OperationalError)

    def test_sku_lookup_failure_is_storage_error(self, mock_store):
        mock_store.product_with_sku_exists.side_effect = OperationalError("connection lost")

        with pytest.raises(CatalogStorageError):
            CatalogQueryService(store=mock_store).product_exists("mug")


# ===========================================================================
# add_option / add_option_value
# ===========================================================================


class TestAddOption:
    def test_missing_root_raises_without_writes(self, update, mock_store):
        mock_store.product_root_exists.return_value = False

        with pytest.raises(ProductRootNotFound):
            update.add_option(uuid4(), {"name": "Fit", "values": ["Slim"]})

        mock_store.create_product_option.assert_not_called()

    def test_appends_after_existing_options(self, update, mock_store):
        root = ProductRoot(sku_prefix="shirt", name="T-Shirt")
        mock_store.product_root_exists.return_value = True
        mock_store.get_product_root_for_update.return_value = root
        mock_store.list_product_options.return_value = [ProductOption(), ProductOption()]

        option = update.add_option(root.id, {"name": "Fit", "values": ["Slim", "Regular"]})

        mock_store.create_product_option.assert_called_once_with(ANY, root.id, "Fit", 2)
        assert [v.value for v in option.values] == ["Slim", "Regular"]
        mock_store.create_product.assert_not_called()
