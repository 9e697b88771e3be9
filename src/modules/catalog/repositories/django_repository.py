"""Django ORM implementation of the catalog store.

Satisfies ``ICatalogStore`` using Django's QuerySet API.  Every query runs
against the database alias carried by the caller's ``TransactionHandle``;
nothing here is decorated with ``transaction.atomic`` because the Service
Layer owns the unit of work.

Archive methods stamp only live rows (``archived_at IS NULL``) so a row is
never archived twice, and return ``None``/``0`` when nothing was stamped.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.utils import timezone

from modules.catalog.constants import OUTBOX_TOPIC
from modules.catalog.models import (
    Product,
    ProductOption,
    ProductOptionValue,
    ProductRoot,
    ProductVariantBridge,
)
from modules.catalog.repositories.interfaces import ICatalogStore
from modules.catalog.variants import VariantSpec
from modules.core.models import OutboxEvent
from modules.core.transactions import TransactionHandle

logger = structlog.get_logger(__name__)


class CatalogDjangoStore(ICatalogStore):
    """Concrete catalog store backed by Django ORM."""

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _first(queryset, **lookup) -> Optional[Any]:
        """``filter(**lookup).first()`` that treats malformed ids as missing rows."""
        try:
            return queryset.filter(**lookup).first()
        except (ValueError, ValidationError):
            return None

    @staticmethod
    def _archive_one(model, using: str, id: UUID, at: Optional[datetime]) -> Optional[datetime]:
        now = at or timezone.now()
        stamped = model.objects.using(using).filter(id=id).archive(at=now)
        return now if stamped else None

    @staticmethod
    def _touch(entity, using: str, fields: Sequence[str]) -> datetime:
        entity.save(using=using, update_fields=list(fields))
        return entity.updated_at

    # ------------------------------------------------------------------
    # Product roots
    # ------------------------------------------------------------------

    def product_root_exists(self, tx: TransactionHandle, id: UUID) -> bool:
        using = self._reading(tx)
        return ProductRoot.objects.using(using).alive().filter(id=id).exists()

    def product_root_with_sku_prefix_exists(
        self, tx: TransactionHandle, sku_prefix: str
    ) -> bool:
        """Archived roots count: a prefix is never reused."""
        using = self._reading(tx)
        return ProductRoot.objects.using(using).filter(sku_prefix=sku_prefix).exists()

    def get_product_root(self, tx: TransactionHandle, id: UUID) -> Optional[ProductRoot]:
        """Retrieve a root by primary key, archived or not.

        Returns ``None`` for non-existent or invalid IDs.
        """
        using = self._reading(tx)
        return self._first(ProductRoot.objects.using(using), id=id)

    def get_product_root_by_sku_prefix(
        self, tx: TransactionHandle, sku_prefix: str
    ) -> Optional[ProductRoot]:
        using = self._reading(tx)
        return ProductRoot.objects.using(using).filter(sku_prefix=sku_prefix).first()

    def get_product_root_for_update(
        self, tx: TransactionHandle, id: UUID
    ) -> Optional[ProductRoot]:
        """Lock a live root row until the transaction ends.

        Returns ``None`` when the root is missing or already archived.
        """
        using = self._writing(tx)
        return self._first(
            ProductRoot.objects.using(using).select_for_update().alive(), id=id
        )

    def list_product_roots(self, tx: TransactionHandle) -> List[ProductRoot]:
        using = self._reading(tx)
        return list(ProductRoot.objects.using(using).alive())

    def create_product_root(
        self, tx: TransactionHandle, data: Dict[str, Any]
    ) -> ProductRoot:
        using = self._writing(tx)
        root = ProductRoot.objects.using(using).create(**data)
        logger.info(
            "catalog.root_created",
            root_id=str(root.id),
            sku_prefix=root.sku_prefix,
        )
        return root

    def update_product_root(self, tx: TransactionHandle, root: ProductRoot) -> datetime:
        using = self._writing(tx)
        root.save(using=using)
        return root.updated_at

    def archive_product_root(
        self, tx: TransactionHandle, id: UUID, at: Optional[datetime] = None
    ) -> Optional[datetime]:
        """Stamp the root row only; children are archived by the cascade helpers.

        Returns ``None`` if the root was missing or already archived.
        """
        using = self._writing(tx)
        return self._archive_one(ProductRoot, using, id, at)

    # ------------------------------------------------------------------
    # Options
    # ------------------------------------------------------------------

    def product_option_exists(self, tx: TransactionHandle, id: UUID) -> bool:
        using = self._reading(tx)
        return ProductOption.objects.using(using).alive().filter(id=id).exists()

    def product_option_with_name_exists(
        self, tx: TransactionHandle, root_id: UUID, name: str
    ) -> bool:
        using = self._reading(tx)
        return (
            ProductOption.objects.using(using)
            .filter(root_id=root_id, name=name)
            .exists()
        )

    def get_product_option(
        self, tx: TransactionHandle, id: UUID
    ) -> Optional[ProductOption]:
        """Returns ``None`` for non-existent or invalid IDs."""
        using = self._reading(tx)
        return self._first(ProductOption.objects.using(using), id=id)

    def list_product_options(
        self, tx: TransactionHandle, root_id: UUID
    ) -> List[ProductOption]:
        using = self._reading(tx)
        return list(ProductOption.objects.using(using).alive().filter(root_id=root_id))

    def create_product_option(
        self, tx: TransactionHandle, root_id: UUID, name: str, position: int = 0
    ) -> ProductOption:
        using = self._writing(tx)
        return ProductOption.objects.using(using).create(
            root_id=root_id, name=name, position=position
        )

    def update_product_option(
        self, tx: TransactionHandle, option: ProductOption
    ) -> datetime:
        using = self._writing(tx)
        return self._touch(option, using, ["name"])

    def archive_product_option(
        self, tx: TransactionHandle, id: UUID, at: Optional[datetime] = None
    ) -> Optional[datetime]:
        """Returns ``None`` if the option was missing or already archived."""
        using = self._writing(tx)
        return self._archive_one(ProductOption, using, id, at)

    def archive_product_options_for_root(
        self, tx: TransactionHandle, root_id: UUID, at: datetime
    ) -> int:
        using = self._writing(tx)
        return ProductOption.objects.using(using).filter(root_id=root_id).archive(at=at)

    # ------------------------------------------------------------------
    # Option values
    # ------------------------------------------------------------------

    def product_option_value_exists(self, tx: TransactionHandle, id: UUID) -> bool:
        using = self._reading(tx)
        return ProductOptionValue.objects.using(using).alive().filter(id=id).exists()

    def product_option_value_exists_for_option(
        self, tx: TransactionHandle, option_id: UUID, value: str
    ) -> bool:
        """Exact match, archived values included."""
        using = self._reading(tx)
        return (
            ProductOptionValue.objects.using(using)
            .filter(option_id=option_id, value=value)
            .exists()
        )

    def get_product_option_value(
        self, tx: TransactionHandle, id: UUID
    ) -> Optional[ProductOptionValue]:
        """Returns ``None`` for non-existent or invalid IDs."""
        using = self._reading(tx)
        return self._first(ProductOptionValue.objects.using(using), id=id)

    def list_product_option_values(
        self, tx: TransactionHandle, option_id: UUID
    ) -> List[ProductOptionValue]:
        using = self._reading(tx)
        return list(
            ProductOptionValue.objects.using(using).alive().filter(option_id=option_id)
        )

    def create_product_option_value(
        self, tx: TransactionHandle, option_id: UUID, value: str, position: int = 0
    ) -> ProductOptionValue:
        using = self._writing(tx)
        return ProductOptionValue.objects.using(using).create(
            option_id=option_id, value=value, position=position
        )

    def update_product_option_value(
        self, tx: TransactionHandle, option_value: ProductOptionValue
    ) -> datetime:
        using = self._writing(tx)
        return self._touch(option_value, using, ["value"])

    def archive_product_option_value(
        self, tx: TransactionHandle, id: UUID, at: Optional[datetime] = None
    ) -> Optional[datetime]:
        """Returns ``None`` if the value was missing or already archived."""
        using = self._writing(tx)
        return self._archive_one(ProductOptionValue, using, id, at)

    def archive_product_option_values_for_option(
        self, tx: TransactionHandle, option_id: UUID, at: datetime
    ) -> int:
        using = self._writing(tx)
        return (
            ProductOptionValue.objects.using(using)
            .filter(option_id=option_id)
            .archive(at=at)
        )

    def archive_product_option_values_for_root(
        self, tx: TransactionHandle, root_id: UUID, at: datetime
    ) -> int:
        using = self._writing(tx)
        return (
            ProductOptionValue.objects.using(using)
            .filter(option__root_id=root_id)
            .archive(at=at)
        )

    # ------------------------------------------------------------------
    # Variants
    # ------------------------------------------------------------------

    def product_exists(self, tx: TransactionHandle, id: UUID) -> bool:
        using = self._reading(tx)
        return Product.objects.using(using).alive().filter(id=id).exists()

    def product_with_sku_exists(self, tx: TransactionHandle, sku: str) -> bool:
        """Archived variants count: a SKU is never reused."""
        using = self._reading(tx)
        return Product.objects.using(using).filter(sku=sku).exists()

    def get_product(self, tx: TransactionHandle, id: UUID) -> Optional[Product]:
        """Retrieve a variant by primary key, archived or not.

        Returns ``None`` for non-existent or invalid IDs.
        """
        using = self._reading(tx)
        return self._first(Product.objects.using(using), id=id)

    def get_product_by_sku(self, tx: TransactionHandle, sku: str) -> Optional[Product]:
        """Returns the variant even when archived, or ``None``."""
        using = self._reading(tx)
        return Product.objects.using(using).filter(sku=sku).first()

    def list_products(self, tx: TransactionHandle, root_id: UUID) -> List[Product]:
        using = self._reading(tx)
        return list(Product.objects.using(using).alive().filter(root_id=root_id))

    def create_product(
        self, tx: TransactionHandle, root_id: UUID, spec: VariantSpec
    ) -> Product:
        using = self._writing(tx)
        return Product.objects.using(using).create(root_id=root_id, **spec.as_row())

    def update_product(self, tx: TransactionHandle, product: Product) -> datetime:
        using = self._writing(tx)
        product.save(using=using)
        logger.info("catalog.product_saved", product_id=str(product.id), sku=product.sku)
        return product.updated_at

    def archive_product(
        self, tx: TransactionHandle, id: UUID, at: Optional[datetime] = None
    ) -> Optional[datetime]:
        """Stamp the variant row only; its bridges are archived separately.

        Returns ``None`` if the variant was missing or already archived.
        """
        using = self._writing(tx)
        return self._archive_one(Product, using, id, at)

    def archive_products_for_root(
        self, tx: TransactionHandle, root_id: UUID, at: datetime
    ) -> int:
        using = self._writing(tx)
        return Product.objects.using(using).filter(root_id=root_id).archive(at=at)

    # ------------------------------------------------------------------
    # Variant bridges
    # ------------------------------------------------------------------

    def product_variant_bridge_exists(self, tx: TransactionHandle, id: UUID) -> bool:
        using = self._reading(tx)
        return ProductVariantBridge.objects.using(using).alive().filter(id=id).exists()

    def get_product_variant_bridge(
        self, tx: TransactionHandle, id: UUID
    ) -> Optional[ProductVariantBridge]:
        """Returns ``None`` for non-existent or invalid IDs."""
        using = self._reading(tx)
        return self._first(ProductVariantBridge.objects.using(using), id=id)

    def list_product_variant_bridges(
        self, tx: TransactionHandle, product_ids: Sequence[UUID]
    ) -> List[ProductVariantBridge]:
        """Live bridges ordered by variant position, then value position."""
        using = self._reading(tx)
        return list(
            ProductVariantBridge.objects.using(using)
            .alive()
            .filter(product_id__in=list(product_ids))
            .order_by("product__position", "position")
        )

    def create_product_variant_bridge(
        self,
        tx: TransactionHandle,
        product_id: UUID,
        option_value_id: UUID,
        position: int = 0,
    ) -> ProductVariantBridge:
        using = self._writing(tx)
        return ProductVariantBridge.objects.using(using).create(
            product_id=product_id,
            option_value_id=option_value_id,
            position=position,
        )

    def create_product_variant_bridges(
        self,
        tx: TransactionHandle,
        product_id: UUID,
        option_value_ids: Sequence[UUID],
    ) -> List[ProductVariantBridge]:
        """Insert one bridge per value with ``bulk_create``.

        Positions follow ``option_value_ids``.  An empty sequence (the base
        variant) writes nothing and returns ``[]``.
        """
        using = self._writing(tx)
        if not option_value_ids:
            return []
        bridges = [
            ProductVariantBridge(
                product_id=product_id,
                option_value_id=option_value_id,
                position=position,
            )
            for position, option_value_id in enumerate(option_value_ids)
        ]
        return ProductVariantBridge.objects.using(using).bulk_create(bridges)

    def update_product_variant_bridge(
        self, tx: TransactionHandle, bridge: ProductVariantBridge
    ) -> datetime:
        using = self._writing(tx)
        return self._touch(bridge, using, ["product", "option_value", "position"])

    def archive_product_variant_bridge(
        self, tx: TransactionHandle, id: UUID, at: Optional[datetime] = None
    ) -> Optional[datetime]:
        """Returns ``None`` if the bridge was missing or already archived."""
        using = self._writing(tx)
        return self._archive_one(ProductVariantBridge, using, id, at)

    def archive_product_variant_bridges_for_product(
        self, tx: TransactionHandle, product_id: UUID, at: datetime
    ) -> int:
        using = self._writing(tx)
        return (
            ProductVariantBridge.objects.using(using)
            .filter(product_id=product_id)
            .archive(at=at)
        )

    def archive_product_variant_bridges_for_option_value(
        self, tx: TransactionHandle, option_value_id: UUID, at: datetime
    ) -> int:
        using = self._writing(tx)
        return (
            ProductVariantBridge.objects.using(using)
            .filter(option_value_id=option_value_id)
            .archive(at=at)
        )

    def archive_product_variant_bridges_for_option(
        self, tx: TransactionHandle, option_id: UUID, at: datetime
    ) -> int:
        using = self._writing(tx)
        return (
            ProductVariantBridge.objects.using(using)
            .filter(option_value__option_id=option_id)
            .archive(at=at)
        )

    def archive_product_variant_bridges_for_root(
        self, tx: TransactionHandle, root_id: UUID, at: datetime
    ) -> int:
        """Bridges of the root's live variants only.

        Bridges of a variant archived earlier were stamped with it.
        """
        using = self._writing(tx)
        return (
            ProductVariantBridge.objects.using(using)
            .filter(product__root_id=root_id, product__archived_at__isnull=True)
            .archive(at=at)
        )

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def record_event(self, tx: TransactionHandle, event: Any) -> None:
        """Write ``event`` to the outbox in the caller's transaction."""
        using = self._writing(tx)
        OutboxEvent.objects.using(using).create(
            event_type=event.event_name,
            aggregate_id=str(event.aggregate_id),
            payload=_serialize_event_payload(event),
            topic=OUTBOX_TOPIC,
        )
        logger.info(
            "catalog.event_recorded",
            event_type=event.event_name,
            aggregate_id=str(event.aggregate_id),
        )


def _serialize_event_payload(event: Any) -> Dict[str, Any]:
    data = asdict(event)
    notification = getattr(event, "notification", None)
    if notification:
        data["notification"] = notification
    normalized = _normalize_for_json(data)
    return json.loads(json.dumps(normalized))


def _normalize_for_json(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_normalize_for_json(item) for item in value]
    if isinstance(value, dict):
        return {key: _normalize_for_json(val) for key, val in value.items()}
    return value
