"""Event handlers for Catalog domain events.

Webhook delivery plugs in here; the handlers below only log.
"""

from __future__ import annotations

import structlog

from modules.catalog.events import (
    CatalogArchived,
    CatalogCommitted,
    ProductArchived,
    ProductUpdated,
)
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class CatalogCommittedHandler(IEventHandler[CatalogCommitted]):
    def handle(self, event: CatalogCommitted) -> None:
        logger.info(
            "catalog.event.committed",
            notification=event.notification,
            root_id=str(event.aggregate_id),
            sku_prefix=event.sku_prefix,
            variants=len(event.skus),
        )


class ProductUpdatedHandler(IEventHandler[ProductUpdated]):
    def handle(self, event: ProductUpdated) -> None:
        logger.info(
            "catalog.event.product_updated",
            notification=event.notification,
            product_id=str(event.aggregate_id),
            sku=event.sku,
            changed_fields=list(event.changed_fields),
        )


class CatalogArchivedHandler(IEventHandler[CatalogArchived]):
    def handle(self, event: CatalogArchived) -> None:
        logger.info(
            "catalog.event.archived",
            notification=event.notification,
            root_id=str(event.aggregate_id),
            sku_prefix=event.sku_prefix,
        )


class ProductArchivedHandler(IEventHandler[ProductArchived]):
    def handle(self, event: ProductArchived) -> None:
        logger.info(
            "catalog.event.product_archived",
            notification=event.notification,
            product_id=str(event.aggregate_id),
            sku=event.sku,
        )


catalog_committed_handler = CatalogCommittedHandler()
product_updated_handler = ProductUpdatedHandler()
catalog_archived_handler = CatalogArchivedHandler()
product_archived_handler = ProductArchivedHandler()
