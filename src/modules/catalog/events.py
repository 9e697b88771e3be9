"""Domain events for the Catalog bounded context.

``notification`` is the name external subscribers (webhooks) know the
event by; it travels in the outbox payload.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Tuple

from modules.catalog.constants import PRODUCT_ARCHIVED, PRODUCT_CREATED, PRODUCT_UPDATED
from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class CatalogCommitted(DomainEvent):
    """Raised when a root and all of its variants are committed."""

    notification: ClassVar[str] = PRODUCT_CREATED

    sku_prefix: str = ""
    skus: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ProductUpdated(DomainEvent):
    """Raised when a variant's mutable fields change."""

    notification: ClassVar[str] = PRODUCT_UPDATED

    sku: str = ""
    changed_fields: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CatalogArchived(DomainEvent):
    """Raised when a root and everything under it is archived."""

    notification: ClassVar[str] = PRODUCT_ARCHIVED

    sku_prefix: str = ""


@dataclass(frozen=True)
class ProductArchived(DomainEvent):
    """Raised when a single variant is archived."""

    notification: ClassVar[str] = PRODUCT_ARCHIVED

    sku: str = ""
