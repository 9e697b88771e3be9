"""Catalog graph models: roots, options, option values, variants, bridges.

Business rules implemented:
- RN-CAT-001: ``ProductRoot.sku_prefix`` is unique.
- RN-CAT-002: Option names are unique per root; values unique per option.
- RN-CAT-003: ``Product.sku`` is unique and never rewritten after creation.
- RN-CAT-004: Archive via ``archived_at`` (inherited from ArchivableModel).

Uniqueness constraints are unconditional: an archived row keeps its key
reserved, which keeps SKUs stable for historical orders.
"""

from __future__ import annotations

from decimal import Decimal

import structlog
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from modules.core.models import ArchivableModel

logger = structlog.get_logger(__name__)

_MONEY = {"max_digits": 15, "decimal_places": 2}


def _measure():
    return models.DecimalField(null=True, blank=True, default=None, **_MONEY)


class PhysicalAttributes(models.Model):
    """Shared product/package dimension columns."""

    taxable = models.BooleanField(default=False)
    cost = models.DecimalField(default=Decimal("0.00"), **_MONEY)
    product_weight = _measure()
    product_height = _measure()
    product_width = _measure()
    product_length = _measure()
    package_weight = _measure()
    package_height = _measure()
    package_width = _measure()
    package_length = _measure()
    quantity_per_package = models.PositiveIntegerField(
        default=1, validators=[MinValueValidator(1)]
    )
    available_at = models.DateTimeField(default=timezone.now)

    class Meta:
        abstract = True


class ProductRoot(ArchivableModel, PhysicalAttributes):
    """The sellable concept shared by every variant (e.g. "T-Shirt")."""

    name = models.CharField(max_length=255)
    subtitle = models.CharField(max_length=255, blank=True, default="")
    description = models.TextField(blank=True, default="")
    sku_prefix = models.CharField(max_length=128, unique=True)
    manufacturer = models.CharField(max_length=255, blank=True, default="")
    brand = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        db_table = "product_roots"
        ordering = ["name"]

    def __str__(self) -> str:
        return f"{self.sku_prefix} - {self.name}"


class ProductOption(ArchivableModel):
    """A dimension of variation for a root (e.g. "Size")."""

    root = models.ForeignKey(
        ProductRoot,
        on_delete=models.PROTECT,
        related_name="options",
    )
    name = models.CharField(max_length=255)
    position = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "product_options"
        ordering = ["position", "created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["root", "name"],
                name="product_options_root_name_uniq",
            ),
        ]

    def __str__(self) -> str:
        return self.name


class ProductOptionValue(ArchivableModel):
    """A concrete value of an option (e.g. "Small")."""

    option = models.ForeignKey(
        ProductOption,
        on_delete=models.PROTECT,
        related_name="values",
    )
    value = models.CharField(max_length=255)
    position = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "product_option_values"
        ordering = ["position", "created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["option", "value"],
                name="product_option_values_option_value_uniq",
            ),
        ]

    def __str__(self) -> str:
        return self.value


class Product(ArchivableModel, PhysicalAttributes):
    """One purchasable variant with its own SKU, price and stock."""

    root = models.ForeignKey(
        ProductRoot,
        on_delete=models.PROTECT,
        related_name="products",
    )
    name = models.CharField(max_length=255)
    subtitle = models.CharField(max_length=255, blank=True, default="")
    description = models.TextField(blank=True, default="")
    option_summary = models.TextField(blank=True, default="")
    sku = models.CharField(max_length=255, unique=True)
    upc = models.CharField(max_length=64, null=True, blank=True, unique=True)  # noqa: DJ01
    manufacturer = models.CharField(max_length=255, blank=True, default="")
    brand = models.CharField(max_length=255, blank=True, default="")
    quantity = models.PositiveIntegerField(default=0)
    price = models.DecimalField(default=Decimal("0.00"), **_MONEY)
    on_sale = models.BooleanField(default=False)
    sale_price = models.DecimalField(default=Decimal("0.00"), **_MONEY)
    position = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "products"
        ordering = ["position", "created_at"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(on_sale=True) & ~models.Q(sale_price=0)
                )
                | (models.Q(on_sale=False) & models.Q(sale_price=0)),
                name="products_sale_price_matches_on_sale",
            ),
        ]

    def save(self, *args, **kwargs) -> None:
        is_new = self._state.adding
        super().save(*args, **kwargs)
        if is_new:
            logger.debug(
                "product_created",
                product_id=str(self.id),
                sku=self.sku,
                root_id=str(self.root_id),
            )

    def __str__(self) -> str:
        return f"{self.sku} - {self.name}"


class ProductVariantBridge(ArchivableModel):
    """Link row: which option value produced a variant."""

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="bridges",
    )
    option_value = models.ForeignKey(
        ProductOptionValue,
        on_delete=models.PROTECT,
        related_name="bridges",
    )
    position = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "product_variant_bridges"
        ordering = ["position", "created_at"]
        indexes = [
            models.Index(
                fields=["product", "archived_at"],
                name="bridges_product_archived_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.product_id} <- {self.option_value_id}"
