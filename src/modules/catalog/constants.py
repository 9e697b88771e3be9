"""Catalog domain constants."""

import re

# Characters allowed in SKUs and SKU prefixes (letters, hyphen, underscore).
SKU_PATTERN = re.compile(r"^[A-Za-z\-_]+$")

OUTBOX_TOPIC = "catalog"

# Notification names consumed by webhook delivery outside this service.
PRODUCT_CREATED = "product_created"
PRODUCT_UPDATED = "product_updated"
PRODUCT_ARCHIVED = "product_archived"

# Variant fields callers may change after creation.  ``sku`` is immutable.
UPDATABLE_PRODUCT_FIELDS = (
    "name",
    "subtitle",
    "description",
    "upc",
    "manufacturer",
    "brand",
    "quantity",
    "taxable",
    "price",
    "on_sale",
    "sale_price",
    "cost",
    "product_weight",
    "product_height",
    "product_width",
    "product_length",
    "package_weight",
    "package_height",
    "package_width",
    "package_length",
    "quantity_per_package",
    "available_at",
)
