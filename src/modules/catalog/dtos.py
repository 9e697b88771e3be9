"""Catalog DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between callers (HTTP layer, management
commands) and the catalog services.  DTOs are immutable (``frozen=True``).

- ``CreateCatalogDTO``: root + base variant fields + options with values.
- ``UpdateProductDTO`` / ``UpdateOptionDTO`` / ``OptionValueDTO``:
  partial updates.
- ``RootGraph``: the committed root with its options, values and variants.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Mapping, Optional, Sequence, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from modules.catalog.constants import SKU_PATTERN, UPDATABLE_PRODUCT_FIELDS
from modules.catalog.exceptions import CatalogValidationError
from modules.catalog.variants import VariantFields

if TYPE_CHECKING:
    from modules.catalog.models import (
        Product,
        ProductOption,
        ProductOptionValue,
        ProductRoot,
    )

_DTO = TypeVar("_DTO", bound=BaseModel)


def _required_text(v: str, label: str) -> str:
    if not v or not v.strip():
        raise ValueError(f"{label} must not be empty.")
    return v.strip()


def _non_negative(v: Optional[Decimal], label: str) -> Optional[Decimal]:
    if v is not None and v < 0:
        raise ValueError(f"{label} cannot be negative.")
    return v


def _reject_duplicates(items: Sequence[str], label: str) -> None:
    # Variant SKUs are built from lower-cased values, so "Small" and "small"
    # would collide.
    seen: set[str] = set()
    for item in items:
        key = item.casefold()
        if key in seen:
            raise ValueError(f"{label} {item} is repeated.")
        seen.add(key)


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateOptionDTO(BaseModel):
    """One option and its values, e.g. ``{"name": "Size", "values": [...]}``."""

    model_config = ConfigDict(frozen=True)

    name: str
    values: list[str]

    @field_validator("name")
    @classmethod
    def name_must_not_be_empty(cls, v: str) -> str:
        return _required_text(v, "Option name")

    @field_validator("values")
    @classmethod
    def values_must_not_be_empty(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("Option must have at least one value.")
        values = [_required_text(value, "Option value") for value in v]
        _reject_duplicates(values, "Option value")
        return values


class CreateCatalogDTO(BaseModel):
    """Immutable DTO for catalog creation requests.

    Validates:
    - ``sku_prefix`` only contains letters, ``-`` and ``_``.
    - money fields are non-negative; ``sale_price`` is set iff ``on_sale``.
    - every option carries at least one value.
    - option names, and values within an option, are distinct ignoring case.
    """

    model_config = ConfigDict(frozen=True)

    sku_prefix: str
    name: str
    subtitle: str = ""
    description: str = ""
    upc: Optional[str] = None
    manufacturer: str = ""
    brand: str = ""
    quantity: int = 0
    taxable: bool = False
    price: Decimal = Decimal("0.00")
    on_sale: bool = False
    sale_price: Decimal = Decimal("0.00")
    cost: Decimal = Decimal("0.00")
    product_weight: Optional[Decimal] = None
    product_height: Optional[Decimal] = None
    product_width: Optional[Decimal] = None
    product_length: Optional[Decimal] = None
    package_weight: Optional[Decimal] = None
    package_height: Optional[Decimal] = None
    package_width: Optional[Decimal] = None
    package_length: Optional[Decimal] = None
    quantity_per_package: int = 1
    available_at: Optional[datetime] = None
    options: list[CreateOptionDTO] = []

    @field_validator("sku_prefix")
    @classmethod
    def sku_prefix_must_be_restricted(cls, v: str) -> str:
        v = v.strip()
        if not SKU_PATTERN.match(v):
            raise ValueError(f"The sku received ({v}) is invalid.")
        return v

    @field_validator("name")
    @classmethod
    def name_must_not_be_empty(cls, v: str) -> str:
        return _required_text(v, "Name")

    @field_validator("options")
    @classmethod
    def option_names_must_be_distinct(cls, v: list[CreateOptionDTO]) -> list[CreateOptionDTO]:
        _reject_duplicates([option.name for option in v], "Option")
        return v

    @field_validator("price", "sale_price", "cost")
    @classmethod
    def money_must_be_non_negative(cls, v: Decimal, info) -> Decimal:
        return _non_negative(v, info.field_name)

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Quantity cannot be negative.")
        return v

    @field_validator("quantity_per_package")
    @classmethod
    def at_least_one_per_package(cls, v: int) -> int:
        return max(v, 1)

    @model_validator(mode="after")
    def sale_price_matches_on_sale(self) -> CreateCatalogDTO:
        if self.on_sale and self.sale_price == 0:
            raise ValueError("sale_price is required when on_sale is set.")
        if not self.on_sale and self.sale_price != 0:
            raise ValueError("sale_price must be zero when on_sale is not set.")
        return self

    def root_fields(self) -> dict[str, Any]:
        fields = self.model_dump(
            include={
                "name",
                "subtitle",
                "description",
                "manufacturer",
                "brand",
                "taxable",
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
            }
        )
        fields["sku_prefix"] = self.sku_prefix
        if self.available_at is not None:
            fields["available_at"] = self.available_at
        return fields

    def variant_fields(self) -> VariantFields:
        return VariantFields(
            **self.model_dump(exclude={"sku_prefix", "options"})
        )

    @property
    def value_counts(self) -> list[int]:
        return [len(option.values) for option in self.options]


def validate_payload(dto_class: type[_DTO], data: Mapping[str, Any]) -> _DTO:
    """Validate raw input into ``dto_class``.

    Raises:
        CatalogValidationError: the payload is malformed.
    """
    try:
        return dto_class.model_validate(data)
    except ValidationError as exc:
        raise CatalogValidationError(str(exc)) from exc


def parse_catalog_payload(data: Mapping[str, Any]) -> CreateCatalogDTO:
    return validate_payload(CreateCatalogDTO, data)


class UpdateProductDTO(BaseModel):
    """Immutable DTO for variant update requests.

    All fields are optional — only supplied fields will be updated.
    ``sku`` may be echoed back but never changed.
    """

    model_config = ConfigDict(frozen=True)

    sku: Optional[str] = None
    name: Optional[str] = None
    subtitle: Optional[str] = None
    description: Optional[str] = None
    upc: Optional[str] = None
    manufacturer: Optional[str] = None
    brand: Optional[str] = None
    quantity: Optional[int] = None
    taxable: Optional[bool] = None
    price: Optional[Decimal] = None
    on_sale: Optional[bool] = None
    sale_price: Optional[Decimal] = None
    cost: Optional[Decimal] = None
    product_weight: Optional[Decimal] = None
    product_height: Optional[Decimal] = None
    product_width: Optional[Decimal] = None
    product_length: Optional[Decimal] = None
    package_weight: Optional[Decimal] = None
    package_height: Optional[Decimal] = None
    package_width: Optional[Decimal] = None
    package_length: Optional[Decimal] = None
    quantity_per_package: Optional[int] = None
    available_at: Optional[datetime] = None

    @field_validator("price", "sale_price", "cost")
    @classmethod
    def money_must_be_non_negative(cls, v: Optional[Decimal], info) -> Optional[Decimal]:
        return _non_negative(v, info.field_name)

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_non_negative(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError("Quantity cannot be negative.")
        return v

    @field_validator("quantity_per_package")
    @classmethod
    def at_least_one_per_package(cls, v: Optional[int]) -> Optional[int]:
        if v is None:
            return v
        return max(v, 1)

    def changes(self) -> dict[str, Any]:
        """Updatable fields the caller actually sent (never ``sku``)."""
        return self.model_dump(exclude_unset=True, include=set(UPDATABLE_PRODUCT_FIELDS))


class UpdateOptionDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str

    @field_validator("name")
    @classmethod
    def name_must_not_be_empty(cls, v: str) -> str:
        return _required_text(v, "Option name")


class OptionValueDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: str

    @field_validator("value")
    @classmethod
    def value_must_not_be_empty(cls, v: str) -> str:
        return _required_text(v, "Option value")


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class OptionValueOutputDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    option_id: UUID
    value: str
    created_at: datetime
    updated_at: datetime
    archived_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, value: ProductOptionValue) -> OptionValueOutputDTO:
        return cls(
            id=value.id,
            option_id=value.option_id,
            value=value.value,
            created_at=value.created_at,
            updated_at=value.updated_at,
            archived_at=value.archived_at,
        )


class OptionOutputDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    root_id: UUID
    name: str
    values: list[OptionValueOutputDTO]
    created_at: datetime
    updated_at: datetime
    archived_at: Optional[datetime] = None

    @classmethod
    def from_entity(
        cls, option: ProductOption, values: Sequence[ProductOptionValue]
    ) -> OptionOutputDTO:
        return cls(
            id=option.id,
            root_id=option.root_id,
            name=option.name,
            values=[OptionValueOutputDTO.from_entity(v) for v in values],
            created_at=option.created_at,
            updated_at=option.updated_at,
            archived_at=option.archived_at,
        )


class ProductOutputDTO(BaseModel):
    """A variant with the ids of the option values that produced it."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    root_id: UUID
    sku: str
    name: str
    subtitle: str
    description: str
    option_summary: str
    upc: Optional[str]
    manufacturer: str
    brand: str
    quantity: int
    taxable: bool
    price: Decimal
    on_sale: bool
    sale_price: Decimal
    cost: Decimal
    quantity_per_package: int
    applicable_option_value_ids: list[UUID]
    available_at: datetime
    created_at: datetime
    updated_at: datetime
    archived_at: Optional[datetime] = None

    @classmethod
    def from_entity(
        cls, product: Product, option_value_ids: Sequence[UUID] = ()
    ) -> ProductOutputDTO:
        return cls(
            id=product.id,
            root_id=product.root_id,
            sku=product.sku,
            name=product.name,
            subtitle=product.subtitle,
            description=product.description,
            option_summary=product.option_summary,
            upc=product.upc,
            manufacturer=product.manufacturer,
            brand=product.brand,
            quantity=product.quantity,
            taxable=product.taxable,
            price=product.price,
            on_sale=product.on_sale,
            sale_price=product.sale_price,
            cost=product.cost,
            quantity_per_package=product.quantity_per_package,
            applicable_option_value_ids=list(option_value_ids),
            available_at=product.available_at,
            created_at=product.created_at,
            updated_at=product.updated_at,
            archived_at=product.archived_at,
        )


class RootGraph(BaseModel):
    """A product root with its options, values and variants, in commit order."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    sku_prefix: str
    name: str
    subtitle: str
    description: str
    manufacturer: str
    brand: str
    taxable: bool
    cost: Decimal
    quantity_per_package: int
    available_at: datetime
    created_at: datetime
    updated_at: datetime
    archived_at: Optional[datetime] = None
    options: list[OptionOutputDTO]
    products: list[ProductOutputDTO]

    @classmethod
    def from_entities(
        cls,
        root: ProductRoot,
        options: Sequence[OptionOutputDTO],
        products: Sequence[ProductOutputDTO],
    ) -> RootGraph:
        return cls(
            id=root.id,
            sku_prefix=root.sku_prefix,
            name=root.name,
            subtitle=root.subtitle,
            description=root.description,
            manufacturer=root.manufacturer,
            brand=root.brand,
            taxable=root.taxable,
            cost=root.cost,
            quantity_per_package=root.quantity_per_package,
            available_at=root.available_at,
            created_at=root.created_at,
            updated_at=root.updated_at,
            archived_at=root.archived_at,
            options=list(options),
            products=list(products),
        )
