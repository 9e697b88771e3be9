"""Variant expansion: combination enumeration and naming.

Pure functions, no I/O.  Given options with their persisted values,
``enumerate_combinations`` yields every one-value-per-option selection in
odometer order (the last option cycles fastest) and ``derive_naming``
turns a selection into the SKU suffix and display summary stored on the
variant.

Example::

    Size = [Small, Large], Color = [Red, Blue]

    Small/Red, Small/Blue, Large/Red, Large/Blue
    -> "small_red", "Size: Small, Color: Red"
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from itertools import product as cartesian_product
from math import prod
from typing import Any, Iterable, Optional, Sequence, Tuple
from uuid import UUID

SKU_SEPARATOR = "_"
SUMMARY_SEPARATOR = ", "


@dataclass(frozen=True)
class OptionValueRef:
    """One persisted option value together with its option's name."""

    option_name: str
    value: str
    id: Optional[UUID] = None
    source: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class OptionAxis:
    """An option and its values, in input order."""

    name: str
    values: Tuple[OptionValueRef, ...]


@dataclass(frozen=True)
class Combination:
    """One selected value per option, in option order."""

    values: Tuple[OptionValueRef, ...]

    @property
    def value_ids(self) -> list[Optional[UUID]]:
        return [v.id for v in self.values]

    @property
    def pairs(self) -> list[tuple[str, str]]:
        return [(v.option_name, v.value) for v in self.values]


@dataclass(frozen=True)
class VariantNaming:
    sku_suffix: str
    summary: str


def count_combinations(value_counts: Iterable[int]) -> int:
    """Number of variants produced by options with the given value counts.

    No options yields the single base variant.
    """
    counts = list(value_counts)
    if not counts:
        return 1
    return prod(counts)


def enumerate_combinations(options: Sequence[OptionAxis]) -> list[Combination]:
    """All one-value-per-option selections, last option cycling fastest.

    An empty option list gives an empty result; the caller decides what a
    root without options turns into.

    Raises:
        ValueError: an option has no values.
    """
    if not options:
        return []
    for option in options:
        if not option.values:
            raise ValueError(f"Option '{option.name}' has no values.")
    return [
        Combination(values=tuple(selection))
        for selection in cartesian_product(*(option.values for option in options))
    ]


def derive_naming(pairs: Sequence[tuple[str, str]]) -> VariantNaming:
    """SKU suffix and summary for one combination of (option, value) pairs."""
    return VariantNaming(
        sku_suffix=SKU_SEPARATOR.join(value.lower() for _, value in pairs),
        summary=SUMMARY_SEPARATOR.join(f"{name}: {value}" for name, value in pairs),
    )


def build_variant_sku(sku_prefix: str, sku_suffix: str) -> str:
    if not sku_suffix:
        return sku_prefix
    return f"{sku_prefix}{SKU_SEPARATOR}{sku_suffix}"


# ---------------------------------------------------------------------------
# Variant specs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VariantFields:
    """Per-variant fields shared by every combination of one commit."""

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


@dataclass(frozen=True)
class VariantSpec:
    """Everything needed to insert one variant row and its bridges."""

    sku: str
    option_summary: str
    position: int
    fields: VariantFields
    option_value_ids: Tuple[UUID, ...] = ()

    def as_row(self) -> dict[str, Any]:
        row = asdict(self.fields)
        if row["available_at"] is None:
            del row["available_at"]
        row.update(
            sku=self.sku,
            option_summary=self.option_summary,
            position=self.position,
        )
        return row


def base_variant_spec(sku_prefix: str, fields: VariantFields) -> VariantSpec:
    """The single variant of a root without options."""
    return VariantSpec(sku=sku_prefix, option_summary="", position=0, fields=fields)


def variant_specs(
    sku_prefix: str,
    fields: VariantFields,
    options: Sequence[OptionAxis],
) -> list[VariantSpec]:
    """One spec per combination, in enumeration order.

    With no options, returns the base variant only.  A UPC identifies a
    single item, so only the base variant inherits one.
    """
    if not options:
        return [base_variant_spec(sku_prefix, fields)]

    per_combination = replace(fields, upc=None)
    specs = []
    for position, combination in enumerate(enumerate_combinations(options)):
        naming = derive_naming(combination.pairs)
        specs.append(
            VariantSpec(
                sku=build_variant_sku(sku_prefix, naming.sku_suffix),
                option_summary=naming.summary,
                position=position,
                fields=per_combination,
                option_value_ids=tuple(combination.value_ids),
            )
        )
    return specs
