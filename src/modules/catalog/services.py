"""Catalog service layer (Use Cases).

Orchestrates catalog creation, archival, updates and reads on top of an
``ICatalogStore``.  Every write operation opens exactly one unit of work
with ``modules.core.transactions.begin`` and passes its handle to each store
call, so a failure anywhere rolls back every row written by the call.

Business rules enforced:
- RN-CAT-001: SKU prefixes are unique across roots (live or archived).
- RN-CAT-002: Option names unique per root; values unique per option.
- RN-CAT-003: A root with n options yields the full cross product of its
  values as variants; with no options it yields a single base variant.
- RN-CAT-004: Archival cascades root -> options -> values -> variants ->
  bridges with one timestamp and never re-stamps an archived row.

Pre-checks give callers a precise error, but the database unique
constraints are authoritative: a unique ``IntegrityError`` raised at write
or commit time is reported as a ``CatalogConflict``.
"""

from __future__ import annotations

from collections import defaultdict
from contextlib import contextmanager
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Mapping, Sequence, Tuple, Union
from uuid import UUID

import structlog
from django.conf import settings
from django.db import DEFAULT_DB_ALIAS, DatabaseError, IntegrityError
from django.utils import timezone

from modules.catalog.dtos import (
    CreateCatalogDTO,
    CreateOptionDTO,
    OptionOutputDTO,
    OptionValueDTO,
    OptionValueOutputDTO,
    ProductOutputDTO,
    RootGraph,
    UpdateOptionDTO,
    UpdateProductDTO,
    validate_payload,
)
from modules.catalog.events import (
    CatalogArchived,
    CatalogCommitted,
    ProductArchived,
    ProductUpdated,
)
from modules.catalog.exceptions import (
    CatalogConflict,
    CatalogStorageError,
    CatalogValidationError,
    ProductAlreadyExists,
    ProductNotFound,
    ProductOptionAlreadyExists,
    ProductOptionNotFound,
    ProductOptionValueAlreadyExists,
    ProductOptionValueNotFound,
    ProductRootAlreadyExists,
    ProductRootNotFound,
)
from modules.catalog.variants import (
    OptionAxis,
    OptionValueRef,
    count_combinations,
    variant_specs,
)
from modules.core.transactions import TransactionHandle, begin, connection

if TYPE_CHECKING:
    from modules.catalog.models import (
        Product,
        ProductOption,
        ProductOptionValue,
        ProductRoot,
    )
    from modules.catalog.repositories.interfaces import ICatalogStore

logger = structlog.get_logger(__name__)

_UNIQUE_VIOLATION_SQLSTATE = "23505"
_MYSQL_DUPLICATE_ENTRY = 1062

# Variant columns that accept NULL; every other field needs a value.
_NULLABLE_PRODUCT_FIELDS = frozenset(
    {
        "upc",
        "product_weight",
        "product_height",
        "product_width",
        "product_length",
        "package_weight",
        "package_height",
        "package_width",
        "package_length",
    }
)


def _is_unique_violation(exc: IntegrityError) -> bool:
    """Whether ``exc`` reports a unique constraint (not FK/check/NOT NULL)."""
    cause = exc.__cause__
    sqlstate = getattr(cause, "pgcode", None) or getattr(cause, "sqlstate", None)
    if sqlstate is not None:
        return sqlstate == _UNIQUE_VIOLATION_SQLSTATE
    args = getattr(cause, "args", ())
    if args and args[0] == _MYSQL_DUPLICATE_ENTRY:
        return True
    message = str(exc).lower()
    return "unique" in message or "duplicate" in message


@contextmanager
def _storage_errors(log) -> Iterator[None]:
    """Translate database failures escaping a store call.

    Wraps fast-path reads and whole ``begin()`` blocks; in the latter case
    the transaction is already rolled back when the translated exception is
    raised.
    """
    try:
        yield
    except IntegrityError as exc:
        if _is_unique_violation(exc):
            log.warning("catalog.conflict", error=str(exc))
            raise CatalogConflict(str(exc)) from exc
        log.error("catalog.storage_error", error=str(exc))
        raise CatalogStorageError(str(exc)) from exc
    except DatabaseError as exc:
        log.error("catalog.storage_error", error=str(exc))
        raise CatalogStorageError(str(exc)) from exc


class _CatalogService:
    """Shared wiring: the store plus the database alias units of work use."""

    def __init__(self, store: ICatalogStore, using: str = DEFAULT_DB_ALIAS) -> None:
        self._store = store
        self._using = using

    def _reader(self) -> TransactionHandle:
        return connection(self._using)

    def _build_graph(
        self,
        root: ProductRoot,
        options: Sequence[Tuple[ProductOption, Sequence[ProductOptionValue]]],
        products: Sequence[Tuple[Product, Sequence[UUID]]],
    ) -> RootGraph:
        return RootGraph.from_entities(
            root,
            [OptionOutputDTO.from_entity(option, values) for option, values in options],
            [ProductOutputDTO.from_entity(product, ids) for product, ids in products],
        )

    def _create_option(
        self,
        tx: TransactionHandle,
        root: ProductRoot,
        option_dto: CreateOptionDTO,
        position: int,
        log,
    ) -> Tuple[ProductOption, List[ProductOptionValue]]:
        """Pre-check the name on ``root``, then create the option and its values."""
        if self._store.product_option_with_name_exists(tx, root.id, option_dto.name):
            log.warning("catalog.conflict", reason="option_name_taken", option=option_dto.name)
            raise ProductOptionAlreadyExists(
                f"Option {option_dto.name} already exists on {root.sku_prefix}."
            )
        option = self._store.create_product_option(tx, root.id, option_dto.name, position)
        values = [
            self._create_option_value(tx, option, value, value_position, log)
            for value_position, value in enumerate(option_dto.values)
        ]
        return option, values

    def _create_option_value(
        self,
        tx: TransactionHandle,
        option: ProductOption,
        value: str,
        position: int,
        log,
    ) -> ProductOptionValue:
        if self._store.product_option_value_exists_for_option(tx, option.id, value):
            log.warning(
                "catalog.conflict",
                reason="option_value_taken",
                option=option.name,
                value=value,
            )
            raise ProductOptionValueAlreadyExists(
                f"Option {option.name} already has the value {value}."
            )
        return self._store.create_product_option_value(tx, option.id, value, position)


class CatalogCommitService(_CatalogService):
    """Creates a product root and its whole variant graph atomically."""

    def commit_catalog(
        self, payload: Union[CreateCatalogDTO, Mapping[str, Any]]
    ) -> RootGraph:
        """Persist root, options, values, variants and bridges in one unit of work.

        Steps:
        1. Validate the payload and the variant bound.
        2. Pre-check the SKU prefix (fast path, outside the transaction).
        3. Open the transaction and create the root.
        4. Create options and their values in input order.
        5. Create one variant per combination (or the base variant) and
           its bridge rows.
        6. Record ``CatalogCommitted`` in the outbox and commit.

        Raises:
            CatalogValidationError: malformed payload or too many variants.
            CatalogConflict: a unique key is already taken.
            CatalogStorageError: any other database failure.
        """
        if isinstance(payload, CreateCatalogDTO):
            dto = payload
        else:
            dto = validate_payload(CreateCatalogDTO, payload)

        log = logger.bind(sku_prefix=dto.sku_prefix)
        variant_count = count_combinations(dto.value_counts)
        self._check_variant_bound(variant_count, log)

        with _storage_errors(log):
            prefix_taken = self._store.product_root_with_sku_prefix_exists(
                self._reader(), dto.sku_prefix
            )
        if prefix_taken:
            log.warning("catalog.conflict", reason="sku_prefix_taken")
            raise ProductRootAlreadyExists(
                f"A product root with sku prefix {dto.sku_prefix} already exists."
            )

        log.info(
            "catalog.commit_started",
            options=len(dto.options),
            variants=variant_count,
        )

        with _storage_errors(log):
            with begin(self._using) as tx:
                root = self._store.create_product_root(tx, dto.root_fields())
                log = log.bind(root_id=str(root.id))
                options, axes = self._create_options(tx, root, dto.options, log)
                products = self._create_variants(tx, root, dto, axes, log)
                self._store.record_event(
                    tx,
                    CatalogCommitted(
                        aggregate_id=root.id,
                        sku_prefix=root.sku_prefix,
                        skus=tuple(product.sku for product, _ in products),
                    ),
                )

        log.info(
            "catalog.committed",
            variants=len(products),
            bridges=sum(len(ids) for _, ids in products),
        )
        return self._build_graph(root, options, products)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    @staticmethod
    def _check_variant_bound(variant_count: int, log) -> None:
        limit = getattr(settings, "CATALOG_MAX_VARIANTS", 0)
        if limit and variant_count > limit:
            log.warning(
                "catalog.too_many_variants",
                variants=variant_count,
                limit=limit,
            )
            raise CatalogValidationError(
                f"The options produce {variant_count} variants; at most {limit} are allowed."
            )

    def _create_options(
        self,
        tx: TransactionHandle,
        root: ProductRoot,
        option_dtos: Sequence[CreateOptionDTO],
        log,
    ) -> Tuple[List[Tuple[ProductOption, List[ProductOptionValue]]], List[OptionAxis]]:
        created: List[Tuple[ProductOption, List[ProductOptionValue]]] = []
        axes: List[OptionAxis] = []

        for position, option_dto in enumerate(option_dtos):
            option, values = self._create_option(tx, root, option_dto, position, log)
            created.append((option, values))
            axes.append(
                OptionAxis(
                    name=option.name,
                    values=tuple(
                        OptionValueRef(
                            option_name=option.name,
                            value=v.value,
                            id=v.id,
                            source=v,
                        )
                        for v in values
                    ),
                )
            )

        return created, axes

    def _create_variants(
        self,
        tx: TransactionHandle,
        root: ProductRoot,
        dto: CreateCatalogDTO,
        axes: Sequence[OptionAxis],
        log,
    ) -> List[Tuple[Product, Tuple[UUID, ...]]]:
        created: List[Tuple[Product, Tuple[UUID, ...]]] = []

        for spec in variant_specs(root.sku_prefix, dto.variant_fields(), axes):
            if self._store.product_with_sku_exists(tx, spec.sku):
                log.warning("catalog.conflict", reason="sku_taken", sku=spec.sku)
                raise ProductAlreadyExists(f"A product with sku {spec.sku} already exists.")
            product = self._store.create_product(tx, root.id, spec)
            self._store.create_product_variant_bridges(
                tx, product.id, spec.option_value_ids
            )
            created.append((product, spec.option_value_ids))

        return created


class CatalogArchiveService(_CatalogService):
    """Soft-deletes catalog structures consistently.

    Each operation stamps every affected live row with a single timestamp,
    children before parents, and never touches rows that are already
    archived.
    """

    def archive_root(self, root_id: UUID) -> datetime:
        """Archive a root with its options, values, variants and bridges.

        Order: bridges of live variants -> variants -> values -> options ->
        root.  The root row is locked first so concurrent archives serialise.

        Raises:
            ProductRootNotFound: root does not exist or is already archived.
            CatalogStorageError: a database failure; nothing was archived.
        """
        log = logger.bind(root_id=str(root_id))

        with _storage_errors(log):
            exists = self._store.product_root_exists(self._reader(), root_id)
        if not exists:
            log.warning("catalog.root_not_found")
            raise ProductRootNotFound(f"Product root {root_id} not found.")

        with _storage_errors(log):
            with begin(self._using) as tx:
                root = self._store.get_product_root_for_update(tx, root_id)
                if root is None:
                    log.warning("catalog.root_not_found", reason="archived_concurrently")
                    raise ProductRootNotFound(f"Product root {root_id} not found.")

                at = timezone.now()
                bridges = self._store.archive_product_variant_bridges_for_root(tx, root.id, at)
                variants = self._store.archive_products_for_root(tx, root.id, at)
                values = self._store.archive_product_option_values_for_root(tx, root.id, at)
                options = self._store.archive_product_options_for_root(tx, root.id, at)
                archived_at = self._store.archive_product_root(tx, root.id, at)
                if archived_at is None:
                    raise ProductRootNotFound(f"Product root {root_id} not found.")

                self._store.record_event(
                    tx,
                    CatalogArchived(
                        aggregate_id=root.id,
                        sku_prefix=root.sku_prefix,
                        occurred_on=archived_at,
                    ),
                )

        log.info(
            "catalog.archived",
            bridges=bridges,
            variants=variants,
            values=values,
            options=options,
        )
        return archived_at

    def archive_variant(self, product_id: UUID) -> datetime:
        """Archive one variant and its bridge rows.

        Raises:
            ProductNotFound: variant does not exist or is already archived.
            CatalogStorageError: a database failure; nothing was archived.
        """
        log = logger.bind(product_id=str(product_id))

        with _storage_errors(log):
            exists = self._store.product_exists(self._reader(), product_id)
        if not exists:
            log.warning("catalog.product_not_found")
            raise ProductNotFound(f"Product {product_id} not found.")

        with _storage_errors(log):
            with begin(self._using) as tx:
                product = self._store.get_product(tx, product_id)
                at = timezone.now()
                bridges = self._store.archive_product_variant_bridges_for_product(
                    tx, product_id, at
                )
                archived_at = self._store.archive_product(tx, product_id, at)
                if product is None or archived_at is None:
                    log.warning("catalog.product_not_found", reason="archived_concurrently")
                    raise ProductNotFound(f"Product {product_id} not found.")

                self._store.record_event(
                    tx,
                    ProductArchived(
                        aggregate_id=product.id,
                        sku=product.sku,
                        occurred_on=archived_at,
                    ),
                )

        log.info("catalog.variant_archived", sku=product.sku, bridges=bridges)
        return archived_at

    def archive_option(self, option_id: UUID) -> datetime:
        """Archive an option, its values and the bridges that reference them.

        Variants keep their SKU and summary; only the links go away.

        Raises:
            ProductOptionNotFound: option does not exist or is already archived.
        """
        log = logger.bind(option_id=str(option_id))

        with _storage_errors(log):
            exists = self._store.product_option_exists(self._reader(), option_id)
        if not exists:
            log.warning("catalog.option_not_found")
            raise ProductOptionNotFound(f"Option {option_id} not found.")

        with _storage_errors(log):
            with begin(self._using) as tx:
                at = timezone.now()
                bridges = self._store.archive_product_variant_bridges_for_option(
                    tx, option_id, at
                )
                values = self._store.archive_product_option_values_for_option(
                    tx, option_id, at
                )
                archived_at = self._store.archive_product_option(tx, option_id, at)
                if archived_at is None:
                    log.warning("catalog.option_not_found", reason="archived_concurrently")
                    raise ProductOptionNotFound(f"Option {option_id} not found.")

        log.info("catalog.option_archived", bridges=bridges, values=values)
        return archived_at

    def archive_option_value(self, value_id: UUID) -> datetime:
        """Archive an option value and the bridges that reference it.

        Raises:
            ProductOptionValueNotFound: value does not exist or is already archived.
        """
        log = logger.bind(option_value_id=str(value_id))

        with _storage_errors(log):
            exists = self._store.product_option_value_exists(self._reader(), value_id)
        if not exists:
            log.warning("catalog.option_value_not_found")
            raise ProductOptionValueNotFound(f"Option value {value_id} not found.")

        with _storage_errors(log):
            with begin(self._using) as tx:
                at = timezone.now()
                bridges = self._store.archive_product_variant_bridges_for_option_value(
                    tx, value_id, at
                )
                archived_at = self._store.archive_product_option_value(tx, value_id, at)
                if archived_at is None:
                    log.warning(
                        "catalog.option_value_not_found", reason="archived_concurrently"
                    )
                    raise ProductOptionValueNotFound(f"Option value {value_id} not found.")

        log.info("catalog.option_value_archived", bridges=bridges)
        return archived_at


class CatalogUpdateService(_CatalogService):
    """Partial updates and additions that never touch variant identity."""

    def update_product(
        self, sku: str, payload: Union[UpdateProductDTO, Mapping[str, Any]]
    ) -> datetime:
        """Apply the supplied fields to the live variant with ``sku``.

        Raises:
            CatalogValidationError: the payload changes the SKU, nulls a
                required field or breaks the on_sale/sale_price pairing.
            ProductNotFound: no live variant has this SKU.
        """
        if isinstance(payload, UpdateProductDTO):
            dto = payload
        else:
            dto = validate_payload(UpdateProductDTO, payload)

        log = logger.bind(sku=sku)

        if dto.sku is not None and dto.sku != sku:
            log.warning("catalog.sku_change_rejected", requested=dto.sku)
            raise CatalogValidationError(f"The sku of {sku} cannot be changed.")

        changes = dto.changes()
        for field_name, value in changes.items():
            if value is None and field_name not in _NULLABLE_PRODUCT_FIELDS:
                raise CatalogValidationError(f"{field_name} cannot be null.")

        with _storage_errors(log):
            with begin(self._using) as tx:
                product = self._store.get_product_by_sku(tx, sku)
                if product is None or product.is_archived:
                    log.warning("catalog.product_not_found")
                    raise ProductNotFound(f"Product {sku} not found.")

                if not changes:
                    return product.updated_at

                for field_name, value in changes.items():
                    setattr(product, field_name, value)
                self._check_sale_price(product, log)

                updated_at = self._store.update_product(tx, product)
                self._store.record_event(
                    tx,
                    ProductUpdated(
                        aggregate_id=product.id,
                        sku=product.sku,
                        changed_fields=tuple(changes),
                    ),
                )

        log.info("catalog.product_updated", changed_fields=list(changes))
        return updated_at

    def update_option(self, option_id: UUID, name: str) -> datetime:
        """Rename an option.  Existing variant SKUs and summaries are kept.

        Raises:
            ProductOptionNotFound: option does not exist or is archived.
            ProductOptionAlreadyExists: the root already has that name.
        """
        dto = validate_payload(UpdateOptionDTO, {"name": name})
        log = logger.bind(option_id=str(option_id))

        with _storage_errors(log):
            with begin(self._using) as tx:
                option = self._store.get_product_option(tx, option_id)
                if option is None or option.is_archived:
                    log.warning("catalog.option_not_found")
                    raise ProductOptionNotFound(f"Option {option_id} not found.")
                if option.name == dto.name:
                    return option.updated_at
                if self._store.product_option_with_name_exists(tx, option.root_id, dto.name):
                    log.warning("catalog.conflict", reason="option_name_taken", option=dto.name)
                    raise ProductOptionAlreadyExists(
                        f"Option {dto.name} already exists on this root."
                    )
                option.name = dto.name
                updated_at = self._store.update_product_option(tx, option)

        log.info("catalog.option_updated", name=dto.name)
        return updated_at

    def update_option_value(self, value_id: UUID, value: str) -> datetime:
        """Change an option value.  Existing variant SKUs and summaries are kept.

        Raises:
            ProductOptionValueNotFound: value does not exist or is archived.
            ProductOptionValueAlreadyExists: the option already has that value.
        """
        dto = validate_payload(OptionValueDTO, {"value": value})
        log = logger.bind(option_value_id=str(value_id))

        with _storage_errors(log):
            with begin(self._using) as tx:
                option_value = self._store.get_product_option_value(tx, value_id)
                if option_value is None or option_value.is_archived:
                    log.warning("catalog.option_value_not_found")
                    raise ProductOptionValueNotFound(f"Option value {value_id} not found.")
                if option_value.value == dto.value:
                    return option_value.updated_at
                if self._store.product_option_value_exists_for_option(
                    tx, option_value.option_id, dto.value
                ):
                    log.warning("catalog.conflict", reason="option_value_taken", value=dto.value)
                    raise ProductOptionValueAlreadyExists(
                        f"The option already has the value {dto.value}."
                    )
                option_value.value = dto.value
                updated_at = self._store.update_product_option_value(tx, option_value)

        log.info("catalog.option_value_updated", value=dto.value)
        return updated_at

    def add_option(
        self, root_id: UUID, payload: Union[CreateOptionDTO, Mapping[str, Any]]
    ) -> OptionOutputDTO:
        """Add an option with its values to a live root.

        No variants are generated: existing variants keep their SKUs and
        new combinations are not expanded retroactively.

        Raises:
            CatalogValidationError: malformed option payload.
            ProductRootNotFound: root does not exist or is archived.
            ProductOptionAlreadyExists: the root already has that name.
            ProductOptionValueAlreadyExists: a value is repeated.
        """
        if isinstance(payload, CreateOptionDTO):
            dto = payload
        else:
            dto = validate_payload(CreateOptionDTO, payload)

        log = logger.bind(root_id=str(root_id), option=dto.name)

        with _storage_errors(log):
            exists = self._store.product_root_exists(self._reader(), root_id)
        if not exists:
            log.warning("catalog.root_not_found")
            raise ProductRootNotFound(f"Product root {root_id} not found.")

        with _storage_errors(log):
            with begin(self._using) as tx:
                root = self._store.get_product_root_for_update(tx, root_id)
                if root is None:
                    log.warning("catalog.root_not_found", reason="archived_concurrently")
                    raise ProductRootNotFound(f"Product root {root_id} not found.")
                position = len(self._store.list_product_options(tx, root.id))
                option, values = self._create_option(tx, root, dto, position, log)

        log.info("catalog.option_added", values=len(values))
        return OptionOutputDTO.from_entity(option, values)

    def add_option_value(self, option_id: UUID, value: str) -> OptionValueOutputDTO:
        """Add a value to a live option.  No variants are generated.

        Raises:
            CatalogValidationError: empty value.
            ProductOptionNotFound: option does not exist or is archived.
            ProductOptionValueAlreadyExists: the option already has that value.
        """
        dto = validate_payload(OptionValueDTO, {"value": value})
        log = logger.bind(option_id=str(option_id))

        with _storage_errors(log):
            exists = self._store.product_option_exists(self._reader(), option_id)
        if not exists:
            log.warning("catalog.option_not_found")
            raise ProductOptionNotFound(f"Option {option_id} not found.")

        with _storage_errors(log):
            with begin(self._using) as tx:
                option = self._store.get_product_option(tx, option_id)
                if option is None or option.is_archived:
                    log.warning("catalog.option_not_found", reason="archived_concurrently")
                    raise ProductOptionNotFound(f"Option {option_id} not found.")
                position = len(self._store.list_product_option_values(tx, option.id))
                option_value = self._create_option_value(tx, option, dto.value, position, log)

        log.info("catalog.option_value_added", value=dto.value)
        return OptionValueOutputDTO.from_entity(option_value)

    @staticmethod
    def _check_sale_price(product: Product, log) -> None:
        if product.on_sale and product.sale_price == 0:
            log.warning("catalog.invalid_sale_price", on_sale=True)
            raise CatalogValidationError("sale_price is required when on_sale is set.")
        if not product.on_sale and product.sale_price != 0:
            log.warning("catalog.invalid_sale_price", on_sale=False)
            raise CatalogValidationError("sale_price must be zero when on_sale is not set.")


class CatalogQueryService(_CatalogService):
    """Read side: root graphs and SKU look-ups."""

    def get_root_graph(self, root_id: UUID) -> RootGraph:
        """Live options, values and variants of a root, in commit order.

        Raises:
            ProductRootNotFound: root does not exist or is archived.
            CatalogStorageError: the read failed.
        """
        log = logger.bind(root_id=str(root_id))

        with _storage_errors(log):
            tx = self._reader()
            root = self._store.get_product_root(tx, root_id)
            if root is None or root.is_archived:
                raise ProductRootNotFound(f"Product root {root_id} not found.")

            options = [
                (option, self._store.list_product_option_values(tx, option.id))
                for option in self._store.list_product_options(tx, root.id)
            ]
            products = self._store.list_products(tx, root.id)
            bridges = self._store.list_product_variant_bridges(
                tx, [product.id for product in products]
            )

        applicable: Dict[UUID, List[UUID]] = defaultdict(list)
        for bridge in bridges:
            applicable[bridge.product_id].append(bridge.option_value_id)

        return self._build_graph(
            root,
            options,
            [(product, applicable[product.id]) for product in products],
        )

    def get_product_by_sku(self, sku: str) -> ProductOutputDTO:
        """The live variant with ``sku``.

        Raises:
            ProductNotFound: no live variant has this SKU.
            CatalogStorageError: the read failed.
        """
        with _storage_errors(logger.bind(sku=sku)):
            tx = self._reader()
            product = self._store.get_product_by_sku(tx, sku)
            if product is None or product.is_archived:
                raise ProductNotFound(f"Product {sku} not found.")
            bridges = self._store.list_product_variant_bridges(tx, [product.id])
        return ProductOutputDTO.from_entity(
            product, [bridge.option_value_id for bridge in bridges]
        )

    def product_exists(self, sku: str) -> bool:
        """Whether ``sku`` is taken, including by an archived variant."""
        with _storage_errors(logger.bind(sku=sku)):
            return self._store.product_with_sku_exists(self._reader(), sku)

    def list_roots(self) -> List[ProductRoot]:
        """Live roots ordered by name."""
        with _storage_errors(logger):
            return self._store.list_product_roots(self._reader())
