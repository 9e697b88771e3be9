"""Catalog store interface.

Capability set for the five catalog entities (root, option, option value,
variant, variant bridge).  Every method receives the caller's
``TransactionHandle``; the store never opens, commits or rolls back a
transaction.  Reads may run on a plain connection handle, writes need an
open one.

Look-ups follow the Null Object pattern: ``get_*`` returns ``None`` and
``archive_*`` returns ``None`` when there is nothing live to archive.  The
Service Layer decides how to report that.
"""

from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence
from uuid import UUID

from modules.core.repositories.interfaces import ITransactionalRepository

if TYPE_CHECKING:
    from modules.catalog.models import (
        Product,
        ProductOption,
        ProductOptionValue,
        ProductRoot,
        ProductVariantBridge,
    )
    from modules.catalog.variants import VariantSpec
    from modules.core.transactions import TransactionHandle


class ICatalogStore(ITransactionalRepository):
    """Repository contract for the catalog graph."""

    # ------------------------------------------------------------------
    # Product roots
    # ------------------------------------------------------------------

    @abstractmethod
    def product_root_exists(self, tx: TransactionHandle, id: UUID) -> bool:
        """Whether a live root with this id exists."""

    @abstractmethod
    def product_root_with_sku_prefix_exists(self, tx: TransactionHandle, sku_prefix: str) -> bool:
        """Whether any root (live or archived) holds this SKU prefix."""

    @abstractmethod
    def get_product_root(self, tx: TransactionHandle, id: UUID) -> Optional[ProductRoot]:
        """Retrieve a root by id, archived or not."""

    @abstractmethod
    def get_product_root_by_sku_prefix(
        self, tx: TransactionHandle, sku_prefix: str
    ) -> Optional[ProductRoot]:
        """Retrieve a root by SKU prefix."""

    @abstractmethod
    def get_product_root_for_update(
        self, tx: TransactionHandle, id: UUID
    ) -> Optional[ProductRoot]:
        """Retrieve a live root with a row-level lock (SELECT FOR UPDATE)."""

    @abstractmethod
    def list_product_roots(self, tx: TransactionHandle) -> List[ProductRoot]:
        """Live roots ordered by name."""

    @abstractmethod
    def create_product_root(self, tx: TransactionHandle, data: Dict[str, Any]) -> ProductRoot:
        """Insert a root; the result carries the generated id and ``created_at``."""

    @abstractmethod
    def update_product_root(self, tx: TransactionHandle, root: ProductRoot) -> datetime:
        """Persist changed root fields and return ``updated_at``."""

    @abstractmethod
    def archive_product_root(
        self, tx: TransactionHandle, id: UUID, at: Optional[datetime] = None
    ) -> Optional[datetime]:
        """Archive a live root (root row only) and return ``archived_at``."""

    # ------------------------------------------------------------------
    # Options
    # ------------------------------------------------------------------

    @abstractmethod
    def product_option_exists(self, tx: TransactionHandle, id: UUID) -> bool:
        """Whether a live option with this id exists."""

    @abstractmethod
    def product_option_with_name_exists(
        self, tx: TransactionHandle, root_id: UUID, name: str
    ) -> bool:
        """Whether the root already has an option (live or archived) with this name."""

    @abstractmethod
    def get_product_option(self, tx: TransactionHandle, id: UUID) -> Optional[ProductOption]:
        """Retrieve an option by id."""

    @abstractmethod
    def list_product_options(self, tx: TransactionHandle, root_id: UUID) -> List[ProductOption]:
        """Live options of a root, in input order."""

    @abstractmethod
    def create_product_option(
        self, tx: TransactionHandle, root_id: UUID, name: str, position: int = 0
    ) -> ProductOption:
        """Insert an option for a root."""

    @abstractmethod
    def update_product_option(self, tx: TransactionHandle, option: ProductOption) -> datetime:
        """Persist a renamed option and return ``updated_at``."""

    @abstractmethod
    def archive_product_option(
        self, tx: TransactionHandle, id: UUID, at: Optional[datetime] = None
    ) -> Optional[datetime]:
        """Archive a live option row and return ``archived_at``."""

    @abstractmethod
    def archive_product_options_for_root(
        self, tx: TransactionHandle, root_id: UUID, at: datetime
    ) -> int:
        """Archive every live option of a root; returns the row count."""

    # ------------------------------------------------------------------
    # Option values
    # ------------------------------------------------------------------

    @abstractmethod
    def product_option_value_exists(self, tx: TransactionHandle, id: UUID) -> bool:
        """Whether a live option value with this id exists."""

    @abstractmethod
    def product_option_value_exists_for_option(
        self, tx: TransactionHandle, option_id: UUID, value: str
    ) -> bool:
        """Whether the option already has this value (live or archived)."""

    @abstractmethod
    def get_product_option_value(
        self, tx: TransactionHandle, id: UUID
    ) -> Optional[ProductOptionValue]:
        """Retrieve an option value by id."""

    @abstractmethod
    def list_product_option_values(
        self, tx: TransactionHandle, option_id: UUID
    ) -> List[ProductOptionValue]:
        """Live values of an option, in input order."""

    @abstractmethod
    def create_product_option_value(
        self, tx: TransactionHandle, option_id: UUID, value: str, position: int = 0
    ) -> ProductOptionValue:
        """Insert a value for an option."""

    @abstractmethod
    def update_product_option_value(
        self, tx: TransactionHandle, option_value: ProductOptionValue
    ) -> datetime:
        """Persist a changed value and return ``updated_at``."""

    @abstractmethod
    def archive_product_option_value(
        self, tx: TransactionHandle, id: UUID, at: Optional[datetime] = None
    ) -> Optional[datetime]:
        """Archive a live option value and return ``archived_at``."""

    @abstractmethod
    def archive_product_option_values_for_option(
        self, tx: TransactionHandle, option_id: UUID, at: datetime
    ) -> int:
        """Archive every live value of an option; returns the row count."""

    @abstractmethod
    def archive_product_option_values_for_root(
        self, tx: TransactionHandle, root_id: UUID, at: datetime
    ) -> int:
        """Archive every live value of every option of a root."""

    # ------------------------------------------------------------------
    # Variants
    # ------------------------------------------------------------------

    @abstractmethod
    def product_exists(self, tx: TransactionHandle, id: UUID) -> bool:
        """Whether a live variant with this id exists."""

    @abstractmethod
    def product_with_sku_exists(self, tx: TransactionHandle, sku: str) -> bool:
        """Whether any variant (live or archived) holds this SKU."""

    @abstractmethod
    def get_product(self, tx: TransactionHandle, id: UUID) -> Optional[Product]:
        """Retrieve a variant by id."""

    @abstractmethod
    def get_product_by_sku(self, tx: TransactionHandle, sku: str) -> Optional[Product]:
        """Retrieve a variant by SKU."""

    @abstractmethod
    def list_products(self, tx: TransactionHandle, root_id: UUID) -> List[Product]:
        """Live variants of a root, in enumeration order."""

    @abstractmethod
    def create_product(self, tx: TransactionHandle, root_id: UUID, spec: VariantSpec) -> Product:
        """Insert one variant built from an immutable spec."""

    @abstractmethod
    def update_product(self, tx: TransactionHandle, product: Product) -> datetime:
        """Persist changed variant fields and return ``updated_at``."""

    @abstractmethod
    def archive_product(
        self, tx: TransactionHandle, id: UUID, at: Optional[datetime] = None
    ) -> Optional[datetime]:
        """Archive a live variant row and return ``archived_at``."""

    @abstractmethod
    def archive_products_for_root(self, tx: TransactionHandle, root_id: UUID, at: datetime) -> int:
        """Archive every live variant of a root."""

    # ------------------------------------------------------------------
    # Variant bridges
    # ------------------------------------------------------------------

    @abstractmethod
    def product_variant_bridge_exists(self, tx: TransactionHandle, id: UUID) -> bool:
        """Whether a live bridge with this id exists."""

    @abstractmethod
    def get_product_variant_bridge(
        self, tx: TransactionHandle, id: UUID
    ) -> Optional[ProductVariantBridge]:
        """Retrieve a bridge row by id."""

    @abstractmethod
    def list_product_variant_bridges(
        self, tx: TransactionHandle, product_ids: Sequence[UUID]
    ) -> List[ProductVariantBridge]:
        """Live bridges of the given variants, in variant then value order."""

    @abstractmethod
    def create_product_variant_bridge(
        self, tx: TransactionHandle, product_id: UUID, option_value_id: UUID, position: int = 0
    ) -> ProductVariantBridge:
        """Insert a single bridge row."""

    @abstractmethod
    def create_product_variant_bridges(
        self, tx: TransactionHandle, product_id: UUID, option_value_ids: Sequence[UUID]
    ) -> List[ProductVariantBridge]:
        """Insert one bridge per option value for a variant, in one statement."""

    @abstractmethod
    def update_product_variant_bridge(
        self, tx: TransactionHandle, bridge: ProductVariantBridge
    ) -> datetime:
        """Persist a changed bridge row and return ``updated_at``."""

    @abstractmethod
    def archive_product_variant_bridge(
        self, tx: TransactionHandle, id: UUID, at: Optional[datetime] = None
    ) -> Optional[datetime]:
        """Archive one live bridge row."""

    @abstractmethod
    def archive_product_variant_bridges_for_product(
        self, tx: TransactionHandle, product_id: UUID, at: datetime
    ) -> int:
        """Archive the live bridges of one variant."""

    @abstractmethod
    def archive_product_variant_bridges_for_option_value(
        self, tx: TransactionHandle, option_value_id: UUID, at: datetime
    ) -> int:
        """Archive the live bridges referencing one option value."""

    @abstractmethod
    def archive_product_variant_bridges_for_option(
        self, tx: TransactionHandle, option_id: UUID, at: datetime
    ) -> int:
        """Archive the live bridges referencing any value of an option."""

    @abstractmethod
    def archive_product_variant_bridges_for_root(
        self, tx: TransactionHandle, root_id: UUID, at: datetime
    ) -> int:
        """Archive the live bridges of every live variant of a root."""

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    @abstractmethod
    def record_event(self, tx: TransactionHandle, event: Any) -> None:
        """Persist a domain event in the outbox inside the caller's transaction."""
