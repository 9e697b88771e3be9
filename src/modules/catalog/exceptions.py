"""Catalog domain exceptions.

Raised by the Service Layer when business rules are violated or the
store fails.  Callers (HTTP layer, management commands) catch the four
category bases and translate them; the concrete subclasses carry the
entity that caused the failure.
"""

from __future__ import annotations


class CatalogError(Exception):
    """Base class for every catalog failure."""


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class CatalogValidationError(CatalogError):
    """Malformed payload: bad SKU characters, empty option, too many variants."""


# ---------------------------------------------------------------------------
# Conflicts
# ---------------------------------------------------------------------------


class CatalogConflict(CatalogError):
    """A unique key is already taken (pre-check or database constraint)."""


class ProductRootAlreadyExists(CatalogConflict):
    """A product root with the same SKU prefix already exists (RN-CAT-001)."""


class ProductOptionAlreadyExists(CatalogConflict):
    """The root already has an option with this name (RN-CAT-002)."""


class ProductOptionValueAlreadyExists(CatalogConflict):
    """The option already has this value (RN-CAT-002)."""


class ProductAlreadyExists(CatalogConflict):
    """A variant with the same SKU already exists (RN-CAT-003)."""


# ---------------------------------------------------------------------------
# Not found
# ---------------------------------------------------------------------------


class CatalogNotFound(CatalogError):
    """The target does not exist or has already been archived."""


class ProductRootNotFound(CatalogNotFound):
    pass


class ProductNotFound(CatalogNotFound):
    pass


class ProductOptionNotFound(CatalogNotFound):
    pass


class ProductOptionValueNotFound(CatalogNotFound):
    pass


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------


class CatalogStorageError(CatalogError):
    """Any other store failure; the original error is chained as ``__cause__``."""
