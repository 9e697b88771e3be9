"""Generic repository interface (Dependency Inversion Principle).

Provides ``ITransactionalRepository``, the base abstract class that
domain-specific store interfaces extend.  Service-layer code depends on
this abstraction, never on Django ORM directly, and owns the transaction
boundary: every method receives the caller's ``TransactionHandle``.

Reads accept any handle (an open transaction or a plain connection handle
from ``modules.core.transactions.connection``); writes require an open one.
"""

from __future__ import annotations

from abc import ABC
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from modules.core.transactions import TransactionHandle


class ITransactionalRepository(ABC):
    """Base repository contract."""

    @staticmethod
    def _reading(tx: TransactionHandle) -> str:
        """Return the database alias a read should run against."""
        return tx.using

    @staticmethod
    def _writing(tx: TransactionHandle) -> str:
        """Validate that ``tx`` is open and return its database alias."""
        tx.ensure_active()
        return tx.using
