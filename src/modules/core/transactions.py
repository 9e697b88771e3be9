"""Explicit transactional handle for multi-entity units of work.

Services open a unit of work with ``begin()`` and pass the yielded
``TransactionHandle`` to every repository call.  Repositories never open,
commit or roll back transactions themselves: they only run queries against
``handle.using`` and refuse to write when no atomic block is active.
``connection()`` returns a handle for fast-path reads made before a unit of
work is opened.

Commit happens when the ``with`` block exits normally; any exception
(including ``KeyboardInterrupt`` or a request timeout unwinding the stack)
rolls the whole block back.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

import structlog
from django.db import DEFAULT_DB_ALIAS, transaction

logger = structlog.get_logger(__name__)


class TransactionNotActive(RuntimeError):
    """A repository call was made outside of an open transaction."""


@dataclass(frozen=True)
class TransactionHandle:
    """Reference to an open atomic block on a database alias."""

    using: str = DEFAULT_DB_ALIAS

    @property
    def is_active(self) -> bool:
        return transaction.get_connection(self.using).in_atomic_block

    def ensure_active(self) -> None:
        if not self.is_active:
            raise TransactionNotActive(
                f"No open transaction on database '{self.using}'."
            )


def connection(using: str = DEFAULT_DB_ALIAS) -> TransactionHandle:
    """Handle for reads outside a unit of work (autocommit connection)."""
    return TransactionHandle(using=using)


@contextmanager
def begin(using: str = DEFAULT_DB_ALIAS) -> Iterator[TransactionHandle]:
    """Open a transaction and yield its handle.

    Nested calls become savepoints, so a failure inside a nested unit of
    work rolls back only that unit.
    """
    with transaction.atomic(using=using):
        handle = TransactionHandle(using=using)
        logger.debug("transaction.opened", using=using)
        yield handle
