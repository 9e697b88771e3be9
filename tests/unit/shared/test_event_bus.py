"""Unit tests for domain events and the in-memory event bus."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from modules.catalog.events import CatalogArchived, CatalogCommitted, ProductUpdated
from modules.catalog.handlers import catalog_committed_handler
from shared.domain.events import DomainEvent
from shared.infrastructure.bus import InMemoryEventBus, event_bus

pytestmark = pytest.mark.unit


def test_event_name_is_class_name():
    event = CatalogCommitted(aggregate_id=uuid4(), sku_prefix="shirt")
    assert event.event_name == "CatalogCommitted"
    assert event.notification == "product_created"


def test_events_are_registered_by_name():
    assert DomainEvent.registered("CatalogArchived") is CatalogArchived
    assert DomainEvent.registered("Nope") is None


def test_from_payload_restores_types():
    occurred = datetime(2025, 5, 1, tzinfo=timezone.utc)
    aggregate_id = uuid4()

    event = ProductUpdated.from_payload(
        {
            "aggregate_id": str(aggregate_id),
            "event_id": str(uuid4()),
            "occurred_on": occurred.isoformat(),
            "event_name": "ProductUpdated",
            "notification": "product_updated",
            "sku": "shirt_small_red",
            "changed_fields": ["price"],
        }
    )

    assert event.aggregate_id == aggregate_id
    assert event.occurred_on == occurred
    assert event.changed_fields == ("price",)


def test_bus_dispatches_by_exact_type():
    bus = InMemoryEventBus()
    committed = MagicMock()
    archived = MagicMock()
    bus.subscribe(CatalogCommitted, committed)
    bus.subscribe(CatalogArchived, archived)

    event = CatalogCommitted(aggregate_id=uuid4())
    bus.publish(event)

    committed.handle.assert_called_once_with(event)
    archived.handle.assert_not_called()


def test_subscribe_is_idempotent():
    bus = InMemoryEventBus()
    handler = MagicMock()
    bus.subscribe(CatalogCommitted, handler)
    bus.subscribe(CatalogCommitted, handler)

    bus.publish(CatalogCommitted(aggregate_id=uuid4()))

    handler.handle.assert_called_once()


def test_app_ready_subscribes_catalog_handlers():
    assert catalog_committed_handler in event_bus.handlers_for(CatalogCommitted)
