"""Async tasks for the core module."""

from typing import Optional

import structlog
from celery import shared_task
from django.conf import settings

from modules.core.models import OutboxEvent
from shared.domain.events import DomainEvent
from shared.infrastructure.bus import event_bus

logger = structlog.get_logger(__name__)


@shared_task(name="core.relay_outbox_events")
def relay_outbox_events(batch_size: Optional[int] = None):
    """Publish pending outbox events to the in-process event bus.

    Events are read oldest first.  A handler failure marks that row
    ``FAILED`` (with the error and a bumped ``retry_count``) and the relay
    moves on to the next one; failed rows are picked up again on later runs
    until they have been tried ``CATALOG_OUTBOX_MAX_RETRIES`` times.
    """
    limit = batch_size or settings.CATALOG_OUTBOX_BATCH_SIZE
    max_retries = settings.CATALOG_OUTBOX_MAX_RETRIES
    pending = list(OutboxEvent.objects.relayable(max_retries)[:limit])

    published = 0
    failed = 0
    for outbox_event in pending:
        log = logger.bind(
            outbox_event_id=str(outbox_event.id),
            event_type=outbox_event.event_type,
            aggregate_id=outbox_event.aggregate_id,
        )
        event_class = DomainEvent.registered(outbox_event.event_type)
        if event_class is None:
            log.error("outbox.unknown_event_type")
            outbox_event.mark_as_failed(f"Unknown event type {outbox_event.event_type}.")
            failed += 1
            continue

        try:
            event_bus.publish(event_class.from_payload(outbox_event.payload))
        except Exception as exc:  # noqa: BLE001 - recorded on the outbox row
            log.exception("outbox.publish_failed")
            outbox_event.mark_as_failed(str(exc))
            failed += 1
            continue

        outbox_event.mark_as_published()
        published += 1

    logger.info("outbox.relayed", published=published, failed=failed)
    return {"published": published, "failed": failed}
