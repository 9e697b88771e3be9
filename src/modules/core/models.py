"""Base abstract models and domain infrastructure for the catalog.

Provides:
- ``BaseModel``: UUIDv7 primary key + created_at / updated_at timestamps.
- ``ArchivableModel``: Extends BaseModel with soft-delete via ``archived_at``.
- ``OutboxEvent``: Transactional Outbox pattern for reliable domain events.

Design decisions:
- Single ``archived_at`` field instead of dual ``is_archived`` + ``archived_at``
  (single source of truth, avoids inconsistency).
- ``objects`` manager returns ALL records (unfiltered).  Use ``.alive()``
  explicitly to exclude archived rows.
- Archiving is monotonic: an archived row is never stamped again, so both
  ``archive()`` helpers only touch rows whose ``archived_at`` is NULL.
- ``save()`` guard ensures ``updated_at`` is included when ``update_fields``
  is specified (Django skips ``auto_now`` fields otherwise).
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

import uuid6
from django.db import models
from django.utils import timezone

# ---------------------------------------------------------------------------
# BaseModel
# ---------------------------------------------------------------------------


class BaseModel(models.Model):
    """Abstract base with UUIDv7 PK and timestamp bookkeeping."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid6.uuid7,
        editable=False,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    def save(self, *args, **kwargs) -> None:
        """Ensure ``updated_at`` is refreshed even when ``update_fields`` is passed."""
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "updated_at" not in update_fields:
            kwargs["update_fields"] = list(update_fields) + ["updated_at"]
        super().save(*args, **kwargs)


# ---------------------------------------------------------------------------
# Archive (soft delete) infrastructure
# ---------------------------------------------------------------------------


class ArchivableQuerySet(models.QuerySet):
    """QuerySet with archive helpers."""

    def alive(self) -> ArchivableQuerySet:
        """Return only non-archived records."""
        return self.filter(archived_at__isnull=True)

    def archived(self) -> ArchivableQuerySet:
        """Return only archived records."""
        return self.filter(archived_at__isnull=False)

    def archive(self, at: Optional[datetime] = None) -> int:
        """Bulk archive: stamps ``archived_at`` + ``updated_at`` on live rows.

        Returns the number of rows stamped.
        """
        now = at or timezone.now()
        return self.alive().update(archived_at=now, updated_at=now)


class ArchivableManager(models.Manager):
    """Manager that exposes ``.alive()`` / ``.archived()`` on the queryset."""

    def get_queryset(self) -> ArchivableQuerySet:
        return ArchivableQuerySet(self.model, using=self._db)

    def alive(self) -> ArchivableQuerySet:
        return self.get_queryset().alive()

    def archived(self) -> ArchivableQuerySet:
        return self.get_queryset().archived()


class ArchivableModel(BaseModel):
    """Abstract model with soft-delete via a single ``archived_at`` timestamp.

    - ``objects`` is **unfiltered** (returns all rows).
    - Use ``Model.objects.alive()`` to exclude archived rows.
    - ``delete()`` is not overridden: rows are archived, never removed, and
      callers go through ``archive()`` explicitly.
    """

    archived_at = models.DateTimeField(
        null=True,
        blank=True,
        default=None,
        db_index=True,
    )

    objects = ArchivableManager()

    class Meta:
        abstract = True

    @property
    def is_archived(self) -> bool:
        """Computed: ``True`` when the record has been archived."""
        return self.archived_at is not None

    def archive(
        self, using: Optional[str] = None, at: Optional[datetime] = None
    ) -> Optional[datetime]:
        """Archive this instance.

        Returns the archive timestamp, or ``None`` when the row was already
        archived (in memory or concurrently in the database).
        """
        if self.is_archived:
            return None
        now = at or timezone.now()
        manager = type(self).objects.db_manager(using or self._state.db)
        stamped = manager.filter(pk=self.pk).archive(at=now)
        if not stamped:
            return None
        self.archived_at = now
        self.updated_at = now
        return now


# ---------------------------------------------------------------------------
# Transactional Outbox
# ---------------------------------------------------------------------------


class EventStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    PUBLISHED = "PUBLISHED", "Published"
    FAILED = "FAILED", "Failed"


class OutboxQuerySet(models.QuerySet):
    def relayable(self, max_retries: int) -> OutboxQuerySet:
        """Pending events plus failed ones with attempts left, oldest first."""
        return self.filter(
            models.Q(status=EventStatus.PENDING)
            | models.Q(status=EventStatus.FAILED, retry_count__lt=max_retries)
        ).order_by("created_at", "id")


class OutboxEvent(BaseModel):
    """Transactional Outbox for reliable domain event delivery.

    Events are persisted in the **same database transaction** as the catalog
    rows that produced them, so a rolled-back commit never leaks a
    notification.  ``modules.core.tasks.relay_outbox_events`` reads
    ``PENDING`` (and retryable ``FAILED``) events and publishes them to the
    in-process event bus.

    Workflow:
    1. Service creates ``OutboxEvent`` inside the catalog transaction.
    2. Relay task reads ``OutboxEvent.objects.relayable(max_retries)`` in batches.
    3. On success → ``mark_as_published()``.
    4. On failure → ``mark_as_failed(error)`` increments ``retry_count``; the
       event is retried on later runs until ``retry_count`` reaches
       ``CATALOG_OUTBOX_MAX_RETRIES``.
    """

    event_type = models.CharField(max_length=100)
    payload = models.JSONField()
    aggregate_id = models.CharField(max_length=255)
    topic = models.CharField(max_length=100)
    status = models.CharField(
        max_length=20,
        choices=EventStatus.choices,
        default=EventStatus.PENDING,
    )
    processed_at = models.DateTimeField(null=True, blank=True, default=None)
    error_message = models.TextField(null=True, blank=True, default=None)  # noqa: DJ01
    retry_count = models.PositiveIntegerField(default=0)

    objects = OutboxQuerySet.as_manager()

    class Meta:
        db_table = "outbox_events"
        ordering = ["created_at"]
        indexes = [
            models.Index(
                fields=["event_type"],
                name="outbox_event_type_idx",
            ),
            models.Index(
                fields=["aggregate_id"],
                name="outbox_aggregate_id_idx",
            ),
            models.Index(
                fields=["topic", "status"],
                name="outbox_topic_status_idx",
            ),
            models.Index(
                fields=["status", "created_at"],
                name="outbox_status_created_idx",
            ),
        ]

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    def mark_as_published(self) -> None:
        """Mark event as successfully published."""
        self.status = EventStatus.PUBLISHED
        self.processed_at = timezone.now()
        self.save(update_fields=["status", "processed_at", "updated_at"])

    def mark_as_failed(self, error: str) -> None:
        """Mark event as failed and record the error."""
        self.status = EventStatus.FAILED
        self.error_message = error
        self.retry_count += 1
        self.save(
            update_fields=[
                "status",
                "error_message",
                "retry_count",
                "updated_at",
            ]
        )

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        return f"{self.event_type} [{self.status}] ({self.aggregate_id})"
