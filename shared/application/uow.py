"""
Unit of Work Pattern

Owns the transaction boundary of every ledger mutation. Domain events are
collected while the command runs and published only after the database
commit succeeds; lock contention inside the boundary is surfaced as the
retryable ``Busy`` error.
"""

from abc import ABC, abstractmethod
from typing import List
import logging

from django.conf import settings
from django.db import DatabaseError, OperationalError, connection, transaction

from shared.domain.base import DomainEvent
from shared.domain.errors import Busy

logger = logging.getLogger(__name__)

# lock_not_available, deadlock_detected, serialization_failure
_CONTENTION_SQLSTATES = {'55P03', '40P01', '40001'}
_CONTENTION_MESSAGES = ('database is locked', 'database table is locked', 'could not obtain lock')


def is_lock_contention(exc: BaseException) -> bool:
    """Tell lock timeouts/deadlocks apart from genuine storage failures."""
    if not isinstance(exc, DatabaseError):
        return False
    cause = exc.__cause__
    sqlstate = getattr(cause, 'pgcode', None) or getattr(cause, 'sqlstate', None)
    if sqlstate in _CONTENTION_SQLSTATES:
        return True
    if isinstance(exc, OperationalError):
        message = str(exc).lower()
        return any(fragment in message for fragment in _CONTENTION_MESSAGES)
    return False


class AbstractUnitOfWork(ABC):
    """Abstract Unit of Work pattern"""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.commit()
        else:
            self.rollback()

    @abstractmethod
    def commit(self):
        """Commit the transaction"""
        pass

    @abstractmethod
    def rollback(self):
        """Rollback the transaction"""
        pass


class DjangoUnitOfWork(AbstractUnitOfWork):
    """
    Django implementation of Unit of Work

    Usage:
        with DjangoUnitOfWork() as uow:
            instrument = lock_instruments([instrument_id])[instrument_id]
            ...
            uow.record(ReservationCartCreated(...))
        # Events are published after commit
    """

    def __init__(self, lock_timeout_ms: int | None = None):
        self._events: List[DomainEvent] = []
        self._transaction = None
        if lock_timeout_ms is None:
            lock_timeout_ms = getattr(settings, 'RESERVATIONS_LOCK_TIMEOUT_MS', 5000)
        self.lock_timeout_ms = lock_timeout_ms

    def __enter__(self):
        """Start database transaction"""
        self._transaction = transaction.atomic()
        self._transaction.__enter__()
        try:
            self._apply_lock_timeout()
        except BaseException as exc:
            self._transaction.__exit__(type(exc), exc, exc.__traceback__)
            raise
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Complete or rollback transaction"""
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            if self._transaction:
                self._transaction.__exit__(exc_type, exc_val, exc_tb)
        if exc_val is not None and is_lock_contention(exc_val):
            logger.warning(f"Transaction aborted on lock contention: {exc_val}")
            raise Busy() from exc_val
        return False

    def _apply_lock_timeout(self):
        if connection.vendor != 'postgresql' or not self.lock_timeout_ms:
            return
        with connection.cursor() as cursor:
            cursor.execute('SET LOCAL lock_timeout = %s', [f'{int(self.lock_timeout_ms)}ms'])

    def commit(self):
        """
        Schedule event publishing

        Events are published using Django's transaction.on_commit()
        so they are only sent after the database commit succeeds.
        """
        logger.debug(f"Committing transaction with {len(self._events)} events")

        events = self._events.copy()
        self._events.clear()

        if events:
            transaction.on_commit(lambda: self._publish_events(events))

    def rollback(self):
        """Rollback changes and discard events"""
        if self._events:
            logger.info(f"Rolling back transaction, discarding {len(self._events)} events")
        self._events.clear()

    def record(self, event: DomainEvent):
        """Queue a single event for publication after commit."""
        self._events.append(event)

    def _publish_events(self, events: List[DomainEvent]):
        """Called after successful transaction commit."""
        from shared.application.message_bus import message_bus

        logger.info(f"Publishing {len(events)} domain events after commit")

        try:
            message_bus.publish_events(events)
        except Exception as e:
            # The ledger is already committed; subscribers are best-effort.
            logger.error(f"Error publishing events: {e}", exc_info=True)
