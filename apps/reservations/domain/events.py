"""
Reservation Domain Events

Published on the message bus after the ledger transaction commits.
"""

from dataclasses import dataclass, field
from typing import List
from uuid import UUID

from shared.domain.base import DomainEvent
from shared.domain.value_objects import DateRange


@dataclass
class ReservationCartCreated(DomainEvent):
    """
    Event: A cart was admitted and its requests stored as pending

    Triggers:
    - Acknowledge the submission to the requester
    - Refresh availability views
    """
    cart_id: UUID
    kind: str
    request_ids: List[int]
    instruments: List[str]
    requester_email: str = ''


@dataclass
class ReservationRequestStatusChanged(DomainEvent):
    """
    Event: A rent/borrow request moved along its lifecycle

    Triggers:
    - Notify the requester (approved, rejected, paid, returned)
    - Refresh availability views when capacity was released
    """
    request_id: int
    kind: str
    instrument: str
    quantity: int
    dates: DateRange
    old_status: str
    new_status: str
    requester_email: str = ''
    effects: List[str] = field(default_factory=list)

    @property
    def releases_capacity(self) -> bool:
        from .lifecycle import CAPACITY_CONSUMING

        return self.old_status in CAPACITY_CONSUMING and self.new_status not in CAPACITY_CONSUMING
