"""
Booking Domain Events

Events that represent things that have happened to ensemble bookings.
These are published after successful transaction commits.
"""

from dataclasses import dataclass, field
from typing import List

from shared.domain.base import DomainEvent
from shared.domain.value_objects import Money, TimeWindow


@dataclass
class BookingCreated(DomainEvent):
    """
    Event: A booking request was submitted

    Triggers:
    - Acknowledge the request to the customer
    """
    booking_id: int
    service: str
    window: TimeWindow
    email: str = ''


@dataclass
class BookingApproved(DomainEvent):
    """
    Event: Booking approved (PENDING -> APPROVED)

    Triggers:
    - Notify the customer
    - Create the invoice (asynchronous, best effort)
    """
    booking_id: int
    service: str
    window: TimeWindow
    estimated_value: Money
    email: str = ''
    effects: List[str] = field(default_factory=list)


@dataclass
class BookingRejected(DomainEvent):
    """
    Event: Booking rejected (PENDING -> REJECTED)

    Triggers:
    - Notify the customer
    """
    booking_id: int
    service: str
    window: TimeWindow
    email: str = ''
    effects: List[str] = field(default_factory=list)
