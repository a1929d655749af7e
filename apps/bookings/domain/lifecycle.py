"""Status machine for ensemble bookings."""

from shared.domain.lifecycle import INVOICE, Lifecycle

PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"

# Only approved bookings hold the ensemble.
BLOCKING = frozenset({APPROVED})

BOOKING_LIFECYCLE = Lifecycle(
    entity="booking",
    transitions={
        PENDING: frozenset({APPROVED, REJECTED}),
        APPROVED: frozenset(),
        REJECTED: frozenset(),
    },
    effects={
        (PENDING, APPROVED): (INVOICE,),
    },
)
