"""Status machines for instrument requests."""

from shared.domain.lifecycle import Lifecycle

PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"
PAID = "paid"
RETURNED = "returned"

# Statuses that hold a share of an instrument's stock.
CAPACITY_CONSUMING = frozenset({PENDING, APPROVED, PAID})

RENT_LIFECYCLE = Lifecycle(
    entity="rent request",
    transitions={
        PENDING: frozenset({APPROVED, REJECTED}),
        APPROVED: frozenset({PAID}),
        PAID: frozenset({RETURNED}),
        REJECTED: frozenset(),
        RETURNED: frozenset(),
    },
)

BORROW_LIFECYCLE = Lifecycle(
    entity="borrow request",
    transitions={
        PENDING: frozenset({APPROVED, REJECTED}),
        APPROVED: frozenset({RETURNED}),
        REJECTED: frozenset(),
        RETURNED: frozenset(),
    },
)


def lifecycle_for(kind: str) -> Lifecycle:
    if kind == "rent":
        return RENT_LIFECYCLE
    if kind == "borrow":
        return BORROW_LIFECYCLE
    raise ValueError(f"Unknown request kind: {kind}")
