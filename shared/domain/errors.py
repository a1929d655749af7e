"""
Reservation error taxonomy

Every recoverable outcome of the engine is one of these exceptions.
They are raised inside domain/application code and converted into
structured API payloads by ``shared.api.exceptions``. Anything that is
not a ``ReservationError`` (connection loss, corruption) is an internal
failure and is left to propagate.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Iterable, List


class ReservationError(Exception):
    """Base class for typed reservation outcomes."""

    code = "reservation_error"
    status_code = 400
    default_detail = "Reservation request could not be processed."

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    def extra(self) -> dict[str, Any]:
        return {}

    def to_dict(self) -> dict[str, Any]:
        payload = {"error": self.code, "detail": self.detail}
        payload.update(self.extra())
        return payload


class NotFound(ReservationError):
    code = "not_found"
    status_code = 404
    default_detail = "Referenced object does not exist."

    def __init__(self, entity: str, identifier: Any):
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} {identifier} not found")

    def extra(self) -> dict[str, Any]:
        return {"entity": self.entity, "id": str(self.identifier)}


class InvalidRange(ReservationError, ValueError):
    code = "invalid_range"
    status_code = 400
    default_detail = "Start must not be after end."


@dataclass(frozen=True)
class Shortfall:
    """One cart line that cannot be admitted."""

    index: int
    instrument: str
    requested: int
    available: int

    @property
    def deficit(self) -> int:
        return self.requested - self.available

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["deficit"] = self.deficit
        return data


class InsufficientAvailability(ReservationError):
    code = "insufficient_availability"
    status_code = 409
    default_detail = "Requested quantity exceeds live availability."

    def __init__(self, shortfalls: Iterable[Shortfall]):
        self.shortfalls: List[Shortfall] = list(shortfalls)
        names = ", ".join(
            f"{s.instrument} (deficit {s.deficit})" for s in self.shortfalls
        )
        super().__init__(f"Insufficient availability for {names}")

    def extra(self) -> dict[str, Any]:
        return {"shortfalls": [s.to_dict() for s in self.shortfalls]}


class ConflictError(ReservationError):
    """Booking approval blocked by overlapping approved bookings.

    ``conflicts`` holds the blocking bookings themselves so the caller can
    render them; ``serialize`` turns one of them into a dict.
    """

    code = "booking_conflict"
    status_code = 409
    default_detail = "Booking overlaps with approved bookings."

    def __init__(self, conflicts: Iterable[Any], serialize=None):
        self.conflicts = list(conflicts)
        self._serialize = serialize or (lambda booking: {"id": getattr(booking, "pk", booking)})
        super().__init__(
            f"Booking overlaps with {len(self.conflicts)} approved booking(s)"
        )

    def extra(self) -> dict[str, Any]:
        return {"conflicts": [self._serialize(booking) for booking in self.conflicts]}


class InvalidTransition(ReservationError):
    code = "invalid_transition"
    status_code = 409
    default_detail = "Status change is not allowed."

    def __init__(self, entity: str, current: str, target: str):
        self.entity = entity
        self.current = current
        self.target = target
        super().__init__(f"Cannot move {entity} from {current} to {target}")

    def extra(self) -> dict[str, Any]:
        return {"current_status": self.current, "target_status": self.target}


class Busy(ReservationError):
    """Lock contention or timeout; the whole operation may be retried."""

    code = "busy"
    status_code = 503
    default_detail = "The reservation ledger is busy, retry the request."
    retryable = True
