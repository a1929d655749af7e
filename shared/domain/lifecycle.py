"""
Lifecycle state machines

A ``Lifecycle`` is a declarative table of legal status transitions for one
entity type, plus the side effects each transition authorizes (for
example, approving a booking authorizes invoice creation). The concrete
tables live next to the entities they govern.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from shared.domain.errors import InvalidTransition

# Side effects a transition may authorize.
NOTIFY = "notify"
INVOICE = "invoice"


@dataclass(frozen=True)
class Lifecycle:
    """Legal transitions for one entity type."""

    entity: str
    transitions: Mapping[str, frozenset]
    effects: Mapping[tuple, tuple] = field(default_factory=dict)

    def is_terminal(self, status: str) -> bool:
        return not self.transitions.get(status)

    def allowed_targets(self, status: str) -> frozenset:
        return self.transitions.get(status, frozenset())

    def can_transition(self, current: str, target: str) -> bool:
        return target in self.allowed_targets(current)

    def ensure(self, current: str, target: str) -> tuple:
        """Validate ``current -> target`` and return the authorized effects.

        Raises InvalidTransition for anything not listed, including a
        transition out of a terminal state and a no-op ``X -> X``.
        """
        if not self.can_transition(current, target):
            raise InvalidTransition(self.entity, current, target)
        return (NOTIFY,) + tuple(self.effects.get((current, target), ()))
