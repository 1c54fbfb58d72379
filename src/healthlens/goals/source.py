"""Where a goal value came from.

A goal is either set by the user (``ManualGoal``) or computed by one of the
calculators (``AutomaticGoal``, with the inputs that produced it). Callers
branch on the type instead of on string flags:

    if isinstance(result.source, ManualGoal):
        ...
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class ManualGoal:
    """Goal entered by the user; used as-is."""

    value: float

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError(f"manual goal must be non-negative, got {self.value}")


@dataclass(frozen=True)
class AutomaticGoal:
    """Goal computed from the profile and signals."""

    value: float
    rationale: dict[str, Any] = field(default_factory=dict)


GoalSource = Union[ManualGoal, AutomaticGoal]


def goal_source_kind(source: GoalSource) -> str:
    """Return "manual" or "automatic"."""
    return "manual" if isinstance(source, ManualGoal) else "automatic"
