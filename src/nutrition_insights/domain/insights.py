"""Rule-generated insight records."""

from dataclasses import dataclass
from typing import Literal

InsightCategory = Literal[
    "protein", "calories", "consistency", "balance", "timing", "weight", "fiber"
]


@dataclass(frozen=True)
class DerivedInsight:
    """Observation produced by a single heuristic rule.

    ``id`` identifies the rule that fired. ``priority`` 1 is the most
    important; ``confidence`` is within 0..1.
    """

    id: str
    category: InsightCategory
    message: str
    confidence: float
    priority: int
