"""Value types returned by ReturnService."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class Eligibility:
    """
    Whether an order can be returned.

    Attributes:
        eligible: True when a return request may be created
        reason: Why not (empty when eligible)
        days_remaining: Whole days left in the return window, when known
    """

    eligible: bool
    reason: str = ""
    days_remaining: int | None = None

    def __bool__(self) -> bool:
        return self.eligible

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
