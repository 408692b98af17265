from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

HEADER_REMAINING = "X-RateLimit-Remaining"
HEADER_LIMIT = "X-RateLimit-Limit"

LOW_BUDGET_PERCENT = 20


@dataclass(frozen=True)
class RateBudget:
    remaining: int = 100
    limit: int = 100

    @property
    def percentage(self) -> float:
        if self.limit <= 0:
            return 0.0
        return self.remaining / self.limit * 100

    @property
    def is_low(self) -> bool:
        return self.percentage < LOW_BUDGET_PERCENT


def _header(headers: Mapping[str, str], name: str) -> str | None:
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def _parse_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


class RateBudgetTracker:
    """Mirror of the remaining/limit pair advertised by the gateway."""

    def __init__(self, initial: RateBudget | None = None) -> None:
        self._budget = initial or RateBudget()

    @property
    def budget(self) -> RateBudget:
        return self._budget

    def update_from_headers(self, headers: Mapping[str, str]) -> bool:
        """
        Overwrite the budget when both headers are present and numeric.

        Returns False (budget unchanged) otherwise.
        """
        remaining = _parse_int(_header(headers, HEADER_REMAINING))
        limit = _parse_int(_header(headers, HEADER_LIMIT))
        if remaining is None or limit is None:
            return False
        self._budget = RateBudget(remaining=remaining, limit=limit)
        return True
