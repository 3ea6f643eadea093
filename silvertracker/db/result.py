"""Explicit outcome type for persistence operations.

A read that finds nothing and a read that fails are different things;
``StoreResult`` keeps them apart so callers never mistake an error for an
empty portfolio.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class StoreStatus(Enum):
    """Outcome of a store operation."""

    OK = "ok"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass(frozen=True)
class StoreResult:
    """Result of a store operation.

    Attributes:
        status: OK with data, EMPTY (nothing matched), or FAILED.
        rows: Returned records. Empty unless status is OK.
        error: Error message when status is FAILED.

    """

    status: StoreStatus
    rows: tuple[dict[str, Any], ...] = ()
    error: str = ""

    @classmethod
    def ok(cls, rows: list[dict[str, Any]]) -> StoreResult:
        """Successful result; an empty row list becomes EMPTY."""
        if not rows:
            return cls(StoreStatus.EMPTY)
        return cls(StoreStatus.OK, rows=tuple(rows))

    @classmethod
    def empty(cls) -> StoreResult:
        """The operation succeeded but nothing matched."""
        return cls(StoreStatus.EMPTY)

    @classmethod
    def failed(cls, error: BaseException | str) -> StoreResult:
        """The operation failed."""
        return cls(StoreStatus.FAILED, error=str(error))

    @property
    def succeeded(self) -> bool:
        """True for OK and EMPTY."""
        return self.status is not StoreStatus.FAILED

    @property
    def first(self) -> dict[str, Any] | None:
        """First returned record, if any."""
        return self.rows[0] if self.rows else None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-friendly dict."""
        return {
            "status": self.status.value,
            "rows": list(self.rows),
            "error": self.error,
        }
