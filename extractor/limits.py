"""Resource ceilings: counting against limits and the fail/truncate decision."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from core.models import ExtractErrorCode, ExtractionLimits, LimitKind, LimitPolicy


TruncateHook = Callable[[LimitKind, int, int], None]


class LimitExceededError(Exception):
    """Raised when extraction breaches a ceiling under the fail policy."""

    def __init__(self, kind: LimitKind, maximum: int, actual: int) -> None:
        self.code = ExtractErrorCode.LIMIT_EXCEEDED
        self.kind = kind
        self.maximum = maximum
        self.actual = actual
        super().__init__(
            f"microdata limit exceeded ({kind.value}): max={maximum}, actual={actual}"
        )

    def to_dict(self) -> dict[str, Any]:
        """Structured failure value for logs and API responses."""
        return {
            "code": self.code.value,
            "kind": self.kind.value,
            "max": self.maximum,
            "actual": self.actual,
        }


class LimitGuard:
    """
    Check counts against configured ceilings.

    ``allows`` answers "may the count reach ``actual``?". Within the ceiling
    it returns True. On a breach the fail policy raises LimitExceededError;
    the truncate policy reports the breach to ``on_truncate`` and returns
    False, and the caller stops collecting that kind.
    """

    def __init__(
        self,
        limits: ExtractionLimits,
        policy: LimitPolicy = LimitPolicy.FAIL,
        on_truncate: TruncateHook | None = None,
    ) -> None:
        self.limits = limits
        self.policy = policy
        self.on_truncate = on_truncate
        self.total_property_elements = 0

    def ceiling(self, kind: LimitKind) -> int | None:
        return self.limits.ceiling(kind)

    def allows(self, kind: LimitKind, actual: int) -> bool:
        maximum = self.ceiling(kind)
        if maximum is None or actual <= maximum:
            return True
        return self.breach(kind, maximum, actual)

    def breach(self, kind: LimitKind, maximum: int, actual: int) -> bool:
        if self.policy == LimitPolicy.TRUNCATE:
            if self.on_truncate is not None:
                self.on_truncate(kind, maximum, actual)
            return False
        raise LimitExceededError(kind, maximum, actual)
