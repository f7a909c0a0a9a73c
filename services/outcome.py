"""Result type for best-effort side effects (e-mail, letters, pushes)."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Outcome:
    """Whether a side effect happened; never raised, only logged."""

    delivered: bool
    reason: str | None = None
    detail: str | None = None

    @classmethod
    def ok(cls, detail: str | None = None) -> "Outcome":
        return cls(True, None, detail)

    @classmethod
    def skipped(cls, reason: str) -> "Outcome":
        return cls(False, reason)
