"""Ordered build outcomes.

An :class:`Outcome` is the verdict of a build (or of a single analysis
step within it). Outcomes are ordered by severity: ``SUCCESS`` is the
best, ``ABORTED`` the worst. A build that has not finished yet has no
outcome at all, which callers represent as ``None``.
"""

from __future__ import annotations

import enum


class Outcome(enum.Enum):
    """Build verdict, ordered from best to worst."""

    SUCCESS = 0
    UNSTABLE = 1
    FAILURE = 2
    NOT_BUILT = 3
    ABORTED = 4

    @property
    def severity(self) -> int:
        return self.value

    def is_better_than(self, other: Outcome) -> bool:
        return self.severity < other.severity

    def is_better_or_equal_to(self, other: Outcome) -> bool:
        return self.severity <= other.severity

    def is_worse_than(self, other: Outcome) -> bool:
        return self.severity > other.severity

    def is_worse_or_equal_to(self, other: Outcome) -> bool:
        return self.severity >= other.severity

    def combine(self, other: Outcome) -> Outcome:
        """Return the worse of the two outcomes."""
        return self if self.is_worse_or_equal_to(other) else other

    @classmethod
    def from_name(cls, name: str) -> Outcome:
        """Parse an outcome name such as ``"success"`` or ``"NOT_BUILT"``.

        Dashes are accepted in place of underscores. Raises ValueError for
        anything else.
        """
        key = name.strip().upper().replace("-", "_")
        try:
            return cls[key]
        except KeyError:
            valid = ", ".join(o.name for o in cls)
            raise ValueError(f"Unknown outcome {name!r} (expected one of: {valid})") from None
