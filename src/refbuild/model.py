"""Build records, analysis actions and their result payloads.

:class:`BuildRecord` is the protocol a build store must satisfy for the
history walker to step through it. :class:`AnalysisAction` is what a
selector resolves from a build, and :class:`AnalysisResult` is the
payload handed back to callers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from refbuild.outcome import Outcome


class BuildRecord(Protocol):
    """A node in a backward-linked chain of builds."""

    @property
    def number(self) -> int: ...

    @property
    def outcome(self) -> Outcome | None: ...

    def predecessor(self) -> BuildRecord | None: ...


def _parse_outcome(value: Any, default: Outcome) -> Outcome:
    if value is None:
        return default
    if isinstance(value, Outcome):
        return value
    return Outcome.from_name(str(value))


@dataclass
class AnalysisResult:
    """Outcome of one analysis run attached to a build."""

    analysis_id: str = ""
    kind: str = ""
    plugin_outcome: Outcome = Outcome.SUCCESS
    total_issues: int = 0
    new_issues: int = 0
    fixed_issues: int = 0
    errors: list[str] = field(default_factory=list)
    build_number: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, build_number: int | None = None) -> AnalysisResult:
        """Create an AnalysisResult from a JSON-loaded dict, tolerating missing keys."""
        return cls(
            analysis_id=data.get("id", ""),
            kind=data.get("kind", ""),
            plugin_outcome=_parse_outcome(data.get("plugin_outcome"), Outcome.SUCCESS),
            total_issues=data.get("total_issues", 0),
            new_issues=data.get("new_issues", 0),
            fixed_issues=data.get("fixed_issues", 0),
            errors=list(data.get("errors", [])),
            build_number=build_number,
        )


@dataclass
class AnalysisAction:
    """An analysis step attached to a build.

    ``successful`` tells whether the analysis itself completed without
    error; it says nothing about the issues it found. The severity verdict
    of the analysis lives in ``result.plugin_outcome``.
    """

    analysis_id: str
    kind: str = ""
    successful: bool = True
    result: AnalysisResult = field(default_factory=AnalysisResult)

    @property
    def plugin_outcome(self) -> Outcome:
        return self.result.plugin_outcome

    def is_successful(self) -> bool:
        return self.successful

    def get_result(self) -> AnalysisResult:
        return self.result

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, build_number: int | None = None) -> AnalysisAction:
        """Create an AnalysisAction from one ``analysis.jsonl`` line."""
        result = AnalysisResult.from_dict(data, build_number=build_number)
        return cls(
            analysis_id=result.analysis_id,
            kind=result.kind,
            successful=bool(data.get("successful", True)),
            result=result,
        )
