"""Text formatting helpers for the refbuild CLI."""

from __future__ import annotations

from refbuild.model import AnalysisResult
from refbuild.outcome import Outcome

_OUTCOME_ICONS: dict[Outcome, str] = {
    Outcome.SUCCESS: "\u2713 SUCCESS",
    Outcome.UNSTABLE: "\u26a0 UNSTABLE",
    Outcome.FAILURE: "\u2717 FAILURE",
    Outcome.NOT_BUILT: "\u2298 NOT_BUILT",
    Outcome.ABORTED: "\u2298 ABORTED",
}


def format_outcome(outcome: Outcome | None) -> str:
    """Return a visual indicator for *outcome*; ``'-'`` when unset."""
    if outcome is None:
        return "-"
    return _OUTCOME_ICONS[outcome]


def format_table(
    headers: list[str],
    rows: list[list[str]],
    *,
    alignments: list[str] | None = None,
    indent: int = 2,
) -> str:
    """Format rows as an aligned text table.

    Column widths fit the widest cell. Columns marked ``'r'`` in
    *alignments* are right-aligned, everything else left-aligned. Short
    rows are padded with empty cells.
    """
    if not headers:
        return ""

    ncols = len(headers)
    aligns = list(alignments or [])
    aligns += ["l"] * (ncols - len(aligns))

    cells = [(list(row) + [""] * ncols)[:ncols] for row in rows]
    widths = [max([len(headers[i])] + [len(r[i]) for r in cells]) for i in range(ncols)]

    def _line(row: list[str]) -> str:
        parts = [
            row[i].rjust(widths[i]) if aligns[i] == "r" else row[i].ljust(widths[i])
            for i in range(ncols)
        ]
        return (" " * indent + "  ".join(parts)).rstrip()

    return "\n".join([_line(headers)] + [_line(r) for r in cells])


def format_result(result: AnalysisResult) -> str:
    """Multi-line summary of a single analysis result."""
    build = f"#{result.build_number}" if result.build_number is not None else "?"
    lines = [
        f"Build:          {build}",
        f"Analysis:       {result.analysis_id or '-'} ({result.kind or 'unknown kind'})",
        f"Plugin outcome: {format_outcome(result.plugin_outcome)}",
        f"Issues:         {result.total_issues} total, "
        f"{result.new_issues} new, {result.fixed_issues} fixed",
    ]
    if result.errors:
        lines.append(f"Errors:         {len(result.errors)}")
        lines.extend(f"  - {msg}" for msg in result.errors)
    return "\n".join(lines)
