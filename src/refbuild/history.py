"""Backward traversal of build history to find reference builds.

A :class:`HistoryWalker` starts from a baseline build and walks the
predecessor chain looking for earlier analysis results of the same kind
(as picked by a selector). A previous build is accepted as a *reference*
when two checks pass:

* its overall outcome is acceptable: it must be set, and either better
  than FAILURE, or FAILURE-or-worse because the analysis plugin itself
  failed the build. With ``require_overall_success`` only SUCCESS counts.
* its analysis action exists and completed successfully, unless
  ``ignore_analysis_outcome`` is set.

The baseline itself is never filtered: :meth:`HistoryWalker.get_baseline`
and the first element of :meth:`HistoryWalker.iterate` always surface the
baseline's own result.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from refbuild.logging import get_logger
from refbuild.model import AnalysisAction, AnalysisResult, BuildRecord
from refbuild.outcome import Outcome
from refbuild.selector import Selector

log = get_logger("history")


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class HistoryError(Exception):
    """Base class for history lookup errors."""


class NoPreviousResultError(HistoryError, LookupError):
    """No previous build qualifies as a reference."""


class MissingActionError(HistoryError, LookupError):
    """The selector found no action on a build that must have one."""

    def __init__(self, build: BuildRecord) -> None:
        self.build_number = getattr(build, "number", None)
        super().__init__(f"Build #{self.build_number} has no matching analysis action")


# ---------------------------------------------------------------------------
# Filter
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ReferenceFilter:
    """Which previous builds are acceptable as a reference.

    Attributes:
        require_overall_success: Only builds whose overall outcome is
            exactly SUCCESS qualify. Otherwise any build better than
            FAILURE qualifies, plus failed builds the plugin itself failed.
        ignore_analysis_outcome: Accept builds whose analysis step did not
            complete successfully (an action must still be attached).
    """

    require_overall_success: bool = False
    ignore_analysis_outcome: bool = False


DEFAULT_FILTER = ReferenceFilter()


# ---------------------------------------------------------------------------
# Walker
# ---------------------------------------------------------------------------


class HistoryWalker:
    """History of analysis results, starting at a baseline build.

    The walker keeps no state besides the baseline and the selector; every
    query walks the chain again from the baseline.
    """

    def __init__(self, baseline: BuildRecord, selector: Selector) -> None:
        self.baseline = baseline
        self.selector = selector

    def __repr__(self) -> str:
        number = getattr(self.baseline, "number", None)
        return f"HistoryWalker(baseline=#{number}, selector={self.selector!r})"

    def __iter__(self) -> Iterator[AnalysisResult]:
        return self.iterate()

    def _require_action(self, build: BuildRecord) -> AnalysisAction:
        action = self.selector(build)
        if action is None:
            raise MissingActionError(build)
        return action

    def get_baseline(self) -> AnalysisResult:
        """Return the baseline's own result.

        The baseline is expected to carry an action already; raises
        :class:`MissingActionError` if the selector finds none.
        """
        return self._require_action(self.baseline).get_result()

    def has_previous(self) -> bool:
        """Whether a reference build exists under the default filter."""
        return self.find_previous(self.baseline) is not None

    def is_empty(self) -> bool:
        return not self.has_previous()

    def get_previous(self) -> AnalysisResult:
        """Return the result of the nearest reference build.

        Raises:
            NoPreviousResultError: If no previous build qualifies.
        """
        result = self.find_reference(DEFAULT_FILTER)
        if result is None:
            raise NoPreviousResultError("No previous result available")
        return result

    def find_reference(
        self, reference_filter: ReferenceFilter = DEFAULT_FILTER
    ) -> AnalysisResult | None:
        """Return the nearest reference result under *reference_filter*, or None."""
        build = self.find_previous(self.baseline, reference_filter)
        if build is None:
            return None
        return self._require_action(build).get_result()

    def find_previous(
        self,
        start: BuildRecord,
        reference_filter: ReferenceFilter = DEFAULT_FILTER,
    ) -> BuildRecord | None:
        """Find the nearest build before *start* that qualifies as a reference.

        *start* itself is never examined. The whole chain is scanned if
        necessary; returns None when the oldest build is passed without a
        match.
        """
        build = start.predecessor()
        while build is not None:
            action = self.selector(build)
            if not self.is_valid_reference(
                build, action, reference_filter.require_overall_success
            ):
                log.debug("Skipping build #%s: outcome %s", build.number, _outcome_name(build))
            elif not self.has_successful_analysis(
                action, reference_filter.ignore_analysis_outcome
            ):
                log.debug(
                    "Skipping build #%s: %s",
                    build.number,
                    "no analysis action" if action is None else "analysis did not succeed",
                )
            else:
                log.debug("Build #%s qualifies as reference", build.number)
                return build
            build = build.predecessor()
        return None

    @staticmethod
    def is_valid_reference(
        build: BuildRecord,
        action: AnalysisAction | None,
        require_overall_success: bool,
    ) -> bool:
        """Check the build's overall outcome.

        An unset outcome never qualifies. A FAILURE-or-worse build only
        qualifies if an attached action reports the plugin as the cause;
        without an action that cannot be established.
        """
        outcome = build.outcome
        if outcome is None:
            return False
        if require_overall_success:
            return outcome is Outcome.SUCCESS
        return outcome.is_better_than(Outcome.FAILURE) or _plugin_caused_failure(action)

    @staticmethod
    def has_successful_analysis(
        action: AnalysisAction | None, ignore_analysis_outcome: bool
    ) -> bool:
        return action is not None and (action.is_successful() or ignore_analysis_outcome)

    def iterate(self) -> HistoryCursor:
        """Return a fresh cursor over results, newest first.

        The baseline's result comes first without any filtering; each later
        element belongs to the next reference build under the default filter.
        """
        return HistoryCursor(self, self.baseline)


def _plugin_caused_failure(action: AnalysisAction | None) -> bool:
    if action is None:
        return False
    return action.plugin_outcome.is_worse_or_equal_to(Outcome.FAILURE)


def _outcome_name(build: BuildRecord) -> str:
    outcome = build.outcome
    return "unset" if outcome is None else outcome.name


# ---------------------------------------------------------------------------
# Cursor
# ---------------------------------------------------------------------------


class HistoryCursor:
    """Single-pass iterator produced by :meth:`HistoryWalker.iterate`.

    Holds the build at the current position and whether the chain is
    exhausted. It cannot be rewound; call ``iterate()`` again for a fresh
    walk. Not safe to share between threads.
    """

    def __init__(self, walker: HistoryWalker, start: BuildRecord) -> None:
        self._walker = walker
        self.position: BuildRecord | None = start
        self.exhausted = False

    def __iter__(self) -> HistoryCursor:
        return self

    def has_next(self) -> bool:
        return not self.exhausted and self.position is not None

    def __next__(self) -> AnalysisResult:
        if not self.has_next():
            self.exhausted = True
            raise StopIteration
        current = self.position
        assert current is not None
        action = self._walker._require_action(current)
        self.position = self._walker.find_previous(current, DEFAULT_FILTER)
        if self.position is None:
            self.exhausted = True
        return action.get_result()

    def remove(self) -> None:
        """Removing history entries is not supported; this does nothing."""
