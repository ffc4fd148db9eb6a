"""Selectors that pick one analysis action out of a build.

A selector is any callable mapping a build record to the analysis action
of interest, or ``None`` when the build carries no such action. The
factories here cover the usual lookups; anything with the same call
signature can be handed to :class:`refbuild.history.HistoryWalker`.

Builds expose their attached actions through an ``actions`` attribute.
Records without one are treated as having no actions.
"""

from __future__ import annotations

from typing import Callable, Iterable

from refbuild.model import AnalysisAction, BuildRecord

Selector = Callable[[BuildRecord], AnalysisAction | None]


def _attached_actions(build: BuildRecord) -> Iterable[AnalysisAction]:
    return getattr(build, "actions", None) or ()


def by_id(analysis_id: str) -> Selector:
    """Select the first action whose ``analysis_id`` equals *analysis_id*."""

    def select(build: BuildRecord) -> AnalysisAction | None:
        for action in _attached_actions(build):
            if action.analysis_id == analysis_id:
                return action
        return None

    select.__name__ = f"by_id({analysis_id!r})"
    return select


def by_kind(kind: str) -> Selector:
    """Select the first action of the given *kind* (e.g. ``"lint"``)."""

    def select(build: BuildRecord) -> AnalysisAction | None:
        for action in _attached_actions(build):
            if action.kind == kind:
                return action
        return None

    select.__name__ = f"by_kind({kind!r})"
    return select


def first_action() -> Selector:
    """Select whichever action was attached first."""

    def select(build: BuildRecord) -> AnalysisAction | None:
        for action in _attached_actions(build):
            return action
        return None

    select.__name__ = "first_action()"
    return select
