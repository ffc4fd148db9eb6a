"""Read-only access to build records kept on disk.

Layout::

    builds/
      <job>/
        <number>/
          build.json       {"number": 12, "outcome": "SUCCESS"}
          analysis.jsonl   one analysis action per line

:class:`BuildStore` discovers jobs and builds; :class:`StoredBuild` lazily
loads a single build and links to its predecessor, so a history walk only
reads the builds it actually visits.
"""

from __future__ import annotations

import bisect
import json
from pathlib import Path
from typing import Any

from refbuild.logging import get_logger
from refbuild.model import AnalysisAction
from refbuild.outcome import Outcome

log = get_logger("store")


class StoredBuild:
    """Lazily loaded build record backed by a build directory."""

    def __init__(self, store: BuildStore, job: str, number: int, build_dir: Path) -> None:
        self.store = store
        self.job = job
        self.number = number
        self.build_dir = build_dir
        self._meta: dict[str, Any] | None = None
        self._actions: list[AnalysisAction] | None = None

    def __repr__(self) -> str:
        return f"StoredBuild(job={self.job!r}, number={self.number})"

    @property
    def meta(self) -> dict[str, Any]:
        """Load build.json on first access."""
        if self._meta is None:
            self._meta = self._load_meta()
        return self._meta

    @property
    def outcome(self) -> Outcome | None:
        """The build's overall outcome, or None while it is unset."""
        value = self.meta.get("outcome")
        if value is None:
            return None
        try:
            return Outcome.from_name(str(value))
        except ValueError as exc:
            raise ValueError(f"{self.build_dir / 'build.json'}: {exc}") from None

    @property
    def actions(self) -> list[AnalysisAction]:
        """Load analysis.jsonl on first access."""
        if self._actions is None:
            self._actions = self._load_actions()
        return self._actions

    def predecessor(self) -> StoredBuild | None:
        """The closest older build of the same job, or None."""
        return self.store.previous_build(self.job, self.number)

    def _load_meta(self) -> dict[str, Any]:
        meta_file = self.build_dir / "build.json"
        if not meta_file.exists():
            return {"number": self.number}
        data = json.loads(meta_file.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"{meta_file}: expected a JSON object")
        return data

    def _load_actions(self) -> list[AnalysisAction]:
        actions_file = self.build_dir / "analysis.jsonl"
        if not actions_file.exists():
            return []
        actions: list[AnalysisAction] = []
        for lineno, line in enumerate(actions_file.read_text(encoding="utf-8").splitlines(), 1):
            line = line.strip()
            if not line:
                continue
            try:
                data = json.loads(line)
            except json.JSONDecodeError:
                log.debug("Ignoring malformed line %d in %s", lineno, actions_file)
                continue
            if not isinstance(data, dict):
                log.debug("Ignoring non-object line %d in %s", lineno, actions_file)
                continue
            actions.append(AnalysisAction.from_dict(data, build_number=self.number))
        return actions


class BuildStore:
    """Discovers jobs and builds under a builds directory.

    Build numbers are scanned once per job and cached; call
    :meth:`refresh` to pick up builds written after the first scan.
    """

    def __init__(self, builds_dir: Path) -> None:
        self.builds_dir = builds_dir
        self._numbers: dict[str, list[int]] = {}

    def list_jobs(self) -> list[str]:
        if not self.builds_dir.is_dir():
            return []
        return sorted(d.name for d in self.builds_dir.iterdir() if d.is_dir())

    def refresh(self) -> None:
        """Forget cached build numbers."""
        self._numbers.clear()

    def _build_numbers(self, job: str) -> list[int]:
        """Build numbers of *job*, oldest first."""
        numbers = self._numbers.get(job)
        if numbers is None:
            job_dir = self.builds_dir / job
            numbers = []
            if job_dir.is_dir():
                numbers = sorted(
                    int(d.name) for d in job_dir.iterdir() if d.is_dir() and d.name.isdigit()
                )
            self._numbers[job] = numbers
        return numbers

    def _build(self, job: str, number: int) -> StoredBuild:
        return StoredBuild(self, job, number, self.builds_dir / job / str(number))

    def list_builds(self, job: str) -> list[StoredBuild]:
        """List all builds of *job*, newest first."""
        return [self._build(job, n) for n in reversed(self._build_numbers(job))]

    def latest(self, job: str) -> StoredBuild | None:
        numbers = self._build_numbers(job)
        return self._build(job, numbers[-1]) if numbers else None

    def get(self, job: str, build: str | int) -> StoredBuild | None:
        """Get a specific build. Accepts ``'latest'`` as alias."""
        if build == "latest":
            return self.latest(job)
        try:
            number = int(build)
        except ValueError:
            return None
        if (self.builds_dir / job / str(number)).is_dir():
            return self._build(job, number)
        return None

    def previous_build(self, job: str, number: int) -> StoredBuild | None:
        """The newest build of *job* numbered below *number*, or None."""
        numbers = self._build_numbers(job)
        index = bisect.bisect_left(numbers, number)
        return self._build(job, numbers[index - 1]) if index else None
