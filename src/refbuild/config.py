"""Lookup profile loading and validation.

Handles:
- Loading lookup profiles from YAML files.
- Merging CLI options with profile values.
- Validating the final configuration before a history walk.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from refbuild.history import ReferenceFilter
from refbuild.logging import get_logger
from refbuild.selector import Selector, by_id, by_kind, first_action

log = get_logger("config")


# ---------------------------------------------------------------------------
# LookupConfig
# ---------------------------------------------------------------------------


@dataclass
class LookupConfig:
    """Resolved configuration for a reference lookup."""

    # Which analysis to follow (at most one of the two)
    analysis_id: str | None = None
    kind: str | None = None

    # Where the builds live
    builds_dir: Path = field(default_factory=lambda: Path("builds"))
    job: str = "main"

    # Reference filter
    require_overall_success: bool = False
    ignore_analysis_outcome: bool = False

    @property
    def reference_filter(self) -> ReferenceFilter:
        return ReferenceFilter(
            require_overall_success=self.require_overall_success,
            ignore_analysis_outcome=self.ignore_analysis_outcome,
        )

    def selector(self) -> Selector:
        """Build the selector matching ``analysis_id`` or ``kind``."""
        if self.analysis_id:
            return by_id(self.analysis_id)
        if self.kind:
            return by_kind(self.kind)
        return first_action()


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@dataclass
class ValidationError:
    """A single configuration validation error."""

    field: str
    message: str
    severity: str = "error"  # "error" or "warning"


def validate_config(config: LookupConfig) -> list[ValidationError]:
    """Validate a lookup configuration.

    Returns a list of validation errors.  Empty list means valid.
    """
    errors: list[ValidationError] = []

    if config.analysis_id and config.kind:
        errors.append(
            ValidationError(
                field="analysis_id",
                message="Set either analysis_id or kind, not both.",
            )
        )
    elif not config.analysis_id and not config.kind:
        errors.append(
            ValidationError(
                field="analysis_id",
                message="Neither analysis_id nor kind set; the first attached action is used.",
                severity="warning",
            )
        )

    if not config.job or not config.job.strip():
        errors.append(ValidationError(field="job", message="Job name must be non-empty."))

    if not config.builds_dir.exists():
        errors.append(
            ValidationError(
                field="builds_dir",
                message=f"Builds directory does not exist: {config.builds_dir}",
            )
        )

    return errors


# ---------------------------------------------------------------------------
# YAML profile loading
# ---------------------------------------------------------------------------

_PROFILE_KEYS = {f.name for f in fields(LookupConfig)}


def load_profile(profile_path: Path) -> dict[str, Any]:
    """Load a lookup profile from a YAML file.

    Profile format::

        analysis_id: pylint
        builds_dir: builds
        job: main
        require_overall_success: false
        ignore_analysis_outcome: false

    Returns:
        The parsed YAML as a dict.
    """
    if not profile_path.exists():
        raise FileNotFoundError(f"Profile not found: {profile_path}")

    data = yaml.safe_load(profile_path.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Profile must be a YAML mapping, got {type(data).__name__}")

    log.debug("Loaded profile %s", profile_path)
    return data


def config_from_profile(
    profile_data: dict[str, Any],
    *,
    cli_overrides: dict[str, Any] | None = None,
) -> LookupConfig:
    """Build a LookupConfig from a parsed profile.

    Values in *cli_overrides* that are not None take precedence over the
    profile. Unknown profile keys are rejected.
    """
    unknown = sorted(set(profile_data) - _PROFILE_KEYS)
    if unknown:
        raise ValueError(f"Unknown profile key(s): {', '.join(unknown)}")

    merged = dict(profile_data)
    for key, value in (cli_overrides or {}).items():
        if value is not None:
            merged[key] = value

    config = LookupConfig()
    if merged.get("analysis_id") is not None:
        config.analysis_id = str(merged["analysis_id"])
    if merged.get("kind") is not None:
        config.kind = str(merged["kind"])
    if merged.get("builds_dir") is not None:
        config.builds_dir = Path(merged["builds_dir"])
    if merged.get("job") is not None:
        config.job = str(merged["job"])
    config.require_overall_success = _flag(merged, "require_overall_success")
    config.ignore_analysis_outcome = _flag(merged, "ignore_analysis_outcome")
    return config


def _flag(merged: dict[str, Any], key: str) -> bool:
    value = merged.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"{key} must be true or false, got {value!r}")
    return value
