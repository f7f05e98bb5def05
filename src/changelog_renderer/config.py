"""Renderer configuration loaded from YAML.

Example changelog.yaml:

    categories:
      - ":rocket: Enhancement"
      - ":bug: Bug Fix"
    baseIssueUrl: https://github.com/myorg/api/issues/
    unreleasedName: Unreleased

CHANGELOG_BASE_ISSUE_URL and CHANGELOG_UNRELEASED_NAME override the file.
"""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from changelog_renderer.schemas import RenderOptions

DEFAULT_CATEGORIES = [
    ":rocket: Enhancement",
    ":bug: Bug Fix",
    ":memo: Documentation",
    ":house: Internal",
]

_ENV_OVERRIDES = {
    "CHANGELOG_BASE_ISSUE_URL": "base_issue_url",
    "CHANGELOG_UNRELEASED_NAME": "unreleased_name",
}


def load_render_config(path: str | Path | None = None) -> RenderOptions:
    """Load and validate a YAML renderer config file.

    Args:
        path: Path to the YAML configuration file. None means defaults only.

    Returns:
        Validated RenderOptions. Returns defaults if the file doesn't exist.

    Raises:
        ValueError: If the YAML content is invalid or fails validation.
    """
    raw: dict = {}

    if path is not None:
        config_path = Path(path)
        if config_path.exists():
            try:
                raw = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
            except yaml.YAMLError as exc:
                raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
            if not isinstance(raw, dict):
                raise ValueError(f"Invalid renderer config in {path}: expected a mapping")

    data = {"categories": DEFAULT_CATEGORIES, **raw}
    for env_var, field_name in _ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value is not None:
            # Drop the alias spelling so the override wins.
            data.pop(RenderOptions.model_fields[field_name].alias, None)
            data[field_name] = value

    try:
        return RenderOptions.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid renderer config in {path}: {exc}") from exc
