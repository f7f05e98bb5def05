"""Tests for renderer configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from changelog_renderer.config import DEFAULT_CATEGORIES, load_render_config


@pytest.fixture(autouse=True)
def clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CHANGELOG_BASE_ISSUE_URL", raising=False)
    monkeypatch.delenv("CHANGELOG_UNRELEASED_NAME", raising=False)


class TestLoadRenderConfig:
    def test_defaults_without_path(self) -> None:
        options = load_render_config()
        assert options.categories == DEFAULT_CATEGORIES
        assert options.base_issue_url == ""
        assert options.unreleased_name == "Unreleased"

    def test_missing_file_returns_defaults(self, tmp_path: Path) -> None:
        options = load_render_config(tmp_path / "missing.yaml")
        assert options.categories == DEFAULT_CATEGORIES

    def test_loads_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "changelog.yaml"
        config_file.write_text(
            "categories:\n"
            "  - Added\n"
            "  - Fixed\n"
            "baseIssueUrl: https://github.com/myorg/api/issues/\n"
            "unreleasedName: 未リリース\n",
            encoding="utf-8",
        )
        options = load_render_config(config_file)
        assert options.categories == ["Added", "Fixed"]
        assert options.base_issue_url == "https://github.com/myorg/api/issues/"
        assert options.unreleased_name == "未リリース"

    def test_empty_file_returns_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "changelog.yaml"
        config_file.write_text("", encoding="utf-8")
        assert load_render_config(config_file).categories == DEFAULT_CATEGORIES

    def test_env_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "changelog.yaml"
        config_file.write_text("baseIssueUrl: https://file/\n", encoding="utf-8")
        monkeypatch.setenv("CHANGELOG_BASE_ISSUE_URL", "https://env/")
        monkeypatch.setenv("CHANGELOG_UNRELEASED_NAME", "Next")

        options = load_render_config(config_file)
        assert options.base_issue_url == "https://env/"
        assert options.unreleased_name == "Next"

    def test_invalid_yaml_raises(self, tmp_path: Path) -> None:
        config_file = tmp_path / "changelog.yaml"
        config_file.write_text("categories: [Added\n", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_render_config(config_file)

    def test_invalid_shape_raises(self, tmp_path: Path) -> None:
        config_file = tmp_path / "changelog.yaml"
        config_file.write_text("categories: 3\n", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid renderer config"):
            load_render_config(config_file)

    def test_non_mapping_raises(self, tmp_path: Path) -> None:
        config_file = tmp_path / "changelog.yaml"
        config_file.write_text("- Added\n", encoding="utf-8")
        with pytest.raises(ValueError, match="expected a mapping"):
            load_render_config(config_file)
