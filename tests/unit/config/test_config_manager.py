"""Tests for layered configuration loading."""
from __future__ import annotations

from pathlib import Path

import pytest

from stackforge.core.config import ConfigManager, get_cached_config, is_cached
from stackforge.core.exceptions import ConfigError


def _write_project_config(root: Path, name: str, text: str) -> Path:
    config_dir = root / ".stackforge" / "config"
    config_dir.mkdir(parents=True, exist_ok=True)
    path = config_dir / name
    path.write_text(text, encoding="utf-8")
    return path


class TestLayers:
    """Bundled defaults, project files, then environment."""

    def test_bundled_defaults(self, project_root: Path) -> None:
        """Defaults load without any project configuration."""
        cfg = ConfigManager(repo_root=project_root).load_config()

        assert cfg["composition"]["singletonTypes"] == ["storage", "caching"]
        assert cfg["composition"]["generation"]["maxWorkers"] == 4
        assert cfg["logging"]["level"] == "WARNING"

    def test_project_overrides_defaults(self, project_root: Path) -> None:
        """Project files deep-merge over bundled defaults."""
        _write_project_config(
            project_root,
            "composition.yaml",
            "composition:\n  generation:\n    parallel: true\n",
        )

        cfg = ConfigManager(repo_root=project_root).load_config()

        assert cfg["composition"]["generation"]["parallel"] is True
        assert cfg["composition"]["generation"]["maxWorkers"] == 4

    def test_project_files_alphabetical(self, project_root: Path) -> None:
        """Later files (by name) win."""
        _write_project_config(project_root, "a.yaml", "logging:\n  level: INFO\n")
        _write_project_config(project_root, "b.yml", "logging:\n  level: ERROR\n")

        assert ConfigManager(repo_root=project_root).load_config()["logging"]["level"] == "ERROR"

    def test_array_append_marker(self, project_root: Path) -> None:
        """A leading '+' appends to the inherited list."""
        _write_project_config(
            project_root,
            "composition.yaml",
            "composition:\n  singletonTypes: ['+', api]\n",
        )

        cfg = ConfigManager(repo_root=project_root).load_config()

        assert cfg["composition"]["singletonTypes"] == ["storage", "caching", "api"]


class TestEnvironmentOverrides:
    """STACKFORGE_* variables override files with type coercion."""

    def test_int_and_bool_coercion(self, project_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Values are coerced and matched to camelCase keys."""
        monkeypatch.setenv("STACKFORGE_COMPOSITION__GENERATION__MAXWORKERS", "8")
        monkeypatch.setenv("STACKFORGE_COMPOSITION__GENERATION__PARALLEL", "true")

        generation = ConfigManager(repo_root=project_root).load_config()["composition"]["generation"]

        assert generation["maxWorkers"] == 8
        assert generation["parallel"] is True
        assert "maxworkers" not in generation

    def test_append_to_list(self, project_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """APPEND adds to an existing list."""
        monkeypatch.setenv("STACKFORGE_COMPOSITION__SINGLETONTYPES__APPEND", "messaging")

        cfg = ConfigManager(repo_root=project_root).load_config()

        assert cfg["composition"]["singletonTypes"] == ["storage", "caching", "messaging"]

    def test_json_value(self, project_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """JSON arrays replace lists wholesale."""
        monkeypatch.setenv("STACKFORGE_COMPOSITION__SINGLETONTYPES", '["api"]')

        cfg = ConfigManager(repo_root=project_root).load_config()

        assert cfg["composition"]["singletonTypes"] == ["api"]


class TestFailures:
    """Invalid configuration is fatal."""

    def test_invalid_yaml(self, project_root: Path) -> None:
        """Broken YAML raises ConfigError naming the file."""
        path = _write_project_config(project_root, "broken.yaml", "composition: [unclosed\n")

        with pytest.raises(ConfigError) as exc_info:
            ConfigManager(repo_root=project_root).load_config()

        assert exc_info.value.context["path"] == str(path)

    def test_non_mapping(self, project_root: Path) -> None:
        """A top-level list is rejected."""
        _write_project_config(project_root, "list.yaml", "- a\n")

        with pytest.raises(ConfigError):
            ConfigManager(repo_root=project_root).load_config()

    def test_schema_violation(self, project_root: Path) -> None:
        """Values outside the schema raise ConfigError with the errors."""
        _write_project_config(
            project_root,
            "composition.yaml",
            "composition:\n  generation:\n    maxWorkers: 0\n",
        )

        with pytest.raises(ConfigError) as exc_info:
            ConfigManager(repo_root=project_root).load_config()

        assert exc_info.value.context["errors"]

    def test_schema_validation_can_be_skipped(self, project_root: Path) -> None:
        """validate=False returns the raw merge."""
        _write_project_config(project_root, "logging.yaml", "logging:\n  level: LOUD\n")

        cfg = ConfigManager(repo_root=project_root).load_config(validate=False)

        assert cfg["logging"]["level"] == "LOUD"


class TestCache:
    """Merged configuration is cached per root and fingerprint."""

    def test_cached_until_files_change(self, project_root: Path) -> None:
        """A second call returns the same object; editing config reloads."""
        first = get_cached_config(project_root)

        assert is_cached(project_root)
        assert get_cached_config(project_root) is first

        _write_project_config(project_root, "logging.yaml", "logging:\n  level: DEBUG\n")

        assert not is_cached(project_root)
        assert get_cached_config(project_root)["logging"]["level"] == "DEBUG"

    def test_env_change_invalidates(self, project_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Changing a STACKFORGE_* variable changes the cache key."""
        get_cached_config(project_root)
        monkeypatch.setenv("STACKFORGE_LOGGING__LEVEL", "ERROR")

        assert not is_cached(project_root)
        assert get_cached_config(project_root)["logging"]["level"] == "ERROR"
