"""Tests for repository priority configuration loading."""
import argparse

import pytest

from cli_config import (
    get_priority_config,
    load_priority_config,
    priority_config_from_data,
    resolve_priority_config_path,
)
from constants import Constants
from resolver.errors import ConfigError
from resolver.models import RepositoryPriorityEntry


class TestPriorityConfigFromData:
    """Schema validation and entry construction."""

    def test_mapping_form(self):
        config = priority_config_from_data(
            {"repositories": [{"url": "http://a/debian/", "priority": 990}, {"url": "http://b"}]}
        )
        assert config.entries == (
            RepositoryPriorityEntry("http://a/debian", 990),
            RepositoryPriorityEntry("http://b", 0),
        )

    def test_list_form(self):
        config = priority_config_from_data([{"url": "http://a", "priority": -1}])
        assert config.lookup("http://a").priority == -1

    def test_none_is_empty(self):
        assert len(priority_config_from_data(None)) == 0

    def test_missing_url(self):
        with pytest.raises(ConfigError, match="Invalid priority configuration"):
            priority_config_from_data({"repositories": [{"priority": 5}]})

    def test_priority_must_be_integer(self):
        with pytest.raises(ConfigError):
            priority_config_from_data([{"url": "http://a", "priority": "high"}])

    def test_wrong_top_level_type(self):
        with pytest.raises(ConfigError):
            priority_config_from_data("repositories")


class TestLoadPriorityConfig:
    def test_yaml_file(self, tmp_path):
        path = tmp_path / "priorities.yml"
        path.write_text(
            "repositories:\n"
            "  - url: https://deb.example.org/debian\n"
            "    priority: 990\n"
            "  - url: https://mirror.example.org/unwanted\n"
            "    priority: -1\n",
            encoding="utf-8",
        )
        config = load_priority_config(str(path))
        assert config.repository_bases == (
            "https://deb.example.org/debian",
            "https://mirror.example.org/unwanted",
        )

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_priority_config(str(tmp_path / "missing.yml"))

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "bad.yml"
        path.write_text("repositories: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="Failed to parse"):
            load_priority_config(str(path))


class TestConfigPathPrecedence:
    """CLI flag over environment variable over nothing."""

    def test_cli_wins(self, monkeypatch):
        monkeypatch.setenv(Constants.ENV_PRIORITY_CONFIG, "/env.yml")
        assert resolve_priority_config_path("/cli.yml") == "/cli.yml"

    def test_env_fallback(self, monkeypatch):
        monkeypatch.setenv(Constants.ENV_PRIORITY_CONFIG, "/env.yml")
        assert resolve_priority_config_path(None) == "/env.yml"

    def test_none(self, monkeypatch):
        monkeypatch.delenv(Constants.ENV_PRIORITY_CONFIG, raising=False)
        assert resolve_priority_config_path(None) is None

    def test_get_priority_config_without_any(self, monkeypatch):
        monkeypatch.delenv(Constants.ENV_PRIORITY_CONFIG, raising=False)
        config = get_priority_config(argparse.Namespace(PRIORITY_CONFIG=None))
        assert config.entries == ()

    def test_get_priority_config_from_env(self, monkeypatch, tmp_path):
        path = tmp_path / "p.yml"
        path.write_text("- url: http://a\n  priority: 1001\n", encoding="utf-8")
        monkeypatch.setenv(Constants.ENV_PRIORITY_CONFIG, str(path))
        config = get_priority_config(argparse.Namespace(PRIORITY_CONFIG=None))
        assert config.lookup("http://a").priority == 1001
