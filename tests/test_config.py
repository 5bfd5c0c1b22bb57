"""Tests for configuration loading."""

import pytest

from brewdeck.core.config import BrewdeckConfig, ConfigError, get_config, set_config


@pytest.fixture
def home(tmp_path, monkeypatch):
    monkeypatch.setenv("BREWDECK_HOME", str(tmp_path))
    set_config(None)
    yield tmp_path
    set_config(None)


class TestDefaults:
    def test_paths_follow_brewdeck_home(self, home):
        config = BrewdeckConfig.default()
        assert config.base_dir == home
        assert config.config_path == home / "config.yaml"
        assert config.log_path == home / "brewdeck.log"
        assert config.stale_after == 30.0
        assert config.blacklist_ttl == 120.0
        assert config.brew_executable == "brew"

    def test_get_config_is_cached(self, home):
        assert get_config() is get_config()

    def test_ensure_dirs(self, tmp_path):
        base = tmp_path / "nested" / "home"
        config = BrewdeckConfig(base, base / "config.yaml", base / "brewdeck.log")
        config.ensure_dirs()
        assert base.is_dir()


class TestConfigFile:
    def test_overrides(self, home):
        (home / "config.yaml").write_text(
            "brew_executable: /opt/homebrew/bin/brew\n"
            "stale_after: 60\n"
            "status_capacity: 3\n"
        )
        config = BrewdeckConfig.default()
        assert config.brew_executable == "/opt/homebrew/bin/brew"
        assert config.stale_after == 60.0
        assert isinstance(config.stale_after, float)
        assert config.status_capacity == 3

    def test_unknown_keys_ignored(self, home):
        (home / "config.yaml").write_text("theme: dark\n")
        assert BrewdeckConfig.default().tick_interval == 0.1

    def test_empty_file(self, home):
        (home / "config.yaml").write_text("")
        assert BrewdeckConfig.default().stale_after == 30.0

    @pytest.mark.parametrize(
        "content",
        [
            "stale_after: soon\n",
            "status_capacity: 2.5\n",
            "tick_interval: true\n",
            "brew_executable: 42\n",
        ],
    )
    def test_invalid_value(self, home, content):
        (home / "config.yaml").write_text(content)
        with pytest.raises(ConfigError):
            BrewdeckConfig.default()

    def test_not_a_mapping(self, home):
        (home / "config.yaml").write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            BrewdeckConfig.default()

    def test_unparsable(self, home):
        (home / "config.yaml").write_text("stale_after: [\n")
        with pytest.raises(ConfigError, match="Could not parse"):
            BrewdeckConfig.default()
