"""Tests for hnterm.theme — theme selection."""

from hnterm.config import DEFAULTS
from hnterm.theme import HN_DARK_THEME, HN_LIGHT_THEME, HN_ORANGE, THEMES, resolve_theme_name


def _config(**overrides):
    config = dict(DEFAULTS)
    config.update(overrides)
    return config


class TestThemes:
    def test_registered_by_name(self):
        assert THEMES["hn-orange"] is HN_DARK_THEME
        assert THEMES["hn-orange-light"] is HN_LIGHT_THEME

    def test_orange_primary(self):
        assert HN_DARK_THEME.primary == HN_ORANGE
        assert HN_DARK_THEME.dark is True
        assert HN_LIGHT_THEME.dark is False


class TestResolveThemeName:
    def test_default(self):
        assert resolve_theme_name(_config(), term="xterm") == "hn-orange"

    def test_auto_switch(self):
        config = _config(auto_switch_dark_to_light=True)
        assert resolve_theme_name(config, term="xterm-256color") == "hn-orange-light"

    def test_ghost_terminal_keeps_dark(self):
        config = _config(auto_switch_dark_to_light=True)
        assert resolve_theme_name(config, term="xterm-ghostty") == "hn-orange"

    def test_light_theme_unchanged(self):
        config = _config(theme_name="hn-orange-light", auto_switch_dark_to_light=True)
        assert resolve_theme_name(config, term="xterm") == "hn-orange-light"

    def test_unknown_theme_falls_back(self):
        assert resolve_theme_name(_config(theme_name="solarized"), term="xterm") == "hn-orange"

    def test_reads_term_from_environment(self, monkeypatch):
        monkeypatch.setenv("TERM", "xterm-ghostty")
        config = _config(auto_switch_dark_to_light=True)
        assert resolve_theme_name(config) == "hn-orange"
