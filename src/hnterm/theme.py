"""Hacker News orange themes for the TUI, dark and light."""

import os

from textual.theme import Theme

HN_ORANGE = "#ff6600"

HN_DARK_THEME = Theme(
    name="hn-orange",
    primary=HN_ORANGE,
    secondary="#f6f6ef",
    accent="#ffb380",
    background="#1b1b18",
    surface="#24241f",
    panel="#2e2e28",
    warning="#d29922",
    error="#f85149",
    success="#3fb950",
    dark=True,
    variables={
        "footer-background": "#24241f",
        "footer-key-foreground": HN_ORANGE,
        "footer-description-foreground": "#828282",
        "scrollbar-background": "#24241f",
        "scrollbar-color": "#3a3a33",
        "scrollbar-color-hover": "#555548",
        "scrollbar-color-active": HN_ORANGE,
    },
)

HN_LIGHT_THEME = Theme(
    name="hn-orange-light",
    primary=HN_ORANGE,
    secondary="#000000",
    accent="#cc5200",
    background="#f6f6ef",
    surface="#ffffff",
    panel="#ecece2",
    warning="#9a6700",
    error="#cf222e",
    success="#1a7f37",
    dark=False,
    variables={
        "footer-background": HN_ORANGE,
        "footer-key-foreground": "#000000",
        "footer-description-foreground": "#1b1b18",
    },
)

THEMES = {t.name: t for t in (HN_DARK_THEME, HN_LIGHT_THEME)}

# dark theme name -> light variant
LIGHT_VARIANTS = {"hn-orange": "hn-orange-light"}


def resolve_theme_name(config: dict, term: str | None = None) -> str:
    """Pick the theme to apply, switching dark to light unless in the ghost terminal."""
    name = config.get("theme_name", HN_DARK_THEME.name)
    if name not in THEMES:
        name = HN_DARK_THEME.name
    if term is None:
        term = os.environ.get("TERM", "")
    if term == config.get("ghost_term_name"):
        return name
    if config.get("auto_switch_dark_to_light") and name in LIGHT_VARIANTS:
        return LIGHT_VARIANTS[name]
    return name
