"""
Colour themes for the terminal UI
"""
from dataclasses import dataclass
from typing import Dict

from ...core.constants import DEFAULT_THEME


@dataclass(frozen=True)
class Theme:
    name: str
    title: str
    selected_title: str
    selected_border: str
    selected_description: str
    description: str = "#777777"
    error: str = "red"
    muted: str = "grey50"
    bar_text: str = "#000000"
    input_background: str = "#343433"
    input_text: str = "#FFFDF5"


THEMES: Dict[str, Theme] = {
    "sky": Theme(
        name="sky",
        title="#4682b4",
        selected_title="#00bfff",
        selected_border="#00bfff",
        selected_description="#4682b4",
    ),
    "matrix": Theme(
        name="matrix",
        title="#648c11",
        selected_title="#9efd38",
        selected_border="#9efd38",
        selected_description="#648c11",
    ),
}


def get_theme(name: str) -> Theme:
    """Theme by name; unknown names fall back to the default theme"""
    return THEMES.get(name, THEMES[DEFAULT_THEME])
