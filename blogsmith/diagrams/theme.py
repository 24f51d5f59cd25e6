"""Keeps rendered diagram text legible across light and dark themes."""

from __future__ import annotations

import logging

from bs4 import BeautifulSoup, Tag

from blogsmith.config.models import ThemeConfig
from blogsmith.diagrams.tags import PLACEHOLDER_SELECTOR

logger = logging.getLogger(__name__)

_TEXT_SELECTOR = "svg text"
_NOTE_SELECTOR = 'svg .note text, svg text[class*="note"]'


def parse_style(style: str) -> dict[str, str]:
    """Split an inline style attribute into an ordered dict of declarations."""
    decls: dict[str, str] = {}
    for part in style.split(";"):
        prop, sep, value = part.partition(":")
        if sep and prop.strip():
            decls[prop.strip().lower()] = value.strip()
    return decls


def merge_style(tag: Tag, updates: dict[str, str]) -> None:
    decls = parse_style(tag.get("style", ""))
    decls.update(updates)
    tag["style"] = "; ".join(f"{k}: {v}" for k, v in decls.items())


class ThemeController:
    """Applies theme colours to the text nodes of rendered diagrams.

    The theme attribute on ``<html>`` (``data-mode`` by default) wins when it
    is set to ``dark`` or ``light``; otherwise the system colour-scheme
    preference decides.
    """

    def __init__(self, soup: BeautifulSoup, config: ThemeConfig | None = None) -> None:
        self.soup = soup
        self.config = config or ThemeConfig()
        root = soup.find("html")
        self._mode: str | None = root.get(self.config.attribute) if root else None

    @property
    def mode(self) -> str | None:
        return self._mode

    def set_mode(self, value: str | None) -> None:
        """Record a theme attribute change, mirroring it onto ``<html>`` when present."""
        self._mode = value
        root = self.soup.find("html")
        if root is None:
            return
        if value is None:
            root.attrs.pop(self.config.attribute, None)
        else:
            root[self.config.attribute] = value

    def is_dark(self, prefers_dark: bool = False) -> bool:
        if self._mode in ("dark", "light"):
            return self._mode == "dark"
        return prefers_dark

    def apply(self, prefers_dark: bool = False, scope: list[Tag] | None = None) -> int:
        """Restyle diagram text; returns the number of text nodes touched."""
        dark = self.is_dark(prefers_dark)
        text_color = self.config.dark_text if dark else self.config.light_text
        note_color = self.config.dark_note if dark else self.config.light_note

        containers = scope if scope is not None else self.soup.select(PLACEHOLDER_SELECTOR)
        touched = 0
        for container in containers:
            for text in container.select(_TEXT_SELECTOR):
                merge_style(text, {"fill": text_color, "font-weight": self.config.font_weight})
                touched += 1
            for note in container.select(_NOTE_SELECTOR):
                merge_style(note, {"fill": note_color, "font-size": self.config.note_font_size})

        logger.debug(
            "Adapted %d diagram text node(s) for %s mode", touched, "dark" if dark else "light"
        )
        return touched
