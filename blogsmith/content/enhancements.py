"""Post page enhancements: table of contents, reading time, code and image helpers."""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Sequence

from bs4 import BeautifulSoup, Tag

from blogsmith.config.models import PostConfig
from blogsmith.diagrams.theme import merge_style

logger = logging.getLogger(__name__)

HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]

# Pixels between the top of the viewport and the heading considered "current".
SCROLL_SPY_OFFSET = 120
BACK_TO_TOP_THRESHOLD = 300


def slugify(text: str) -> str:
    """URL-friendly heading slug."""
    slug = text.lower()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip()


def reading_progress(scroll_top: float, scroll_height: float, client_height: float) -> float:
    """Percent of the page scrolled, capped at 100; 0 when nothing can scroll."""
    room = scroll_height - client_height
    if room <= 0:
        return 0.0
    return max(0.0, min(scroll_top / room * 100, 100.0))


def active_heading_index(
    offsets: Sequence[float], scroll_y: float, offset: float = SCROLL_SPY_OFFSET
) -> int:
    """Index of the last heading above the scroll position, or -1."""
    position = scroll_y + offset
    for i in range(len(offsets) - 1, -1, -1):
        if offsets[i] <= position:
            return i
    return -1


def back_to_top_visible(scroll_y: float, threshold: float = BACK_TO_TOP_THRESHOLD) -> bool:
    return scroll_y > threshold


class PostEnhancer:
    """Rewrites a rendered post page in place."""

    def __init__(self, soup: BeautifulSoup, config: PostConfig | None = None) -> None:
        self.soup = soup
        self.config = config or PostConfig()

    @property
    def content(self) -> Tag | None:
        return self.soup.select_one(".post-content")

    def enhance(self) -> None:
        self.generate_toc()
        self.reading_time()
        self.add_copy_code_buttons()
        self.enhance_images()

    def headings(self) -> list[Tag]:
        content = self.content
        if content is None:
            return []
        return content.find_all(HEADING_TAGS)

    def generate_toc(self) -> int:
        """Fill ``#toc-nav`` with a nested list of the post's headings.

        Returns the number of headings listed. Headings without an id get
        ``<slug>-<index>``.
        """
        nav = self.soup.find(id="toc-nav")
        if nav is None or self.content is None:
            return 0

        headings = self.headings()
        if not headings:
            sidebar = self.soup.select_one(".toc-sidebar")
            if sidebar is not None:
                merge_style(sidebar, {"display": "none"})
            return 0

        for index, heading in enumerate(headings):
            if not heading.get("id"):
                heading["id"] = f"{slugify(heading.get_text())}-{index}"
            heading["data-anchor"] = f"#{heading['id']}"

        nav.clear()
        nav.append(self._build_toc(headings))
        logger.debug("Built table of contents with %d entries", len(headings))
        return len(headings)

    def _build_toc(self, headings: list[Tag]) -> Tag:
        root = self.soup.new_tag("ul")
        stack: list[tuple[int, Tag]] = [(int(headings[0].name[1]), root)]

        for index, heading in enumerate(headings):
            level = int(heading.name[1])
            while level > stack[-1][0]:
                parent = stack[-1][1]
                items = parent.find_all("li", recursive=False)
                host = items[-1] if items else parent
                sub = self.soup.new_tag("ul")
                host.append(sub)
                stack.append((stack[-1][0] + 1, sub))
            while level < stack[-1][0] and len(stack) > 1:
                stack.pop()

            li = self.soup.new_tag("li")
            link = self.soup.new_tag(
                "a",
                attrs={
                    "href": f"#{heading['id']}",
                    "class": f"toc-link toc-level-{level}",
                    "data-index": str(index),
                },
            )
            link.string = heading.get_text(strip=True)
            li.append(link)
            stack[-1][1].append(li)
        return root

    def reading_time(self) -> int | None:
        """Write ``"<n> min"`` into ``#reading-time``; returns the minutes."""
        target = self.soup.find(id="reading-time")
        content = self.content
        if target is None or content is None:
            return None
        words = len(content.get_text(" ").split())
        minutes = max(1, math.ceil(words / self.config.words_per_minute))
        target.string = f"{minutes} min"
        return minutes

    def add_copy_code_buttons(self) -> int:
        added = 0
        for code in self.soup.select("pre > code"):
            pre = code.parent
            if pre.find("button", class_="copy-code-btn") is not None:
                continue
            button = self.soup.new_tag(
                "button",
                attrs={"type": "button", "class": "copy-code-btn", "aria-label": "Copy code"},
            )
            button.string = "Copy"
            merge_style(pre, {"position": "relative"})
            pre.append(button)
            added += 1
        return added

    def enhance_images(self) -> int:
        images = self.soup.select(".post-content img")
        for img in images:
            img["data-lightbox"] = "true"
            merge_style(img, {"cursor": "zoom-in", "transition": "transform 0.3s ease"})
        return len(images)
