"""Per-page state owned by a DiagramLifecycleManager."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from bs4 import BeautifulSoup, Tag

from blogsmith.diagrams.errors import InvalidTransition
from blogsmith.diagrams.models import TRANSITIONS, Dialect, RenderState

if TYPE_CHECKING:
    from blogsmith.diagrams.strategies import RenderStrategy

logger = logging.getLogger(__name__)

STYLE_ELEMENT_ID = "blogsmith-diagram-styles"

DIAGRAM_STYLES = """
.diagram-error {
    background: #fee2e2;
    border: 1px solid #fecaca;
    color: #991b1b;
    padding: 1rem;
    border-radius: 8px;
    margin: 1rem 0;
}
.diagram-error h4 { margin: 0 0 0.5rem 0; font-size: 1.1rem; }
.diagram-error p { margin: 0.5rem 0; }
.diagram-error pre {
    background: #f9fafb;
    padding: 0.5rem;
    border-radius: 4px;
    overflow-x: auto;
    font-size: 0.9rem;
}
.diagram-notification {
    position: fixed;
    top: 20px;
    right: 20px;
    background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
    color: white;
    padding: 12px 24px;
    border-radius: 8px;
    z-index: 10000;
}
"""


@dataclass
class Placeholder:
    """A discovered diagram element and where it is in its render lifecycle."""

    element: Tag
    dialect: Dialect
    strategy: RenderStrategy
    source: str
    state: RenderState = RenderState.pending
    error: str | None = None
    # Renderer output as produced, for copy/download.
    svg: str | None = None

    def advance(self, target: RenderState) -> None:
        if target not in TRANSITIONS[self.state]:
            raise InvalidTransition(self.state, target)
        logger.debug("%s: %s -> %s", self.element.get("id", "?"), self.state.value, target.value)
        self.state = target
        self.element["data-render-state"] = target.value


@dataclass
class Notification:
    element: Tag
    message: str
    expires_at: float


@dataclass
class PageContext:
    """Everything the manager mutates for one page.

    Built on page load and dropped on navigation; nothing here outlives the
    document it was created for.
    """

    soup: BeautifulSoup
    clock: Callable[[], float] = time.time
    rendered_count: int = 0
    render_calls: int = 0
    styles_injected: bool = False
    notifications: list[Notification] = field(default_factory=list)
    closed: bool = False

    @property
    def body(self) -> Tag:
        return self.soup.body or self.soup

    def ensure_styles(self) -> None:
        """Inject the diagram stylesheet once per page."""
        if self.styles_injected or self.soup.find(id=STYLE_ELEMENT_ID) is not None:
            self.styles_injected = True
            return
        style = self.soup.new_tag("style", attrs={"id": STYLE_ELEMENT_ID})
        style.string = DIAGRAM_STYLES
        head = self.soup.head
        if head is not None:
            head.append(style)
        else:
            self.soup.insert(0, style)
        self.styles_injected = True

    def notify(self, message: str, duration: float = 3.0) -> Notification:
        """Show a transient on-page notice."""
        el = self.soup.new_tag("div", attrs={"class": "diagram-notification", "role": "status"})
        el.string = message
        self.body.append(el)
        note = Notification(element=el, message=message, expires_at=self.clock() + duration)
        self.notifications.append(note)
        logger.info("notification: %s", message)
        return note

    def prune(self, now: float | None = None) -> int:
        """Remove expired notifications; returns how many were removed."""
        now = self.clock() if now is None else now
        expired = [n for n in self.notifications if n.expires_at <= now]
        for n in expired:
            n.element.decompose()
            self.notifications.remove(n)
        return len(expired)
