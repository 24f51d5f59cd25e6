"""DiagramLifecycleManager: discovers, lazily renders and decorates diagrams.

Works on a parsed HTML document standing in for the browser DOM. The host
feeds it events (viewport changes, clicks, key presses, theme changes) through
``dispatch``; everything runs on one event loop and mutates the document in
place.
"""

from __future__ import annotations

import asyncio
import binascii
import inspect
import logging
import time
import zlib
from collections.abc import Awaitable, Callable, Mapping
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup, Tag

from blogsmith.config.models import BlogsmithConfig
from blogsmith.diagrams.backends import DirectorySink, HttpxImageLoader, KrokiRenderer
from blogsmith.diagrams.context import PageContext, Placeholder
from blogsmith.diagrams.controls import (
    MODAL_CLASS,
    MODAL_CLOSE_CLASS,
    add_class,
    build_error_block,
    build_modal,
    find_wrapper,
    has_class,
    markup_nodes,
    extract_svg,
    svg_markup,
    wrap_with_controls,
)
from blogsmith.diagrams.encoder import decode, unwrap_markers
from blogsmith.diagrams.interfaces import Clipboard, FileSink, ImageLoader, LocalRenderer
from blogsmith.diagrams.models import Dialect, RenderMode, RenderState
from blogsmith.diagrams.strategies import (
    LocalRenderStrategy,
    RemoteImageStrategy,
    RenderStrategy,
)
from blogsmith.diagrams.tags import PLACEHOLDER_SELECTOR
from blogsmith.diagrams.theme import ThemeController
from blogsmith.diagrams.viewport import Box, IntersectionWatcher, Viewport

logger = logging.getLogger(__name__)

# Class names that identify a dialect when data-dialect is absent.
_CLASS_DIALECTS: dict[str, Dialect] = {
    "mermaid": Dialect.mermaid,
    "plantuml": Dialect.plantuml,
}


class DiagramLifecycleManager:
    """Drives every diagram placeholder on one page from discovery to decoration."""

    def __init__(
        self,
        soup: BeautifulSoup,
        config: BlogsmithConfig | None = None,
        *,
        renderer: LocalRenderer | None = None,
        loader: ImageLoader | None = None,
        clipboard: Clipboard | None = None,
        sink: FileSink | None = None,
        prefers_dark: bool = False,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.config = config or BlogsmithConfig()
        self.context = PageContext(soup=soup, clock=clock or time.time)
        self.clipboard = clipboard
        self.sink = sink
        self.prefers_dark = prefers_dark
        self.theme = ThemeController(soup, self.config.theme)
        self.watcher = IntersectionWatcher(
            root_margin=self.config.lifecycle.root_margin,
            threshold=self.config.lifecycle.threshold,
        )
        self._strategies: dict[RenderMode, RenderStrategy] = {
            RenderMode.local: LocalRenderStrategy(renderer),
            RenderMode.remote: RemoteImageStrategy(loader),
        }
        self._placeholders: dict[int, Placeholder] = {}
        self._modals: list[Tag] = []
        self._owned: list[Any] = []
        self._handlers: dict[str, Callable[..., Any]] = {
            "viewport": self._on_viewport,
            "color-scheme": self._on_color_scheme,
            "attribute": self._on_attribute,
            "click": self._on_click,
            "keydown": self._on_keydown,
        }
        self._actions: dict[str, Callable[[Tag], Any]] = {
            "fullscreen": self.show_fullscreen,
            "copy": self.copy_diagram,
            "download": self.download_diagram,
        }

    @classmethod
    def with_http_backends(
        cls,
        soup: BeautifulSoup,
        config: BlogsmithConfig | None = None,
        client: httpx.AsyncClient | None = None,
        **kwargs: Any,
    ) -> DiagramLifecycleManager:
        """Manager wired to a Kroki renderer and an httpx image loader.

        Backends created here are closed by ``close()``.
        """
        config = config or BlogsmithConfig()
        renderer = KrokiRenderer(config.diagrams, client)
        loader = HttpxImageLoader(config.diagrams, client)
        manager = cls(soup, config, renderer=renderer, loader=loader, **kwargs)
        manager._owned.extend([renderer, loader])
        return manager

    async def __aenter__(self) -> DiagramLifecycleManager:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    @property
    def soup(self) -> BeautifulSoup:
        return self.context.soup

    @property
    def placeholders(self) -> list[Placeholder]:
        return list(self._placeholders.values())

    def placeholder_for(self, element: Tag) -> Placeholder | None:
        return self._placeholders.get(id(element))

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def discover(self, boxes: Mapping[str, Box] | None = None) -> list[Placeholder]:
        """Register placeholders not seen before. Safe to call repeatedly.

        ``boxes`` maps element ids to their layout; placeholders with a box are
        handed to the intersection watcher, the rest wait for ``render_all``.
        """
        self.context.ensure_styles()
        found: list[Placeholder] = []
        for element in self.soup.select(PLACEHOLDER_SELECTOR):
            if element.get("data-rendered") == "true" or id(element) in self._placeholders:
                continue
            if any(isinstance(p, Tag) and has_class(p, MODAL_CLASS) for p in element.parents):
                continue
            dialect = self._dialect_of(element)
            if dialect is None:
                continue

            placeholder = Placeholder(
                element=element,
                dialect=dialect,
                strategy=self._strategies[dialect.render_mode],
                source=self._source_of(element, dialect),
            )
            element["data-render-state"] = placeholder.state.value
            self._placeholders[id(element)] = placeholder
            found.append(placeholder)

            box = boxes.get(element.get("id", "")) if boxes else None
            if box is not None:
                self.watcher.observe(element, box)

        logger.info("Discovered %d diagram placeholder(s)", len(found))
        return found

    def _dialect_of(self, element: Tag) -> Dialect | None:
        name = element.get("data-dialect")
        if not name:
            for cls_name, dialect in _CLASS_DIALECTS.items():
                if has_class(element, cls_name):
                    return dialect
            name = self.config.diagrams.default_dialect
        try:
            return Dialect.parse(name)
        except ValueError as e:
            logger.warning("Skipping diagram %s: %s", element.get("id", "?"), e)
            return None

    @staticmethod
    def _source_of(element: Tag, dialect: Dialect) -> str:
        if dialect.render_mode is RenderMode.local:
            return element.get_text()
        img = element.find("img")
        src = img.get("src", "") if img is not None else ""
        token = urlparse(src).path.rstrip("/").rsplit("/", 1)[-1]
        if not token:
            return src
        try:
            return unwrap_markers(decode(token), dialect)
        except (binascii.Error, zlib.error, UnicodeError, ValueError):
            return src

    # ------------------------------------------------------------------
    # Event dispatch
    # ------------------------------------------------------------------

    async def dispatch(self, event: str, **payload: Any) -> Any:
        handler = self._handlers.get(event)
        if handler is None:
            logger.debug("Ignoring unhandled event %r", event)
            return None
        result = handler(**payload)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def _on_viewport(self, viewport: Viewport) -> list[Placeholder]:
        queued: list[Placeholder] = []
        for entry in self.watcher.scan(viewport):
            self.watcher.unobserve(entry.target)
            placeholder = self._placeholders.get(id(entry.target))
            if placeholder is None or placeholder.state is not RenderState.pending:
                continue
            placeholder.advance(RenderState.queued)
            queued.append(placeholder)
        await self._render_queued(queued)
        return queued

    def _on_color_scheme(self, dark: bool) -> int:
        self.prefers_dark = dark
        return self.theme.apply(self.prefers_dark)

    def _on_attribute(self, name: str, value: str | None) -> int:
        if name != self.theme.config.attribute:
            return 0
        self.theme.set_mode(value)
        return self.theme.apply(self.prefers_dark)

    def _on_click(self, target: Tag) -> Awaitable[Any] | Any:
        action = target.get("data-action")
        if action:
            wrapper = find_wrapper(target)
            element = wrapper.select_one(PLACEHOLDER_SELECTOR) if wrapper is not None else None
            if element is None:
                logger.debug("Control %r clicked outside a diagram wrapper", action)
                return None
            handler = self._actions.get(action)
            if handler is None:
                logger.debug("Unknown control action %r", action)
                return None
            return handler(element)
        if has_class(target, MODAL_CLASS):
            self.close_modal(target)
        elif has_class(target, MODAL_CLOSE_CLASS):
            modal = next(
                (p for p in target.parents if isinstance(p, Tag) and has_class(p, MODAL_CLASS)),
                None,
            )
            if modal is not None:
                self.close_modal(modal)
        return None

    def _on_keydown(self, key: str) -> int:
        if key != "Escape":
            return 0
        closed = len(self._modals)
        for modal in list(self._modals):
            self.close_modal(modal)
        return closed

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    async def render_all(self) -> list[Placeholder]:
        """Render every pending placeholder now, regardless of visibility."""
        queued: list[Placeholder] = []
        for placeholder in self._placeholders.values():
            if placeholder.state is not RenderState.pending:
                continue
            self.watcher.unobserve(placeholder.element)
            placeholder.advance(RenderState.queued)
            queued.append(placeholder)
        await self._render_queued(queued)
        return queued

    async def _render_queued(self, queued: list[Placeholder]) -> None:
        if queued:
            await asyncio.gather(*(self._render(p) for p in queued))

    async def _render(self, placeholder: Placeholder) -> None:
        placeholder.advance(RenderState.rendering)
        try:
            await placeholder.strategy.render(placeholder, self)
        except Exception as e:
            logger.error(
                "Unexpected error rendering %s", placeholder.element.get("id", "?"), exc_info=True
            )
            if not placeholder.state.terminal:
                self.fail(placeholder, e)

    def complete(self, placeholder: Placeholder, markup: str | None) -> None:
        """Finish a render: swap in markup (if any), then decorate and recolour."""
        element = placeholder.element
        if markup is not None:
            placeholder.svg = extract_svg(markup)
            element.clear()
            for node in markup_nodes(markup):
                element.append(node)
        placeholder.advance(RenderState.rendered)
        element["data-rendered"] = "true"
        add_class(element, "diagram-rendered")
        self.context.rendered_count += 1
        self.decorate(element)
        self.theme.apply(self.prefers_dark, scope=[element])
        logger.info("Rendered %s diagram %s", placeholder.dialect.value, element.get("id", "?"))

    def fail(self, placeholder: Placeholder, error: BaseException) -> None:
        """Replace the placeholder with an inline error keeping the original source."""
        placeholder.advance(RenderState.failed)
        placeholder.error = str(error)
        if placeholder.dialect.render_mode is RenderMode.local:
            heading = f"{placeholder.dialect.label} Syntax Error"
        else:
            heading = f"{placeholder.dialect.label} Error"
        element = placeholder.element
        element.clear()
        element.append(build_error_block(self.soup, heading, placeholder.source, str(error)))
        logger.warning("Diagram %s failed: %s", element.get("id", "?"), error)

    # ------------------------------------------------------------------
    # Decoration and controls
    # ------------------------------------------------------------------

    def decorate(self, element: Tag) -> Tag:
        """Wrap a rendered diagram with fullscreen/copy/download controls (idempotent)."""
        wrapper, created = wrap_with_controls(self.soup, element)
        if created:
            logger.debug("Added controls to %s", element.get("id", "?"))
        return wrapper

    def show_fullscreen(self, element: Tag) -> Tag:
        modal, clone = build_modal(self.soup, element)
        self.context.body.append(modal)
        self._modals.append(modal)
        self.theme.apply(self.prefers_dark, scope=[clone])
        return modal

    def close_modal(self, modal: Tag) -> None:
        self._modals = [m for m in self._modals if m is not modal]
        modal.decompose()

    @property
    def open_modals(self) -> list[Tag]:
        return list(self._modals)

    async def copy_diagram(self, element: Tag) -> bool:
        """Copy the SVG markup, or the diagram source when there is no SVG."""
        placeholder = self.placeholder_for(element)
        markup = self._svg_for(element, placeholder)
        if markup is not None:
            text, message = markup, "Diagram copied to clipboard!"
        else:
            text = placeholder.source if placeholder is not None else element.get_text()
            message = "Diagram source copied to clipboard!"

        if self.clipboard is None:
            self._notify("Clipboard unavailable")
            return False
        try:
            await self.clipboard.write_text(text)
        except Exception:
            logger.error("Failed to copy diagram", exc_info=True)
            self._notify("Failed to copy diagram")
            return False
        self._notify(message)
        return True

    def download_diagram(self, element: Tag) -> Path | None:
        markup = self._svg_for(element, self.placeholder_for(element))
        if markup is None:
            self._notify("No SVG found to download")
            return None

        filename = f"diagram-{int(self.context.clock() * 1000)}.svg"
        sink = self.sink or DirectorySink(self.config.lifecycle.download_dir)
        try:
            path = sink.save(filename, markup.encode("utf-8"), "image/svg+xml")
        except Exception:
            logger.error("Failed to download diagram", exc_info=True)
            self._notify("Failed to download diagram")
            return None
        self._notify("Diagram downloaded!")
        return path

    @staticmethod
    def _svg_for(element: Tag, placeholder: Placeholder | None) -> str | None:
        raw = placeholder.svg if placeholder is not None else None
        return svg_markup(element, raw)

    def _notify(self, message: str) -> None:
        self.context.notify(message, self.config.lifecycle.notification_seconds)

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    async def close(self) -> None:
        if self.context.closed:
            return
        self.watcher.disconnect()
        for modal in list(self._modals):
            self.close_modal(modal)
        for backend in self._owned:
            await backend.aclose()
        self._owned.clear()
        self.context.closed = True
        logger.debug(
            "Lifecycle closed: %d rendered, %d render call(s)",
            self.context.rendered_count,
            self.context.render_calls,
        )
