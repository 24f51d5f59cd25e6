"""Per-dialect render strategies, selected once when a placeholder is discovered."""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from blogsmith.diagrams.interfaces import ImageLoader, LocalRenderer

if TYPE_CHECKING:
    from blogsmith.diagrams.context import Placeholder
    from blogsmith.diagrams.lifecycle import DiagramLifecycleManager

logger = logging.getLogger(__name__)


def new_diagram_id(prefix: str = "mermaid") -> str:
    """Fresh identifier for a single render call."""
    return f"{prefix}-{uuid.uuid4().hex[:9]}"


class RenderStrategy(ABC):
    @abstractmethod
    async def render(self, placeholder: Placeholder, manager: DiagramLifecycleManager) -> None:
        """Render the placeholder and finish it via manager.complete() or manager.fail()."""
        ...


class LocalRenderStrategy(RenderStrategy):
    """Renders source in the page via a LocalRenderer, with one auto-detect fallback."""

    def __init__(self, renderer: LocalRenderer | None) -> None:
        self.renderer = renderer

    async def render(self, placeholder: Placeholder, manager: DiagramLifecycleManager) -> None:
        source = placeholder.source
        if not source.strip():
            manager.fail(placeholder, ValueError("Empty diagram source"))
            return
        if self.renderer is None:
            manager.fail(placeholder, RuntimeError("No local diagram renderer configured"))
            return

        diagram_id = new_diagram_id(placeholder.dialect.value)
        manager.context.render_calls += 1
        try:
            markup = await self.renderer.render(diagram_id, source)
        except Exception as primary:
            logger.warning("%s render failed, trying auto-detect: %s", diagram_id, primary)
            manager.context.render_calls += 1
            try:
                markup = await self.renderer.run(source)
            except Exception as fallback:
                logger.error("%s fallback render failed: %s", diagram_id, fallback)
                manager.fail(placeholder, primary)
                return
        manager.complete(placeholder, markup)


class RemoteImageStrategy(RenderStrategy):
    """Loads the image the build phase pointed at and inlines SVG payloads.

    Without a loader the browser is assumed to fetch the <img> itself, so the
    placeholder only gets decorated and recoloured.
    """

    def __init__(self, loader: ImageLoader | None) -> None:
        self.loader = loader

    async def render(self, placeholder: Placeholder, manager: DiagramLifecycleManager) -> None:
        element = placeholder.element
        img = element.find("img")
        if img is None or not img.get("src"):
            if element.find("svg") is not None:
                manager.complete(placeholder, None)
            else:
                manager.fail(placeholder, ValueError("Diagram has no image reference"))
            return
        if self.loader is None:
            manager.complete(placeholder, None)
            return

        manager.context.render_calls += 1
        try:
            image = await self.loader.fetch(img["src"])
        except Exception as e:
            logger.error("Error loading %s diagram: %s", placeholder.dialect.value, e)
            manager.fail(placeholder, e)
            return

        if image.is_svg:
            manager.complete(placeholder, image.body.decode("utf-8", errors="replace"))
        else:
            manager.complete(placeholder, None)
