"""httpx-backed renderer and image loader, plus a filesystem download sink."""

from __future__ import annotations

import logging
import re
import textwrap
from pathlib import Path

import httpx

from blogsmith.config.models import DiagramConfig
from blogsmith.diagrams.encoder import wrap_markers
from blogsmith.diagrams.errors import DiagramRenderError, ImageLoadError
from blogsmith.diagrams.interfaces import LoadedImage
from blogsmith.diagrams.models import Dialect

logger = logging.getLogger(__name__)

_MERMAID_KEYWORDS = (
    "graph",
    "flowchart",
    "sequenceDiagram",
    "classDiagram",
    "stateDiagram",
    "erDiagram",
    "gantt",
    "pie",
    "journey",
    "gitGraph",
    "mindmap",
    "timeline",
)

_GRAPHVIZ_RE = re.compile(r'^(strict\s+)?(di)?graph\s*("[^"]*"|\w+)?\s*\{', re.IGNORECASE)
_SVG_OPEN_RE = re.compile(r"<svg\b[^>]*>")


def detect_dialect(source: str) -> Dialect:
    """Guess the dialect from the first meaningful line of the source."""
    text = textwrap.dedent(source).strip()
    if text.startswith("@start"):
        return Dialect.c4plantuml if "!include <C4" in text else Dialect.plantuml
    if _GRAPHVIZ_RE.match(text):
        return Dialect.graphviz
    first = text.split(maxsplit=1)[0] if text else ""
    if first.startswith(_MERMAID_KEYWORDS) or first.startswith("%%"):
        return Dialect.mermaid
    if text.startswith("{") and "signal" in text:
        return Dialect.wavedrom
    return Dialect.mermaid


def _tag_svg(svg: str, diagram_id: str) -> str:
    m = _SVG_OPEN_RE.search(svg)
    if m is None or re.search(r"\sid=", m.group(0)):
        return svg
    return svg[: m.start()] + f'<svg id="{diagram_id}"' + svg[m.start() + 4 :]


class _HttpxBackend:
    """Shares one AsyncClient; closes it only if it created it."""

    def __init__(self, config: DiagramConfig, client: httpx.AsyncClient | None = None) -> None:
        self.config = config
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=config.timeout, follow_redirects=True
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


class KrokiRenderer(_HttpxBackend):
    """Renders source by POSTing it to a Kroki server.

    Stands in for the in-browser diagram library: ``render`` targets a fixed
    dialect, ``run`` sniffs the dialect from the source first.
    """

    def __init__(
        self,
        config: DiagramConfig,
        client: httpx.AsyncClient | None = None,
        dialect: Dialect = Dialect.mermaid,
    ) -> None:
        super().__init__(config, client)
        self.dialect = dialect

    async def render(self, diagram_id: str, source: str) -> str:
        svg = await self._post(self.dialect, source, "render")
        return _tag_svg(svg, diagram_id)

    async def run(self, source: str) -> str:
        text = textwrap.dedent(source).strip()
        dialect = detect_dialect(text)
        logger.debug("Auto-detected %s for fallback render", dialect.value)
        return await self._post(dialect, wrap_markers(text, dialect), "run")

    async def _post(self, dialect: Dialect, source: str, operation: str) -> str:
        url = f"{self.config.kroki_url.rstrip('/')}/{dialect.value}/svg"
        try:
            resp = await self._client.post(
                url,
                content=source.encode("utf-8"),
                headers={"Content-Type": "text/plain"},
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            detail = e.response.text.strip()[:200]
            raise DiagramRenderError(
                dialect.value, operation, ValueError(detail or str(e))
            ) from e
        except httpx.HTTPError as e:
            raise DiagramRenderError(dialect.value, operation, e) from e
        return resp.text


class HttpxImageLoader(_HttpxBackend):
    """Fetches rendered diagram images over HTTP GET."""

    async def fetch(self, url: str) -> LoadedImage:
        try:
            resp = await self._client.get(url)
        except httpx.HTTPError as e:
            raise ImageLoadError(url, cause=e) from e
        if not resp.is_success:
            raise ImageLoadError(url, status_code=resp.status_code)
        return LoadedImage(
            url=url,
            content_type=resp.headers.get("content-type", ""),
            body=resp.content,
        )


class DirectorySink:
    """Writes downloaded diagrams into a directory."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def save(self, filename: str, data: bytes, media_type: str) -> Path:
        safe_name = Path(filename).name or "diagram"
        dest = self.directory / safe_name
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(data)
        logger.info("wrote %s (%d bytes, %s)", dest, len(data), media_type)
        return dest
