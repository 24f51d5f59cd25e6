"""Protocols for the collaborators the lifecycle manager talks to."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import BaseModel


class LoadedImage(BaseModel):
    """Payload returned by the rendering service."""

    url: str
    content_type: str
    body: bytes

    @property
    def is_svg(self) -> bool:
        if "svg" in self.content_type:
            return True
        head = self.body[:256].lstrip()
        return head.startswith(b"<svg") or (head.startswith(b"<?xml") and b"<svg" in self.body)


@runtime_checkable
class LocalRenderer(Protocol):
    """Renders diagram source to markup inside the page."""

    async def render(self, diagram_id: str, source: str) -> str: ...

    async def run(self, source: str) -> str:
        """Render with automatic dialect detection."""
        ...


@runtime_checkable
class ImageLoader(Protocol):
    async def fetch(self, url: str) -> LoadedImage: ...


@runtime_checkable
class Clipboard(Protocol):
    async def write_text(self, text: str) -> None: ...


@runtime_checkable
class FileSink(Protocol):
    def save(self, filename: str, data: bytes, media_type: str) -> Path: ...
