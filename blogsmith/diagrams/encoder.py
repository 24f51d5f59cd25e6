"""Diagram source to URL token encoding (deflate + URL-safe base64)."""

from __future__ import annotations

import base64
import zlib

from blogsmith.diagrams.models import DiagramBlock, Dialect

_START_MARKER = "@startuml"
_END_MARKER = "@enduml"


def wrap_markers(source: str, dialect: Dialect) -> str:
    """Wrap PlantUML-family source in @startuml/@enduml unless already wrapped."""
    if not dialect.uses_uml_markers or _START_MARKER in source:
        return source
    return f"{_START_MARKER}\n{source}\n{_END_MARKER}"


def unwrap_markers(text: str, dialect: Dialect) -> str:
    """Undo wrap_markers(): drop the @startuml/@enduml pair it would have added."""
    head, tail = f"{_START_MARKER}\n", f"\n{_END_MARKER}"
    if not dialect.uses_uml_markers or len(text) < len(head) + len(tail):
        return text
    if not (text.startswith(head) and text.endswith(tail)):
        return text
    inner = text[len(head) : len(text) - len(tail)]
    return inner if wrap_markers(inner, dialect) == text else text


def encode(source: str, dialect: Dialect) -> str:
    """Compress and encode diagram source into a URL path segment.

    zlib at level 9, then base64 with the ``-``/``_`` alphabet and the
    trailing padding removed.
    """
    text = wrap_markers(source, dialect)
    compressed = zlib.compress(text.encode("utf-8"), 9)
    return base64.urlsafe_b64encode(compressed).decode("ascii").rstrip("=")


def decode(token: str) -> str:
    """Inverse of encode(); returns the (marker-wrapped) source text."""
    padded = token + "=" * (-len(token) % 4)
    compressed = base64.urlsafe_b64decode(padded.encode("ascii"))
    return zlib.decompress(compressed).decode("utf-8")


def diagram_url(
    block: DiagramBlock,
    base_url: str = "https://kroki.io",
    output_format: str = "svg",
) -> str:
    """Build the GET URL for a block on the rendering service."""
    token = encode(block.source, block.dialect)
    return f"{base_url.rstrip('/')}/{block.dialect.value}/{output_format}/{token}"
