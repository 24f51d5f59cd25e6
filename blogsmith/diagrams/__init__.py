"""Diagram subsystem: encoding, template tags, and the client-side lifecycle."""

from blogsmith.diagrams.backends import DirectorySink, HttpxImageLoader, KrokiRenderer
from blogsmith.diagrams.encoder import decode, diagram_url, encode, unwrap_markers, wrap_markers
from blogsmith.diagrams.errors import DiagramRenderError, ImageLoadError, InvalidTransition
from blogsmith.diagrams.lifecycle import DiagramLifecycleManager
from blogsmith.diagrams.models import DiagramBlock, Dialect, RenderMode, RenderState
from blogsmith.diagrams.tags import DiagramTagProcessor
from blogsmith.diagrams.viewport import Box, IntersectionWatcher, Viewport

__all__ = [
    "Box",
    "DiagramBlock",
    "DiagramLifecycleManager",
    "DiagramRenderError",
    "DiagramTagProcessor",
    "Dialect",
    "DirectorySink",
    "HttpxImageLoader",
    "ImageLoadError",
    "IntersectionWatcher",
    "InvalidTransition",
    "KrokiRenderer",
    "RenderMode",
    "RenderState",
    "Viewport",
    "decode",
    "diagram_url",
    "encode",
    "unwrap_markers",
    "wrap_markers",
]
