"""Exceptions raised by the diagram subsystem."""

from __future__ import annotations

from blogsmith.diagrams.models import RenderState


class DiagramRenderError(Exception):
    """Wraps a renderer-specific failure with context."""

    def __init__(self, dialect: str, operation: str, cause: Exception) -> None:
        self.dialect = dialect
        self.operation = operation
        super().__init__(f"{dialect} {operation} failed: {cause}")
        self.__cause__ = cause


class ImageLoadError(Exception):
    """Raised when a diagram image cannot be fetched from the rendering service."""

    def __init__(
        self, url: str, cause: Exception | None = None, status_code: int | None = None
    ) -> None:
        self.url = url
        self.status_code = status_code
        if status_code is not None:
            msg = f"GET {url} returned HTTP {status_code}"
        else:
            msg = f"GET {url} failed: {cause}"
        super().__init__(msg)
        if cause is not None:
            self.__cause__ = cause


class InvalidTransition(Exception):
    """Raised on a render state change the lifecycle does not allow."""

    def __init__(self, current: RenderState, target: RenderState) -> None:
        self.current = current
        self.target = target
        super().__init__(f"Cannot move placeholder from {current.value} to {target.value}")
