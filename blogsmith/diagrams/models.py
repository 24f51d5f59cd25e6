"""Pydantic models and enums for the diagram subsystem."""

from __future__ import annotations

import hashlib
from enum import Enum

from pydantic import BaseModel, ConfigDict


class RenderMode(str, Enum):
    """Where a dialect gets turned into an image."""

    local = "local"
    remote = "remote"


class Dialect(str, Enum):
    """Diagram description languages understood by the rendering backends."""

    plantuml = "plantuml"
    c4plantuml = "c4plantuml"
    graphviz = "graphviz"
    svgbob = "svgbob"
    ditaa = "ditaa"
    erd = "erd"
    nomnoml = "nomnoml"
    blockdiag = "blockdiag"
    seqdiag = "seqdiag"
    actdiag = "actdiag"
    nwdiag = "nwdiag"
    d2 = "d2"
    wavedrom = "wavedrom"
    mermaid = "mermaid"

    @classmethod
    def parse(cls, name: str, default: Dialect | str = "plantuml") -> Dialect:
        """Resolve a tag argument or CLI flag to a Dialect.

        Empty names fall back to ``default``. Raises ValueError for unknown names.
        """
        fallback = default.value if isinstance(default, Dialect) else default
        key = name.strip().lower() or fallback.lower()
        key = _ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise ValueError(
                f"Unknown diagram dialect: {name!r}. "
                f"Supported: {', '.join(d.value for d in cls)}"
            ) from None

    @property
    def render_mode(self) -> RenderMode:
        if self is Dialect.mermaid:
            return RenderMode.local
        return RenderMode.remote

    @property
    def uses_uml_markers(self) -> bool:
        return self in (Dialect.plantuml, Dialect.c4plantuml)

    @property
    def label(self) -> str:
        """Human-readable name used in alt text and error headings."""
        return _LABELS.get(self, self.value.capitalize())


_ALIASES: dict[str, str] = {
    "dot": "graphviz",
    "puml": "plantuml",
    "uml": "plantuml",
    "c4": "c4plantuml",
}

_LABELS: dict[Dialect, str] = {
    Dialect.plantuml: "PlantUML",
    Dialect.c4plantuml: "C4 PlantUML",
    Dialect.graphviz: "Graphviz",
    Dialect.svgbob: "Svgbob",
    Dialect.d2: "D2",
    Dialect.wavedrom: "WaveDrom",
    Dialect.mermaid: "Mermaid",
}


class RenderState(str, Enum):
    """Per-placeholder rendering state."""

    pending = "pending"
    queued = "queued"
    rendering = "rendering"
    rendered = "rendered"
    failed = "failed"

    @property
    def terminal(self) -> bool:
        return self in (RenderState.rendered, RenderState.failed)


# Allowed forward edges; terminal states have none.
TRANSITIONS: dict[RenderState, frozenset[RenderState]] = {
    RenderState.pending: frozenset({RenderState.queued}),
    RenderState.queued: frozenset({RenderState.rendering}),
    RenderState.rendering: frozenset({RenderState.rendered, RenderState.failed}),
    RenderState.rendered: frozenset(),
    RenderState.failed: frozenset(),
}


class DiagramBlock(BaseModel):
    """A diagram as written in a post: dialect plus raw source text."""

    model_config = ConfigDict(frozen=True)

    dialect: Dialect
    source: str

    @property
    def identity(self) -> str:
        digest = hashlib.sha1(f"{self.dialect.value}\n{self.source}".encode("utf-8"))
        return digest.hexdigest()[:8]

    @property
    def element_id(self) -> str:
        if self.dialect.render_mode is RenderMode.local:
            return f"{self.dialect.value}-{self.identity}"
        return f"kroki-{self.dialect.value}-{self.identity}"
