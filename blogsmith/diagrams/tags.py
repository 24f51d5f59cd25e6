"""Block template tags that turn diagram source into placeholder HTML."""

from __future__ import annotations

import html
import logging
import re

from blogsmith.config.models import DiagramConfig
from blogsmith.content.pipeline import Transform
from blogsmith.diagrams.encoder import diagram_url
from blogsmith.diagrams.models import DiagramBlock, Dialect, RenderMode

logger = logging.getLogger(__name__)

# Tags whose dialect is fixed by the tag name. `kroki` takes it from its argument.
_TAG_DIALECTS: dict[str, Dialect] = {
    "plantuml": Dialect.plantuml,
    "c4plantuml": Dialect.c4plantuml,
    "graphviz": Dialect.graphviz,
    "svgbob": Dialect.svgbob,
    "ditaa": Dialect.ditaa,
    "d2": Dialect.d2,
    "mermaid": Dialect.mermaid,
}

KROKI_TAG = "kroki"

# {% name args %}body{% endname %} for diagram tags only, with optional Liquid
# whitespace dashes. Other block tags (if, for, capture, ...) are never consumed,
# so diagram tags nested inside them still match.
_BLOCK_RE = re.compile(
    r"\{%-?\s*("
    + "|".join(sorted([*_TAG_DIALECTS, KROKI_TAG], key=len, reverse=True))
    + r")\b([^%]*?)\s*-?%\}(.*?)\{%-?\s*end\1\s*-?%\}",
    re.DOTALL,
)

# Elements the lifecycle manager treats as diagram placeholders.
PLACEHOLDER_SELECTOR = ".mermaid, .plantuml, .kroki-diagram"

_REMOTE_TEMPLATE = """\
<div class="diagram-container">
  <div id="{element_id}" class="kroki-diagram" data-dialect="{dialect}">
    <img src="{url}" alt="{label} Diagram" loading="lazy" \
style="max-width: 100%; height: auto; display: block; margin: 0 auto;" />
  </div>
</div>"""

_LOCAL_TEMPLATE = """\
<div class="{dialect}-diagram">
  <div id="{element_id}" class="{dialect}" data-dialect="{dialect}">{source}</div>
</div>"""


def supported_tags() -> list[str]:
    return sorted([*_TAG_DIALECTS, KROKI_TAG])


class DiagramTagProcessor(Transform):
    """Replaces diagram block tags with placeholder markup."""

    def __init__(self, config: DiagramConfig | None = None) -> None:
        self.config = config or DiagramConfig()
        self.blocks: list[DiagramBlock] = []

    def apply(self, content: str, metadata: dict) -> str:
        return _BLOCK_RE.sub(self._replace, content)

    def parse_tag(self, name: str, args: str, body: str) -> DiagramBlock | None:
        """Build a DiagramBlock from a tag match, or None if the tag isn't ours."""
        if name == KROKI_TAG:
            dialect = Dialect.parse(args, default=self.config.default_dialect)
        elif name in _TAG_DIALECTS:
            dialect = _TAG_DIALECTS[name]
        else:
            return None
        return DiagramBlock(dialect=dialect, source=body.strip())

    def render_block(self, block: DiagramBlock) -> str:
        if block.dialect.render_mode is RenderMode.local:
            return _LOCAL_TEMPLATE.format(
                dialect=block.dialect.value,
                element_id=block.element_id,
                source=html.escape(block.source, quote=False),
            )
        url = diagram_url(block, self.config.kroki_url, self.config.output_format)
        return _REMOTE_TEMPLATE.format(
            element_id=block.element_id,
            dialect=block.dialect.value,
            url=html.escape(url),
            label=block.dialect.label,
        )

    def _replace(self, m: re.Match) -> str:
        name, args, body = m.group(1), m.group(2), m.group(3)
        try:
            block = self.parse_tag(name, args, body)
        except ValueError as e:
            logger.warning("Skipping %s tag: %s", name, e)
            return m.group(0)
        if block is None:
            return m.group(0)
        self.blocks.append(block)
        logger.debug("Rendered %s tag as %s", name, block.element_id)
        return self.render_block(block)
