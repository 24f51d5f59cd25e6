"""Test doubles for the lifecycle manager's collaborators."""

from bs4 import BeautifulSoup

from blogsmith.diagrams.interfaces import LoadedImage
from blogsmith.diagrams.models import DiagramBlock
from blogsmith.diagrams.tags import DiagramTagProcessor

SAMPLE_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 100 40">'
    '<g><text x="5" y="15">Alice</text>'
    '<g class="note"><text x="5" y="30">remember</text></g></g>'
    "</svg>"
)

# Renderer output with camelCase SVG names, an XML prolog and no namespace.
CAMEL_SVG = (
    '<?xml version="1.0" encoding="UTF-8"?>'
    '<svg viewBox="0 0 100 40" preserveAspectRatio="xMidYMid meet">'
    '<defs><linearGradient id="g"/></defs>'
    '<foreignObject width="10"><div>label</div></foreignObject>'
    "</svg>"
)

MERMAID_SOURCE = "graph TD\n    A[Start] --> B{Ready?}\n    B -->|yes| C[Ship]"


class FakeRenderer:
    """LocalRenderer double that records calls and can fail on demand."""

    def __init__(self, svg=SAMPLE_SVG, fail_render=False, fail_run=False):
        self.svg = svg
        self.fail_render = fail_render
        self.fail_run = fail_run
        self.render_calls = []
        self.run_calls = []

    async def render(self, diagram_id, source):
        self.render_calls.append((diagram_id, source))
        if self.fail_render:
            raise ValueError("Parse error on line 2")
        return self.svg

    async def run(self, source):
        self.run_calls.append(source)
        if self.fail_run:
            raise ValueError("No diagram type detected")
        return self.svg


class FakeLoader:
    def __init__(self, body=SAMPLE_SVG.encode(), content_type="image/svg+xml", error=None):
        self.body = body
        self.content_type = content_type
        self.error = error
        self.urls = []

    async def fetch(self, url):
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return LoadedImage(url=url, content_type=self.content_type, body=self.body)


class FakeClipboard:
    def __init__(self, fail=False):
        self.fail = fail
        self.texts = []

    async def write_text(self, text):
        if self.fail:
            raise PermissionError("Clipboard permission denied")
        self.texts.append(text)


class FakeClock:
    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


def make_page(*blocks: DiagramBlock, extra: str = "") -> BeautifulSoup:
    """Full HTML page holding the placeholder markup for ``blocks``."""
    processor = DiagramTagProcessor()
    body = "\n".join(processor.render_block(b) for b in blocks)
    return BeautifulSoup(
        "<html><head><title>post</title></head><body>"
        f'<div class="post-content">{body}{extra}</div>'
        "</body></html>",
        "html.parser",
    )
