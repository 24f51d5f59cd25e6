"""Shared test fixtures for blogsmith."""

import pytest

from blogsmith.config.models import BlogsmithConfig
from blogsmith.diagrams.models import DiagramBlock, Dialect

from fakes import MERMAID_SOURCE, FakeClipboard, FakeClock, FakeRenderer


@pytest.fixture
def sample_config():
    return BlogsmithConfig()


@pytest.fixture
def mermaid_block():
    return DiagramBlock(dialect=Dialect.mermaid, source=MERMAID_SOURCE)


@pytest.fixture
def graphviz_block():
    return DiagramBlock(dialect=Dialect.graphviz, source="digraph G { Hello -> World }")


@pytest.fixture
def fake_renderer():
    return FakeRenderer()


@pytest.fixture
def fake_clipboard():
    return FakeClipboard()


@pytest.fixture
def fake_clock():
    return FakeClock()
