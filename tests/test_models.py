"""Tests for dialects, render states and diagram blocks."""

import pytest
from pydantic import ValidationError

from blogsmith.diagrams.models import (
    TRANSITIONS,
    DiagramBlock,
    Dialect,
    RenderMode,
    RenderState,
)


# ---------------------------------------------------------------------------
# Dialect
# ---------------------------------------------------------------------------


class TestDialectParse:
    def test_exact_name(self):
        assert Dialect.parse("graphviz") is Dialect.graphviz

    def test_case_and_whitespace_insensitive(self):
        assert Dialect.parse("  D2 ") is Dialect.d2

    @pytest.mark.parametrize(
        "alias,expected",
        [
            ("dot", Dialect.graphviz),
            ("puml", Dialect.plantuml),
            ("uml", Dialect.plantuml),
            ("c4", Dialect.c4plantuml),
        ],
    )
    def test_aliases(self, alias, expected):
        assert Dialect.parse(alias) is expected

    def test_empty_uses_default(self):
        assert Dialect.parse("") is Dialect.plantuml
        assert Dialect.parse("", default="svgbob") is Dialect.svgbob

    def test_enum_default(self):
        assert Dialect.parse(" ", default=Dialect.ditaa) is Dialect.ditaa

    def test_unknown_raises(self):
        with pytest.raises(ValueError, match="Unknown diagram dialect"):
            Dialect.parse("visio")


class TestDialectProperties:
    def test_only_mermaid_is_local(self):
        local = [d for d in Dialect if d.render_mode is RenderMode.local]
        assert local == [Dialect.mermaid]

    def test_uml_markers(self):
        assert Dialect.plantuml.uses_uml_markers
        assert Dialect.c4plantuml.uses_uml_markers
        assert not Dialect.graphviz.uses_uml_markers

    def test_labels(self):
        assert Dialect.plantuml.label == "PlantUML"
        assert Dialect.mermaid.label == "Mermaid"
        assert Dialect.erd.label == "Erd"


# ---------------------------------------------------------------------------
# RenderState
# ---------------------------------------------------------------------------


class TestRenderState:
    def test_terminal_states(self):
        assert RenderState.rendered.terminal
        assert RenderState.failed.terminal
        assert not RenderState.rendering.terminal

    def test_terminal_states_have_no_exits(self):
        assert TRANSITIONS[RenderState.rendered] == frozenset()
        assert TRANSITIONS[RenderState.failed] == frozenset()

    def test_forward_only(self):
        assert RenderState.queued in TRANSITIONS[RenderState.pending]
        assert RenderState.pending not in TRANSITIONS[RenderState.queued]

    def test_every_state_has_an_entry(self):
        assert set(TRANSITIONS) == set(RenderState)


# ---------------------------------------------------------------------------
# DiagramBlock
# ---------------------------------------------------------------------------


class TestDiagramBlock:
    def test_identity_is_stable(self):
        a = DiagramBlock(dialect=Dialect.graphviz, source="digraph { a -> b }")
        b = DiagramBlock(dialect=Dialect.graphviz, source="digraph { a -> b }")
        assert a.identity == b.identity
        assert len(a.identity) == 8

    def test_identity_depends_on_dialect(self):
        a = DiagramBlock(dialect=Dialect.plantuml, source="A -> B")
        b = DiagramBlock(dialect=Dialect.c4plantuml, source="A -> B")
        assert a.identity != b.identity

    def test_element_id_local(self):
        block = DiagramBlock(dialect=Dialect.mermaid, source="graph TD; A-->B")
        assert block.element_id == f"mermaid-{block.identity}"

    def test_element_id_remote(self):
        block = DiagramBlock(dialect=Dialect.svgbob, source="+--+")
        assert block.element_id == f"kroki-svgbob-{block.identity}"

    def test_frozen(self):
        block = DiagramBlock(dialect=Dialect.d2, source="x -> y")
        with pytest.raises(ValidationError):
            block.source = "changed"

    def test_dialect_coerced_from_string(self):
        assert DiagramBlock(dialect="wavedrom", source="{}").dialect is Dialect.wavedrom
