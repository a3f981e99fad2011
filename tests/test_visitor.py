"""Tests for the tree visitor and transform utilities."""

import dataclasses

import pytest

from mathdelim.nodes import BlockQuote, CodeBlock, Document, Heading, MathSpan, Node, Paragraph, Text
from mathdelim.visitor import BaseVisitor, children_of, transform


def _doc(*blocks) -> Document:  # type: ignore[no-untyped-def]
    return Document(children=tuple(blocks))


def _para(*inlines) -> Paragraph:  # type: ignore[no-untyped-def]
    return Paragraph(children=tuple(inlines))


# =============================================================================
# Visitor dispatch tests
# =============================================================================


class NodeCollector(BaseVisitor[None]):
    """Collects all visited node type names."""

    def __init__(self) -> None:
        self.visited: list[str] = []

    def visit_default(self, node) -> None:  # type: ignore[override]
        self.visited.append(type(node).__name__)


class TestVisitorDispatch:
    """Tests that every node type dispatches and children are walked."""

    def test_visits_all_node_types(self) -> None:
        doc = _doc(
            Heading(level=1, children=(Text("h"),)),
            _para(Text("a"), MathSpan("x")),
            CodeBlock(children=(Text("c"),)),
            BlockQuote(children=(_para(Text("q")),)),
        )
        collector = NodeCollector()
        collector.visit(doc)
        assert collector.visited == [
            "Document",
            "Heading",
            "Text",
            "Paragraph",
            "Text",
            "MathSpan",
            "CodeBlock",
            "Text",
            "BlockQuote",
            "Paragraph",
            "Text",
        ]

    def test_empty_document(self) -> None:
        collector = NodeCollector()
        collector.visit(_doc())
        assert collector.visited == ["Document"]

    def test_unknown_node_uses_default(self) -> None:
        collector = NodeCollector()
        collector.visit(Node())
        assert collector.visited == ["Node"]


class DisplayCollector(BaseVisitor[None]):
    def __init__(self) -> None:
        self.found: list[str] = []

    def visit_math_span(self, node: MathSpan) -> None:
        if node.display_mode:
            self.found.append(node.latex)


class TestSpecificVisitors:
    def test_display_collector(self) -> None:
        doc = _doc(_para(MathSpan("a"), MathSpan("b", True)), BlockQuote(children=(_para(MathSpan("c", True)),)))
        collector = DisplayCollector()
        collector.visit(doc)
        assert collector.found == ["b", "c"]


class TestChildrenOf:
    def test_containers(self) -> None:
        para = _para(Text("a"))
        assert children_of(_doc(para)) == (para,)
        assert children_of(para) == (Text("a"),)
        assert children_of(CodeBlock(children=(Text("c"),))) == (Text("c"),)

    def test_leaves(self) -> None:
        assert children_of(Text("a")) == ()
        assert children_of(MathSpan("x")) == ()


# =============================================================================
# Transform tests
# =============================================================================


class TestTransform:
    def test_identity_transform(self) -> None:
        doc = _doc(_para(Text("a"), MathSpan("x")))
        assert transform(doc, lambda n: n) is doc

    def test_inline_all_math(self) -> None:
        doc = _doc(_para(MathSpan("a", True)), BlockQuote(children=(_para(MathSpan("b", True)),)))

        def inline_all(node: Node) -> Node:
            if isinstance(node, MathSpan):
                return dataclasses.replace(node, display_mode=False)
            return node

        result = transform(doc, inline_all)
        assert result == _doc(_para(MathSpan("a")), BlockQuote(children=(_para(MathSpan("b")),)))

    def test_remove_nodes(self) -> None:
        doc = _doc(_para(Text("a"), MathSpan("x"), Text("b")))
        result = transform(doc, lambda n: None if isinstance(n, MathSpan) else n)
        assert result == _doc(_para(Text("a"), Text("b")))

    def test_original_untouched(self) -> None:
        doc = _doc(_para(MathSpan("x")))
        transform(doc, lambda n: Text("t") if isinstance(n, MathSpan) else n)
        assert doc == _doc(_para(MathSpan("x")))

    def test_remove_root_raises(self) -> None:
        with pytest.raises(TypeError, match="cannot remove root"):
            transform(_doc(), lambda n: None)
