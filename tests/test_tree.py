"""Tests for path addressing, text-run walking and leaf replacement."""

import pytest

from mathdelim.config import ScanConfig
from mathdelim.errors import TreeContractError
from mathdelim.nodes import BlockQuote, CodeBlock, Document, Heading, MathSpan, Paragraph, Text
from mathdelim.tree import Replacement, iter_text_runs, merge_adjacent_text, node_at, replace_leaves

CODE = frozenset({"code"})


def _doc() -> Document:
    return Document(
        children=(
            Paragraph(children=(Text("a $x$"), Text("`$y$`", CODE))),
            CodeBlock(children=(Text("$z$"),), language="tex"),
            BlockQuote(children=(Heading(level=2, children=(Text("q"),)),)),
        )
    )


class TestIterTextRuns:
    """Walking order and ancestor context."""

    def test_document_order_and_paths(self) -> None:
        runs = list(iter_text_runs(_doc()))
        assert [run.path for run in runs] == [(0, 0), (0, 1), (1, 0), (2, 0, 0)]
        assert [run.text for run in runs] == ["a $x$", "`$y$`", "$z$", "q"]

    def test_ancestors(self) -> None:
        runs = list(iter_text_runs(_doc()))
        assert runs[0].ancestors == ("Document", "Paragraph")
        assert runs[3].ancestors == ("Document", "BlockQuote", "Heading")

    def test_verbatim_detection(self) -> None:
        runs = list(iter_text_runs(_doc()))
        assert [run.in_excluded_region for run in runs] == [False, True, True, False]

    def test_marks_carried(self) -> None:
        runs = list(iter_text_runs(_doc()))
        assert runs[1].marks == CODE

    def test_configurable_verbatim(self) -> None:
        config = ScanConfig(verbatim_blocks=frozenset({"BlockQuote"}), verbatim_marks=frozenset())
        runs = list(iter_text_runs(_doc(), config=config))
        assert [run.in_excluded_region for run in runs] == [False, False, False, True]

    def test_math_spans_are_not_runs(self) -> None:
        doc = Document(children=(Paragraph(children=(MathSpan("x"), Text("t"))),))
        assert [run.path for run in iter_text_runs(doc)] == [(0, 1)]

    def test_root_must_be_document(self) -> None:
        with pytest.raises(TreeContractError, match="expected a Document"):
            list(iter_text_runs(Paragraph(children=())))


class TestNodeAt:
    def test_root(self) -> None:
        doc = _doc()
        assert node_at(doc, ()) is doc

    def test_nested(self) -> None:
        assert node_at(_doc(), (2, 0, 0)) == Text("q")

    def test_out_of_range(self) -> None:
        with pytest.raises(TreeContractError) as exc_info:
            node_at(_doc(), (0, 5))
        assert exc_info.value.path == (0, 5)

    def test_into_leaf(self) -> None:
        with pytest.raises(TreeContractError):
            node_at(_doc(), (0, 0, 0))


class TestReplaceLeaves:
    """Atomic multi-leaf replacement."""

    def test_single_replacement(self) -> None:
        doc = _doc()
        new = replace_leaves(doc, [Replacement((0, 0), (Text("a "), MathSpan("x")))])
        assert new.children[0].children == (Text("a "), MathSpan("x"), Text("`$y$`", CODE))
        assert new.children[1] is doc.children[1]
        assert new.children[2] is doc.children[2]

    def test_multiple_in_one_parent(self) -> None:
        doc = Document(children=(Paragraph(children=(Text("a"), MathSpan("m"), Text("b"))),))
        new = replace_leaves(
            doc,
            [Replacement((0, 0), (Text("A1"), Text("A2"))), Replacement((0, 2), ())],
        )
        assert new.children[0].children == (Text("A1"), Text("A2"), MathSpan("m"))

    def test_nested_parent(self) -> None:
        new = replace_leaves(_doc(), [Replacement((2, 0, 0), (MathSpan("q", True),))])
        heading = new.children[2].children[0]
        assert isinstance(heading, Heading)
        assert heading.level == 2
        assert heading.children == (MathSpan("q", True),)

    def test_empty_plan_returns_same_doc(self) -> None:
        doc = _doc()
        assert replace_leaves(doc, []) is doc

    def test_input_untouched(self) -> None:
        doc = _doc()
        replace_leaves(doc, [Replacement((0, 0), (Text("z"),))])
        assert doc == _doc()

    def test_root_path_rejected(self) -> None:
        with pytest.raises(TreeContractError, match="root"):
            replace_leaves(_doc(), [Replacement((), (Text("x"),))])

    def test_container_rejected(self) -> None:
        with pytest.raises(TreeContractError, match="not a leaf"):
            replace_leaves(_doc(), [Replacement((0,), (Text("x"),))])

    def test_duplicate_rejected(self) -> None:
        with pytest.raises(TreeContractError, match="twice"):
            replace_leaves(_doc(), [Replacement((0, 0), ()), Replacement((0, 0), ())])

    def test_block_node_rejected(self) -> None:
        with pytest.raises(TreeContractError, match="inline"):
            replace_leaves(_doc(), [Replacement((0, 0), (Paragraph(children=()),))])  # type: ignore[arg-type]

    def test_invalid_path_leaves_nothing_applied(self) -> None:
        doc = _doc()
        with pytest.raises(TreeContractError):
            replace_leaves(doc, [Replacement((0, 0), ()), Replacement((9, 9), ())])
        assert doc == _doc()


class TestMergeAdjacentText:
    def test_merges_equal_marks(self) -> None:
        doc = Document(children=(Paragraph(children=(Text("a"), Text("b"), MathSpan("m"), Text("c"))),))
        merged = merge_adjacent_text(doc)
        assert merged.children[0].children == (Text("ab"), MathSpan("m"), Text("c"))

    def test_keeps_different_marks_apart(self) -> None:
        doc = Document(children=(Paragraph(children=(Text("a"), Text("b", CODE))),))
        assert merge_adjacent_text(doc) == doc

    def test_drops_empty_text(self) -> None:
        doc = Document(children=(Paragraph(children=(Text(""), MathSpan("m"), Text(""))),))
        assert merge_adjacent_text(doc).children[0].children == (MathSpan("m"),)

    def test_unchanged_doc_is_equal(self) -> None:
        doc = _doc()
        assert merge_adjacent_text(doc) == doc
