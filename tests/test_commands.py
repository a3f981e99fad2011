"""Tests for set_latex, unset_latex, update_math and input_text."""

import pytest

from mathdelim import dump_document, load_document, open_document
from mathdelim.commands import (
    TextSelection,
    input_text,
    parse_latex_input,
    set_latex,
    unset_latex,
    update_math,
)
from mathdelim.host import TreeHost
from mathdelim.nodes import CodeBlock, Document, MathSpan, Paragraph, Text

BOLD = frozenset({"bold"})


def _host(text: str) -> TreeHost:
    return TreeHost(load_document(text))


class TestParseLatexInput:
    """Delimiter stripping for user input."""

    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("x^2", MathSpan("x^2")),
            ("  x^2 ", MathSpan("x^2")),
            ("$x$", MathSpan("x")),
            ("$$x$$", MathSpan("x", display_mode=True)),
            (r"\(x\)", MathSpan("x")),
            (r"\[ x \]", MathSpan("x", display_mode=True)),
            ("$$ a\n\nb $$", MathSpan("a\n\nb", display_mode=True)),
        ],
    )
    def test_strips_delimiters(self, source: str, expected: MathSpan) -> None:
        assert parse_latex_input(source) == expected

    def test_explicit_display_mode_wins(self) -> None:
        assert parse_latex_input("$$x$$", False) == MathSpan("x")
        assert parse_latex_input("x", True) == MathSpan("x", display_mode=True)

    def test_two_spans_are_not_stripped(self) -> None:
        assert parse_latex_input("$a$ + $b$") == MathSpan("$a$ + $b$")

    @pytest.mark.parametrize("source", ["", "   ", "$$ $$", "\u200b", r"\(\)"])
    def test_empty(self, source: str) -> None:
        assert parse_latex_input(source) is None


class TestSetLatex:
    """Convert selection to math."""

    def test_selection_becomes_math(self) -> None:
        host = _host("area is pi r^2 here")
        assert set_latex(host, TextSelection((0, 0), 8, 14))
        assert host.document.children[0].children == (
            Text("area is "),
            MathSpan("pi r^2"),
            Text(" here"),
        )

    def test_explicit_latex_replaces_selection(self) -> None:
        host = _host("ab")
        assert set_latex(host, TextSelection((0, 0), 1, 1), r"\alpha")
        assert host.document.children[0].children == (Text("a"), MathSpan(r"\alpha"), Text("b"))

    def test_delimiters_decide_display_mode(self) -> None:
        host = _host("$$E=mc^2$$")
        assert set_latex(host, TextSelection((0, 0), 0, 10))
        assert host.document.children[0].children == (MathSpan("E=mc^2", display_mode=True),)

    def test_explicit_display_mode(self) -> None:
        host = _host("x")
        assert set_latex(host, TextSelection((0, 0), 0, 1), display_mode=True)
        assert host.document.children[0].children == (MathSpan("x", display_mode=True),)

    def test_marks_kept_around_span(self) -> None:
        host = TreeHost(Document(children=(Paragraph(children=(Text("a x b", BOLD),)),)))
        assert set_latex(host, TextSelection((0, 0), 2, 3))
        assert host.document.children[0].children == (Text("a ", BOLD), MathSpan("x"), Text(" b", BOLD))

    def test_one_history_step(self) -> None:
        host = _host("x")
        set_latex(host, TextSelection((0, 0), 0, 1))
        assert host.revision == 1
        assert host.mutations[-1].meta == {"command": "set_latex"}

    def test_empty_selection_fails(self) -> None:
        host = _host("abc")
        assert not set_latex(host, TextSelection((0, 0), 1, 1))
        assert host.revision == 0

    def test_whitespace_selection_fails(self) -> None:
        host = _host("a   b")
        assert not set_latex(host, TextSelection((0, 0), 1, 4))

    def test_empty_latex_fails(self) -> None:
        assert not set_latex(_host("abc"), TextSelection((0, 0), 0, 3), "  ")

    def test_code_block_fails(self) -> None:
        host = TreeHost(Document(children=(CodeBlock(children=(Text("x^2"),)),)))
        assert not set_latex(host, TextSelection((0, 0), 0, 3))
        assert host.revision == 0

    def test_inline_code_fails(self) -> None:
        host = _host("see `x^2`")
        assert not set_latex(host, TextSelection((0, 1), 0, 3))

    def test_invalid_selection_fails(self) -> None:
        host = _host("abc")
        assert not set_latex(host, TextSelection((0, 0), 2, 9))
        assert not set_latex(host, TextSelection((0, 0), 2, 1))
        assert not set_latex(host, TextSelection((4, 0), 0, 1))
        assert not set_latex(host, TextSelection((0,), 0, 1))
        assert not set_latex(host, TextSelection((), 0, 1))

    def test_math_span_target_fails(self) -> None:
        host, _ = open_document("$x$")
        assert not set_latex(host, TextSelection((0, 0), 0, 1))


class TestUnsetLatex:
    """Convert math back to text."""

    def test_math_becomes_latex_text(self) -> None:
        host, _ = open_document("a $E=mc^2$ b")
        assert unset_latex(host, (0, 1))
        assert host.document.children[0].children == (Text("a E=mc^2 b"),)

    def test_latex_not_escaped(self) -> None:
        host, _ = open_document(r"$$\$5$$")
        assert unset_latex(host, (0, 0))
        assert host.document.children[0].children == (Text(r"\$5"),)

    def test_not_hydrated_again_without_delimiters(self) -> None:
        host, controller = open_document("$x$")
        unset_latex(host, (0, 0))
        assert not controller.load().changed

    def test_text_target_fails(self) -> None:
        host = _host("x")
        assert not unset_latex(host, (0, 0))
        assert not unset_latex(host, (3, 3))
        assert not unset_latex(host, ())
        assert host.revision == 0

    def test_undo_restores_span(self) -> None:
        host, _ = open_document("$x$")
        unset_latex(host, (0, 0))
        host.undo()
        assert host.document.children[0].children == (MathSpan("x"),)


class TestUpdateMath:
    """Attribute updates of an existing span."""

    def test_update_latex(self) -> None:
        host, _ = open_document("$x$")
        assert update_math(host, (0, 0), latex=" y ")
        assert host.document.children[0].children == (MathSpan("y"),)

    def test_update_display_mode(self) -> None:
        host, _ = open_document("$x$")
        assert update_math(host, (0, 0), display_mode=True)
        assert host.document.children[0].children == (MathSpan("x", display_mode=True),)

    def test_unchanged_is_success_without_mutation(self) -> None:
        host, _ = open_document("$x$")
        revision = host.revision
        assert update_math(host, (0, 0), latex="x", display_mode=False)
        assert host.revision == revision

    def test_nothing_given_fails(self) -> None:
        host, _ = open_document("$x$")
        assert not update_math(host, (0, 0))

    def test_empty_latex_fails(self) -> None:
        host, _ = open_document("$x$")
        assert not update_math(host, (0, 0), latex="\u200b ")

    def test_text_target_fails(self) -> None:
        assert not update_math(_host("x"), (0, 0), latex="y")


class TestInputText:
    """Typed delimiters convert within the edited leaf."""

    def test_closing_dollar_converts_inline(self) -> None:
        host = _host("Energy $E=mc^2")
        assert input_text(host, (0, 0), 14, "$")
        assert host.document.children[0].children == (Text("Energy "), MathSpan("E=mc^2"))

    def test_closing_double_dollar_converts_display(self) -> None:
        typed = "Sum: $$\\sum_i i$"
        host = _host(typed)
        assert input_text(host, (0, 0), len(typed), "$")
        assert host.document.children[0].children == (Text("Sum: "), MathSpan("\\sum_i i", display_mode=True))

    def test_text_after_cursor_kept(self) -> None:
        host = _host("a $x b")
        assert input_text(host, (0, 0), 4, "$")
        assert host.document.children[0].children == (Text("a "), MathSpan("x"), Text(" b"))

    def test_first_closing_dollar_of_pair_waits(self) -> None:
        host = _host("$$x")
        assert not input_text(host, (0, 0), 3, "$")
        assert host.document.children[0].children == (Text("$$x$"),)

    def test_double_dollar_space_inserts_placeholder(self) -> None:
        host = _host("$$")
        assert input_text(host, (0, 0), 2, " ")
        assert host.document.children[0].children == (MathSpan("", display_mode=True),)
        assert dump_document(host.document) == ""

    def test_placeholder_only_at_line_start(self) -> None:
        host = TreeHost(Document(children=(Paragraph(children=(Text("line\n"),)),)))
        assert input_text(host, (0, 0), 5, "$$ ")
        assert host.document.children[0].children == (Text("line\n"), MathSpan("", display_mode=True))

        host = _host("cost $$")
        assert not input_text(host, (0, 0), 7, " ")
        assert host.document.children[0].children == (Text("cost $$ "),)

    def test_empty_pair_stays_text(self) -> None:
        host = _host("$ ")
        assert not input_text(host, (0, 0), 2, "$")
        assert host.document.children[0].children == (Text("$ $"),)

    def test_escaped_dollar_does_not_close(self) -> None:
        host = _host("$a\\")
        assert not input_text(host, (0, 0), 3, "$")
        assert host.document.children[0].children == (Text("$a\\$"),)

    def test_inline_code_not_converted(self) -> None:
        host = _host("`$x`")
        assert not input_text(host, (0, 0), 2, "$")
        assert host.document.children[0].children == (Text("$x$", frozenset({"code"})),)

    def test_invalid_position_inserts_nothing(self) -> None:
        host = _host("ab")
        revision = host.revision
        assert not input_text(host, (3, 0), 0, "$")
        assert not input_text(host, (0, 0), 9, "$")
        assert not input_text(host, (0, 0), 0, "")
        assert host.revision == revision

    def test_one_step_not_hydrated_again(self) -> None:
        host, _ = open_document("x")
        assert input_text(host, (0, 0), 1, " $y$")
        assert host.mutations[-1].meta == {"command": "input_text"}
        assert host.document.children[0].children == (Text("x "), MathSpan("y"))
        assert host.undo()
        assert host.document.children[0].children == (Text("x"),)
