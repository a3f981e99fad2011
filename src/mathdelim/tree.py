"""Path addressing, text-run walking and leaf replacement for document trees.

A *path* is the tuple of child indices from the Document to a node. Paths
compare lexicographically in document order, which is what scoped
(paste) hydration relies on.

Walking yields a ``TextRun`` per Text leaf, with ancestor context:

    >>> doc = Document(children=(CodeBlock(children=(Text("$x$"),)),))
    >>> [(run.path, run.in_excluded_region) for run in iter_text_runs(doc)]
    [((0, 0), True)]

Replacement swaps leaves for node sequences and rebuilds only the
ancestors on the way to them; everything else is shared with the input.

Thread Safety:
    All functions are pure and safe to call from any thread.

"""

import dataclasses
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import TypeAlias

from mathdelim.config import ScanConfig, resolve_config
from mathdelim.errors import TreeContractError
from mathdelim.nodes import CodeBlock, Document, Heading, Inline, MathSpan, Node, Paragraph, Text
from mathdelim.visitor import children_of, transform

Path: TypeAlias = tuple[int, ...]


@dataclass(frozen=True, slots=True)
class TextRun:
    """One text leaf as seen by the segment builder.

    Attributes:
        text: The leaf's content
        path: Path of the leaf
        marks: Formatting marks of the leaf
        ancestors: Type names of the enclosing nodes, outermost first
        in_excluded_region: Inside a verbatim block or carrying a verbatim mark

    """

    text: str
    path: Path
    marks: frozenset[str] = frozenset()
    ancestors: tuple[str, ...] = ()
    in_excluded_region: bool = False


@dataclass(frozen=True, slots=True)
class Replacement:
    """Replace the leaf at ``path`` with ``nodes`` (possibly empty)."""

    path: Path
    nodes: tuple[Inline, ...]


def iter_text_runs(doc: Node, *, config: ScanConfig | None = None) -> Iterator[TextRun]:
    """Yield every Text leaf in document order with its ancestor context.

    Raises:
        TreeContractError: If ``doc`` is not a Document.

    """
    if not isinstance(doc, Document):
        msg = f"expected a Document root, got {type(doc).__name__}"
        raise TreeContractError(msg, ())
    config = resolve_config(config)
    yield from _walk(doc, (), (), False, config)


def _walk(
    node: Node,
    path: Path,
    ancestors: tuple[str, ...],
    excluded: bool,
    config: ScanConfig,
) -> Iterator[TextRun]:
    if isinstance(node, Text):
        yield TextRun(
            text=node.content,
            path=path,
            marks=node.marks,
            ancestors=ancestors,
            in_excluded_region=excluded or not config.verbatim_marks.isdisjoint(node.marks),
        )
        return
    name = type(node).__name__
    inner = (*ancestors, name)
    inner_excluded = excluded or name in config.verbatim_blocks
    for index, child in enumerate(children_of(node)):
        yield from _walk(child, (*path, index), inner, inner_excluded, config)


def node_at(doc: Node, path: Path) -> Node:
    """Return the node addressed by ``path``.

    Raises:
        TreeContractError: If the path does not address a node.

    """
    node = doc
    for depth, index in enumerate(path):
        children = children_of(node)
        if not 0 <= index < len(children):
            raise TreeContractError("path does not address a node", path[: depth + 1])
        node = children[index]
    return node


def replace_leaves(doc: Document, replacements: Iterable[Replacement]) -> Document:
    """Apply leaf replacements as one new tree.

    Every path is validated against ``doc`` before anything is rebuilt, so
    either all replacements apply or none do.

    Raises:
        TreeContractError: If a path is empty, does not address a leaf, is
            listed twice, or a replacement node is not inline.

    """
    if not isinstance(doc, Document):
        msg = f"expected a Document root, got {type(doc).__name__}"
        raise TreeContractError(msg, ())

    by_parent: dict[Path, dict[int, tuple[Inline, ...]]] = {}
    for replacement in replacements:
        path = replacement.path
        if not path:
            raise TreeContractError("cannot replace the document root", path)
        leaf = node_at(doc, path)
        if not isinstance(leaf, (Text, MathSpan)):
            raise TreeContractError(f"replacement target is a {type(leaf).__name__}, not a leaf", path)
        for new in replacement.nodes:
            if not isinstance(new, (Text, MathSpan)):
                raise TreeContractError(f"cannot insert {type(new).__name__} inline", path)
        slots = by_parent.setdefault(path[:-1], {})
        if path[-1] in slots:
            raise TreeContractError("leaf replaced twice in one plan", path)
        slots[path[-1]] = replacement.nodes

    if not by_parent:
        return doc
    prefixes = {parent[:i] for parent in by_parent for i in range(len(parent) + 1)}
    return _rebuild(doc, (), by_parent, prefixes)  # type: ignore[return-value]


def _rebuild(
    node: Node,
    path: Path,
    by_parent: dict[Path, dict[int, tuple[Inline, ...]]],
    prefixes: set[Path],
) -> Node:
    slots = by_parent.get(path, {})
    new_children: list[Node] = []
    for index, child in enumerate(children_of(node)):
        if index in slots:
            new_children.extend(slots[index])
            continue
        child_path = (*path, index)
        if child_path in prefixes:
            child = _rebuild(child, child_path, by_parent, prefixes)
        new_children.append(child)
    return dataclasses.replace(node, children=tuple(new_children))  # type: ignore[call-arg]


def merge_adjacent_text(doc: Document) -> Document:
    """Join neighbouring Text leaves with equal marks and drop empty ones."""

    def merge(node: Node) -> Node:
        if not isinstance(node, (Paragraph, Heading, CodeBlock)):
            return node
        merged: list[Node] = []
        for child in node.children:
            if isinstance(child, Text):
                if not child.content:
                    continue
                previous = merged[-1] if merged else None
                if isinstance(previous, Text) and previous.marks == child.marks:
                    merged[-1] = Text(previous.content + child.content, child.marks)
                    continue
            merged.append(child)
        new_children = tuple(merged)
        if new_children == node.children:
            return node
        return dataclasses.replace(node, children=new_children)  # type: ignore[arg-type]

    return transform(doc, merge)


__all__ = [
    "Path",
    "Replacement",
    "TextRun",
    "iter_text_runs",
    "merge_adjacent_text",
    "node_at",
    "replace_leaves",
]
