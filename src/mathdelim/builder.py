"""Segment builder: text runs to replacement plans.

For each text run outside verbatim regions the builder scans and resolves
the run's text. When the result holds at least one MathSpan, the run's leaf
is replaced by the segment sequence as nodes: plain text becomes Text
carrying the leaf's marks, math becomes MathSpan.

    TextRun("Formula: $E=mc^2$", path=(0, 0))
    -> Replacement((0, 0), (Text("Formula: "), MathSpan("E=mc^2")))

Runs without math produce no replacement. A plan is computed entirely
before it is applied, so a leaf is either replaced in full or untouched.

"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from mathdelim.config import ScanConfig, resolve_config
from mathdelim.nodes import Document, Inline, MathSpan, Text
from mathdelim.resolver import MathSegment, PlainText, Segment, resolve
from mathdelim.scanner import scan_candidates
from mathdelim.tree import Path, Replacement, TextRun, iter_text_runs, replace_leaves


@dataclass(frozen=True, slots=True)
class Scope:
    """Inclusive range of tree positions, compared in document order.

    A position is in scope if it is between ``first`` and ``last`` or lies
    inside the subtree of ``last``:

        >>> Scope((2,), (3,)).contains((3, 1))
        True

    """

    first: Path
    last: Path

    @classmethod
    def subtree(cls, path: Path) -> "Scope":
        """Scope covering one node and its descendants."""
        return cls(path, path)

    def contains(self, path: Path) -> bool:
        return self.first <= path and path[: len(self.last)] <= self.last


@dataclass(frozen=True, slots=True)
class ReplacementPlan:
    """Leaf replacements for one hydration pass, applied as one step."""

    replacements: tuple[Replacement, ...] = ()

    @classmethod
    def single(cls, path: Path, nodes: Iterable[Inline]) -> "ReplacementPlan":
        return cls((Replacement(path, tuple(nodes)),))

    @property
    def span_count(self) -> int:
        """Number of MathSpans the plan inserts."""
        return sum(
            isinstance(node, MathSpan)
            for replacement in self.replacements
            for node in replacement.nodes
        )

    def __len__(self) -> int:
        return len(self.replacements)

    def __bool__(self) -> bool:
        return bool(self.replacements)

    def __iter__(self) -> Iterator[Replacement]:
        return iter(self.replacements)


def build_segments(run: TextRun, *, config: ScanConfig | None = None) -> tuple[Segment, ...]:
    """Scan and resolve one run; excluded runs stay one plain segment."""
    if not run.text:
        return ()
    if run.in_excluded_region:
        return (PlainText(run.text, 0, len(run.text)),)
    config = resolve_config(config)
    return resolve(run.text, scan_candidates(run.text, config=config))


def segments_to_nodes(
    segments: Iterable[Segment],
    marks: frozenset[str] = frozenset(),
) -> tuple[Inline, ...]:
    """Convert segments to inline nodes; plain text keeps ``marks``."""
    nodes: list[Inline] = []
    for segment in segments:
        match segment:
            case PlainText(text=text):
                nodes.append(Text(text, marks))
            case MathSegment(span=span):
                nodes.append(span)
    return tuple(nodes)


def plan_hydration(
    runs: Iterable[TextRun],
    *,
    scope: Scope | None = None,
    config: ScanConfig | None = None,
) -> ReplacementPlan:
    """Compute the replacements that turn delimiter text into MathSpans.

    Args:
        runs: Text runs of the document, in document order
        scope: Only consider runs inside this scope (whole document if None)
        config: Scan configuration (context config if None)

    Returns:
        A plan with one replacement per run holding math. Empty when no
        run holds math.

    """
    config = resolve_config(config)
    replacements: list[Replacement] = []
    for run in runs:
        if run.in_excluded_region:
            continue
        if scope is not None and not scope.contains(run.path):
            continue
        segments = build_segments(run, config=config)
        if not any(isinstance(segment, MathSegment) for segment in segments):
            continue
        replacements.append(Replacement(run.path, segments_to_nodes(segments, run.marks)))
    return ReplacementPlan(tuple(replacements))


def hydrate(
    doc: Document,
    *,
    scope: Scope | None = None,
    config: ScanConfig | None = None,
) -> Document:
    """Return ``doc`` with every delimiter span in scope converted.

    Host-free form of a hydration pass. Returns ``doc`` itself when there
    is nothing to convert.

    """
    config = resolve_config(config)
    plan = plan_hydration(iter_text_runs(doc, config=config), scope=scope, config=config)
    if not plan:
        return doc
    return replace_leaves(doc, plan)


__all__ = [
    "ReplacementPlan",
    "Scope",
    "build_segments",
    "hydrate",
    "plan_hydration",
    "segments_to_nodes",
]
