"""Document hosts: the mutable shell around an immutable document tree.

A host owns the current Document, applies replacement plans as single
undoable steps, and announces every change as a ``Mutation`` to its
listeners. Hydration talks to hosts only through the ``DocumentHost``
protocol, so any editor model that can enumerate text leaves and swap them
can be hydrated.

``TreeHost`` is the in-memory implementation:

    host = TreeHost(load_document("Energy: $E=mc^2$"))
    host.insert_text((0, 0), 0, r"\\(x\\) ", paste=True)
    host.mutations[-1].is_paste  # True

Mutation metadata keys:
    paste: True when the change came from a paste
    ui_event: "paste" when a UI layer tagged the change as a paste
    load: True when the whole content was (re)placed
    hydration: trigger name for changes made by a hydration pass

Thread Safety:
    Hosts are mutable and NOT thread-safe. Use one host per editing session.

"""

from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, TypeAlias, runtime_checkable

from mathdelim.builder import ReplacementPlan, Scope
from mathdelim.config import ScanConfig
from mathdelim.errors import TreeContractError
from mathdelim.nodes import Block, Document, Node, Text
from mathdelim.tree import Path, TextRun, iter_text_runs, merge_adjacent_text, node_at, replace_leaves
from mathdelim.utils.logger import get_logger

logger = get_logger(__name__)

Listener: TypeAlias = Callable[["Mutation"], object]


@dataclass(frozen=True, slots=True)
class Mutation:
    """One committed change to a host's document.

    Attributes:
        revision: Host revision after the change
        meta: Metadata describing the origin of the change
        inserted: Positions of newly inserted content, when known

    """

    revision: int
    meta: Mapping[str, Any] = field(default_factory=dict)
    inserted: Scope | None = None

    @property
    def is_paste(self) -> bool:
        return bool(self.meta.get("paste")) or self.meta.get("ui_event") == "paste"

    @property
    def is_load(self) -> bool:
        return bool(self.meta.get("load"))


@runtime_checkable
class DocumentHost(Protocol):
    """What a hydration pass needs from an editor model."""

    @property
    def document(self) -> Document:
        """The current document snapshot."""
        ...

    def text_runs(self, *, config: ScanConfig | None = None) -> Iterator[TextRun]:
        """Yield every text leaf in document order."""
        ...

    def node_at(self, path: Path) -> Node:
        """Return the node at ``path``; raise TreeContractError if none."""
        ...

    def apply(
        self,
        plan: ReplacementPlan,
        *,
        meta: Mapping[str, Any] | None = None,
        inserted: Scope | None = None,
    ) -> "Mutation":
        """Apply all replacements as one atomic, undoable step."""
        ...


class TreeHost:
    """In-memory DocumentHost with history and change listeners.

    Every committed document is normalized: neighbouring Text leaves with
    equal marks are merged and empty Text leaves dropped.

    """

    __slots__ = ("_document", "_history", "_listeners", "_mutations", "_revision")

    def __init__(self, document: Document | None = None) -> None:
        self._document = merge_adjacent_text(document or Document(children=()))
        self._history: list[Document] = []
        self._listeners: list[Listener] = []
        self._mutations: list[Mutation] = []
        self._revision = 0

    @property
    def document(self) -> Document:
        return self._document

    @property
    def revision(self) -> int:
        return self._revision

    @property
    def mutations(self) -> tuple[Mutation, ...]:
        """Every committed mutation, oldest first."""
        return tuple(self._mutations)

    @property
    def can_undo(self) -> bool:
        return bool(self._history)

    # -- Listeners -------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` after every committed mutation.

        Returns:
            A function that removes the listener.

        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -- DocumentHost ----------------------------------------------------------

    def text_runs(self, *, config: ScanConfig | None = None) -> Iterator[TextRun]:
        return iter_text_runs(self._document, config=config)

    def node_at(self, path: Path) -> Node:
        return node_at(self._document, path)

    def apply(
        self,
        plan: ReplacementPlan,
        *,
        meta: Mapping[str, Any] | None = None,
        inserted: Scope | None = None,
    ) -> Mutation:
        """Apply a replacement plan as one history step.

        Raises:
            TreeContractError: If any replacement is invalid. The document
                is left unchanged.

        """
        return self._commit(replace_leaves(self._document, plan), meta, inserted)

    # -- Editing ---------------------------------------------------------------

    def set_content(self, document: Document) -> Mutation:
        """Replace the whole document; the mutation is tagged ``load``."""
        return self._commit(document, {"load": True}, None)

    def insert_text(self, path: Path, offset: int, text: str, *, paste: bool = False) -> Mutation:
        """Insert ``text`` into the Text leaf at ``path``.

        Raises:
            TreeContractError: If ``path`` is not a Text leaf or ``offset``
                is outside it.

        """
        leaf = self.node_at(path)
        if not isinstance(leaf, Text):
            raise TreeContractError(f"cannot insert text into a {type(leaf).__name__}", path)
        if not 0 <= offset <= len(leaf.content):
            raise TreeContractError(f"offset {offset} outside leaf of length {len(leaf.content)}", path)
        content = leaf.content[:offset] + text + leaf.content[offset:]
        plan = ReplacementPlan.single(path, (Text(content, leaf.marks),))
        meta = {"paste": True} if paste else {}
        return self.apply(plan, meta=meta, inserted=Scope.subtree(path))

    def insert_blocks(self, index: int, blocks: Iterable[Block], *, paste: bool = False) -> Mutation:
        """Insert top-level blocks before position ``index``.

        Raises:
            TreeContractError: If ``index`` is outside the document.

        """
        children = self._document.children
        if not 0 <= index <= len(children):
            raise TreeContractError(f"block index {index} outside document", (index,))
        new_blocks = tuple(blocks)
        document = Document(children=children[:index] + new_blocks + children[index:])
        inserted = Scope((index,), (index + len(new_blocks) - 1,)) if new_blocks else None
        meta = {"paste": True} if paste else {}
        return self._commit(document, meta, inserted)

    def undo(self) -> bool:
        """Restore the document before the last mutation.

        Returns:
            False when there is nothing to undo.

        """
        if not self._history:
            return False
        self._document = self._history.pop()
        self._revision += 1
        logger.debug("Undo to revision %d", self._revision)
        return True

    # -- Internal --------------------------------------------------------------

    def _commit(
        self,
        document: Document,
        meta: Mapping[str, Any] | None,
        inserted: Scope | None,
    ) -> Mutation:
        self._history.append(self._document)
        self._document = merge_adjacent_text(document)
        self._revision += 1
        mutation = Mutation(self._revision, dict(meta or {}), inserted)
        self._mutations.append(mutation)
        for listener in tuple(self._listeners):
            listener(mutation)
        return mutation


__all__ = [
    "DocumentHost",
    "Listener",
    "Mutation",
    "TreeHost",
]
