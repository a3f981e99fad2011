"""Hydration controller: converts delimiter text to MathSpans on load and paste.

Two triggers run a pass over a host's document:

- load: once when content is set, over the whole document
- paste: after a mutation tagged as a paste, over the inserted range only

Typing never triggers a pass; typed delimiters are converted by
``mathdelim.commands.input_text`` within the leaf being edited. A pass
collects text runs, plans replacements for runs holding math and applies
them as one host step. A pass that finds nothing performs no mutation.

States:
    IDLE ──trigger──► RUNNING ──apply/no-op──► IDLE

The controller's own mutation is announced to listeners (including the
controller) while it is RUNNING; a trigger seen while RUNNING is skipped,
so a pass never recurses into itself.

Example:
    host = TreeHost(load_document("Energy: $E=mc^2$"))
    controller = HydrationController(host).attach()
    controller.load()
    host.document.children[0].children[1]  # MathSpan(latex='E=mc^2', ...)

Thread Safety:
    A controller shares its host's threading rules: one editing session,
    one thread.

"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Literal, TypeAlias

from mathdelim.builder import Scope, plan_hydration
from mathdelim.config import ScanConfig, resolve_config
from mathdelim.errors import HydrationError, TreeContractError
from mathdelim.host import DocumentHost, Mutation, TreeHost
from mathdelim.utils.logger import get_logger

logger = get_logger(__name__)

Trigger: TypeAlias = Literal["load", "paste"]


class HydrationState(Enum):
    IDLE = auto()
    RUNNING = auto()


@dataclass(frozen=True, slots=True)
class HydrationResult:
    """Outcome of one trigger.

    Attributes:
        trigger: "load", "paste", or None for mutations that trigger nothing
        replaced: Number of text leaves replaced
        spans: Number of MathSpans inserted
        mutation: The host mutation, or None when nothing changed
        skipped: True when the trigger arrived during a running pass

    """

    trigger: Trigger | None
    replaced: int = 0
    spans: int = 0
    mutation: Mutation | None = None
    skipped: bool = False

    @property
    def changed(self) -> bool:
        return self.mutation is not None


class HydrationController:
    """Runs hydration passes against a DocumentHost."""

    __slots__ = ("_config", "_host", "_state", "_unsubscribe")

    def __init__(self, host: DocumentHost, *, config: ScanConfig | None = None) -> None:
        self._host = host
        self._config = resolve_config(config)
        self._state = HydrationState.IDLE
        self._unsubscribe = None

    @property
    def host(self) -> DocumentHost:
        return self._host

    @property
    def state(self) -> HydrationState:
        return self._state

    def attach(self) -> "HydrationController":
        """Subscribe to a TreeHost so paste and load mutations hydrate.

        Raises:
            TypeError: If the host does not support listeners.

        """
        if self._unsubscribe is None:
            if not isinstance(self._host, TreeHost):
                msg = f"cannot attach to {type(self._host).__name__}: no listener support"
                raise TypeError(msg)
            self._unsubscribe = self._host.subscribe(self.after_mutation)
        return self

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def load(self) -> HydrationResult:
        """Hydrate the whole document."""
        return self._run("load", None)

    def after_mutation(self, mutation: Mutation) -> HydrationResult:
        """React to a committed host mutation.

        Load mutations hydrate the whole document, paste mutations the
        inserted range. Anything else, including the controller's own
        mutations, triggers nothing.

        """
        if mutation.meta.get("hydration"):
            return HydrationResult(trigger=None)
        if mutation.is_load:
            return self._run("load", None)
        if mutation.is_paste:
            return self._run("paste", mutation.inserted)
        return HydrationResult(trigger=None)

    def _run(self, trigger: Trigger, scope: Scope | None) -> HydrationResult:
        if self._state is HydrationState.RUNNING:
            logger.debug("Skipping %s hydration: a pass is already running", trigger)
            return HydrationResult(trigger=trigger, skipped=True)

        self._state = HydrationState.RUNNING
        try:
            plan = plan_hydration(
                self._host.text_runs(config=self._config),
                scope=scope,
                config=self._config,
            )
            if not plan:
                logger.debug("Hydration (%s): no math found", trigger)
                return HydrationResult(trigger=trigger)
            try:
                mutation = self._host.apply(plan, meta={"hydration": trigger})
            except TreeContractError:
                raise
            except Exception as e:
                raise HydrationError(trigger, f"host rejected replacement plan: {e}") from e
            logger.debug(
                "Hydration (%s): %d span(s) in %d leaf(s)",
                trigger,
                plan.span_count,
                len(plan),
            )
            return HydrationResult(
                trigger=trigger,
                replaced=len(plan),
                spans=plan.span_count,
                mutation=mutation,
            )
        finally:
            self._state = HydrationState.IDLE


__all__ = [
    "HydrationController",
    "HydrationResult",
    "HydrationState",
    "Trigger",
]
