"""ContextVar-based scan configuration for mathdelim.

Provides thread-local configuration using Python's ContextVars (PEP 567).
Every public entry point accepts an explicit ``config=``; when omitted, the
value active in the current context is used.

Thread Safety:
    ContextVars are thread-local. Each thread has independent storage, so
    no locks are needed.

Usage:
    from mathdelim.config import ScanConfig, scan_config_context
    from mathdelim.delimiters import DelimiterKind

    # Only accept the canonical dollar forms
    dollars_only = ScanConfig(
        kinds=(DelimiterKind.BLOCK_DOLLAR, DelimiterKind.INLINE_DOLLAR),
    )
    with scan_config_context(dollars_only):
        segments = scan(r"\\(x\\) and $y$")

"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any

from mathdelim.delimiters import PRIORITY, DelimiterKind

# Object replacement character and zero width space: clipboard artifacts
# that break renderers when left inside latex.
DEFAULT_INVISIBLE_CHARS = "\ufffc\u200b"


@dataclass(frozen=True, slots=True)
class ScanConfig:
    """Immutable scan configuration.

    Attributes:
        kinds: Enabled delimiter kinds. Resolution always follows the fixed
            priority order, whatever order is given here.
        invisible_chars: Characters removed from matched content before trim.
        verbatim_blocks: Node type names whose descendants are never scanned.
        verbatim_marks: Text marks that exclude a leaf from scanning.
        legacy_markup: Convert legacy ``<span data-type="math">`` markup
            during text normalization.

    """

    kinds: tuple[DelimiterKind, ...] = PRIORITY
    invisible_chars: str = DEFAULT_INVISIBLE_CHARS
    verbatim_blocks: frozenset[str] = frozenset({"CodeBlock"})
    verbatim_marks: frozenset[str] = frozenset({"code"})
    legacy_markup: bool = True

    def __post_init__(self) -> None:
        ordered = tuple(kind for kind in PRIORITY if kind in self.kinds)
        if ordered != self.kinds:
            object.__setattr__(self, "kinds", ordered)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "ScanConfig":
        """Create ScanConfig from dictionary.

        Unknown keys are silently ignored. ``kinds`` may hold kind names
        (``"inline_dollar"``) instead of members; set-valued fields accept
        any iterable of strings.

        Raises:
            ValueError: If ``kinds`` names an unknown delimiter kind.

        Example:
            >>> config = ScanConfig.from_dict({
            ...     "kinds": ["block_dollar", "inline_dollar"],
            ...     "unknown_key": "ignored",
            ... })
            >>> config.kinds
            (<DelimiterKind.BLOCK_DOLLAR: 'block_dollar'>, <DelimiterKind.INLINE_DOLLAR: 'inline_dollar'>)

        """
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in config_dict.items() if k in valid_fields}
        if "kinds" in filtered:
            filtered["kinds"] = tuple(DelimiterKind.coerce(k) for k in filtered["kinds"])
        for name in ("verbatim_blocks", "verbatim_marks"):
            if name in filtered:
                filtered[name] = frozenset(filtered[name])
        return cls(**filtered)


# Module-level default config (reused, never recreated)
_DEFAULT_CONFIG: ScanConfig = ScanConfig()

_scan_config: ContextVar[ScanConfig] = ContextVar(
    "scan_config",
    default=_DEFAULT_CONFIG,
)


def get_scan_config() -> ScanConfig:
    """Get current scan configuration (thread-local)."""
    return _scan_config.get()


def set_scan_config(config: ScanConfig) -> None:
    """Set scan configuration for current context.

    Only affects the current thread's context. Other threads are unaffected.
    """
    _scan_config.set(config)


def reset_scan_config() -> None:
    """Reset to the module-level default configuration."""
    _scan_config.set(_DEFAULT_CONFIG)


@contextmanager
def scan_config_context(config: ScanConfig) -> Iterator[None]:
    """Context manager for temporary config changes.

    Restores the previous config even if an exception is raised.

    Example:
        >>> with scan_config_context(ScanConfig(legacy_markup=False)):
        ...     get_scan_config().legacy_markup
        False

    """
    previous = _scan_config.get()
    _scan_config.set(config)
    try:
        yield
    finally:
        _scan_config.set(previous)


def resolve_config(config: ScanConfig | None) -> ScanConfig:
    """Return ``config`` or, when None, the context's active config."""
    return config if config is not None else _scan_config.get()


__all__ = [
    "DEFAULT_INVISIBLE_CHARS",
    "ScanConfig",
    "get_scan_config",
    "reset_scan_config",
    "resolve_config",
    "scan_config_context",
    "set_scan_config",
]
