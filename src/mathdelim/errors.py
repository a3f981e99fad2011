"""Exception classes for mathdelim.

Malformed input is never an error: unterminated delimiters, empty content
and overlapping matches all degrade to plain text. Exceptions are reserved
for contract violations by callers and hosts.
"""

from __future__ import annotations


class MathDelimError(Exception):
    """Base exception for all mathdelim errors.

    Subclass this for specific error categories.
    """

    pass


class TreeContractError(MathDelimError):
    """A document tree or replacement plan violates the walking contract.

    Raised for programming errors such as a replacement path that does not
    address a leaf, or a root that is not a Document.
    """

    def __init__(self, message: str, path: tuple[int, ...] | None = None) -> None:
        """Initialize with an optional tree path.

        Args:
            message: Description of the violation
            path: Path of the offending node (optional)
        """
        self.message = message
        self.path = path
        location = f"at {list(path)}: " if path is not None else ""
        super().__init__(f"{location}{message}")


class HydrationError(MathDelimError):
    """A hydration pass failed while applying its replacement plan.

    The original exception is chained as ``__cause__``.
    """

    def __init__(self, trigger: str, message: str) -> None:
        """Initialize hydration error.

        Args:
            trigger: The trigger of the failed pass ("load" or "paste")
            message: Description of the failure
        """
        self.trigger = trigger
        super().__init__(f"Hydration ({trigger}): {message}")
