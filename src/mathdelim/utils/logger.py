"""Namespaced loggers for mathdelim modules.

Every logger lives under the ``mathdelim`` root, so an application can
raise or silence the whole library with one call:

    logging.getLogger("mathdelim").setLevel(logging.DEBUG)

Hydration passes log what they replaced at DEBUG; legacy conversion warns
about math markup it had to leave in place. No handlers are installed here.

"""

from __future__ import annotations

import logging

ROOT_LOGGER = "mathdelim"


def get_logger(name: str) -> logging.Logger:
    """Return the logger for ``name`` under the mathdelim root.

    Module names inside the package pass through as they are; any other
    name is nested below the root:

        >>> get_logger("mathdelim.legacy").name
        'mathdelim.legacy'
        >>> get_logger("editor").name
        'mathdelim.editor'
    """
    if not (name == ROOT_LOGGER or name.startswith(f"{ROOT_LOGGER}.")):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
