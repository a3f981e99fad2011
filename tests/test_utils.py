"""Tests for mathdelim utility modules."""

import logging


class TestGetLogger:
    """Tests for the namespaced logger helper."""

    def test_prefix_added(self) -> None:
        from mathdelim.utils.logger import get_logger

        assert get_logger("mymodule").name == "mathdelim.mymodule"

    def test_package_names_unchanged(self) -> None:
        from mathdelim.utils.logger import get_logger

        assert get_logger("mathdelim").name == "mathdelim"
        assert get_logger("mathdelim.hydration").name == "mathdelim.hydration"

    def test_lookalike_name_prefixed(self) -> None:
        from mathdelim.utils.logger import get_logger

        assert get_logger("mathdelimx").name == "mathdelim.mathdelimx"

    def test_returns_stdlib_logger(self) -> None:
        from mathdelim.utils.logger import get_logger

        logger = get_logger("x")
        assert isinstance(logger, logging.Logger)
        assert logger is logging.getLogger("mathdelim.x")

    def test_root_level_reaches_module_loggers(self) -> None:
        from mathdelim.utils.logger import ROOT_LOGGER, get_logger

        root = logging.getLogger(ROOT_LOGGER)
        previous = root.level
        root.setLevel(logging.DEBUG)
        try:
            assert get_logger("editor").getEffectiveLevel() == logging.DEBUG
        finally:
            root.setLevel(previous)
