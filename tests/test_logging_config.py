import logging

from photobooth.logging_config import setup_logging


def test_setup_logging_replaces_handlers_and_sets_level() -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        setup_logging("debug")
        setup_logging("DEBUG")
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert logging.getLogger("PIL").level == logging.WARNING
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
        for h in saved_handlers:
            root.addHandler(h)
        root.setLevel(saved_level)
