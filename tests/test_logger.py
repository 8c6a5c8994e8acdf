import logging

import structlog

from docthis.logger import setup_logging


def test_setup_logging_levels():
    root = logging.getLogger()
    saved = root.level
    try:
        setup_logging(True)
        assert root.level == logging.DEBUG
        setup_logging(False)
        assert root.level == logging.WARNING
        assert all(h.level == logging.WARNING for h in root.handlers)
    finally:
        root.setLevel(saved)


def test_action_is_bound_while_running():
    seen = {}

    def probe():
        seen.update(structlog.contextvars.get_contextvars())
        return 1

    from docthis.engine import DocumentEngine

    assert DocumentEngine()._run("Document This", probe) == 1
    assert seen["action"] == "Document This"
    assert "action" not in structlog.contextvars.get_contextvars()
