# File: tests/test_logger.py
import logging
from logging.handlers import RotatingFileHandler

from essence.logger import configure, init_logging


def test_configure_replaces_handlers(tmp_path):
    log_file = tmp_path / "essence.log"
    try:
        lg = configure(level="DEBUG", log_file=log_file)
        lg = configure(level="DEBUG", log_file=log_file)
        assert lg.level == logging.DEBUG
        assert len(lg.handlers) == 2
        assert sum(isinstance(h, RotatingFileHandler) for h in lg.handlers) == 1

        lg.debug("fetched %s", "https://example.com/")
        for handler in lg.handlers:
            handler.flush()
        assert "fetched https://example.com/" in log_file.read_text(encoding="utf-8")
    finally:
        init_logging()


def test_default_is_stderr_only_at_warning():
    lg = init_logging()
    assert lg.level == logging.WARNING
    assert [type(h) for h in lg.handlers] == [logging.StreamHandler]
    assert lg.propagate is False
