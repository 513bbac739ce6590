"""
Tests for the package loggers.
"""
import logging

from pinvert import PINVGenerator
from pinvert.utilities.config import pinvert_params
from pinvert.utilities.logging import devlog, mylog


class TestLoggers:
    def test_core_loggers(self):
        assert mylog.name == "pinvert"
        assert mylog.level == logging.getLevelName(pinvert_params["logging.mylog.level"])
        assert devlog.disabled == (not pinvert_params["logging.devlog.enabled"])
        assert not mylog.propagate and not devlog.propagate

    def test_class_logger(self):
        logger = PINVGenerator.logger
        assert logger.name == "PINVGenerator"
        assert logger.level == logging.getLevelName(pinvert_params["logging.code.level"])

        # The handler is only attached once.
        assert PINVGenerator.logger is logger
        assert len(logger.handlers) == 1
