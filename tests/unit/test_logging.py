"""Tests for logging helpers."""
import logging

import pytest

from cospy import setup_logging
from cospy.core.logging import get_logger


class TestGetLogger:

    def test_returns_named_logger(self):
        logger = get_logger('cospy.test')

        assert logger is logging.getLogger('cospy.test')
        assert logger.propagate

    def test_records_reach_caplog(self, caplog):
        logger = get_logger('cospy.test.caplog')

        with caplog.at_level(logging.INFO, logger='cospy.test.caplog'):
            logger.info("slice uploaded")

        assert "slice uploaded" in caplog.text


class TestSetupLogging:

    @pytest.fixture(autouse=True)
    def restore_levels(self):
        names = ['cospy', 'cospy.client', 'cospy.upload.coordinator']
        saved = {name: logging.getLogger(name).level for name in names}
        yield
        for name, level in saved.items():
            logging.getLogger(name).setLevel(level)

    def test_sets_level(self):
        setup_logging(logging.DEBUG)

        assert logging.getLogger('cospy').level == logging.DEBUG
        assert logging.getLogger('cospy.upload.coordinator').level == logging.DEBUG

    def test_default_level(self):
        setup_logging()
        assert logging.getLogger('cospy.client').level == logging.INFO
