"""Global pytest configuration."""

import logging

import pytest

from histsifter.core.logging import ROOT_LOGGER_NAME

pytest_plugins = ["tests.fixtures.index_dat"]


@pytest.fixture(autouse=True)
def _reset_app_logger():
    """Drop handlers installed by configure_logging so streams do not leak between tests."""
    yield
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
