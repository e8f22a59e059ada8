"""Fixtures for CLI tests."""

import logging
from collections.abc import Iterator

import pytest


@pytest.fixture(autouse=True)
def reset_splitpr_logger() -> Iterator[None]:
    """Drop handlers installed by configure_logging() after each test."""
    yield
    splitpr_logger = logging.getLogger("splitpr")
    splitpr_logger.handlers.clear()
    splitpr_logger.setLevel(logging.NOTSET)
    splitpr_logger.propagate = True
