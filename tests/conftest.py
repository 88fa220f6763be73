"""Shared test fixtures."""

import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def reset_loguru():
    """Drop sinks added during a test; they may point at captured streams."""
    yield
    logger.remove()
