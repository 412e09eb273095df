"""Configuration for unit tests."""

import logging

import pytest


@pytest.fixture(autouse=True)
def setup_logging(caplog):
    """Capture debug logging from the resolver modules."""
    logging.basicConfig(level=logging.DEBUG)
    caplog.set_level(logging.DEBUG, logger="gallery_resolver")
    yield
