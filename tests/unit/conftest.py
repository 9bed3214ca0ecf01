"""Shared fixtures for unit tests."""

from unittest.mock import Mock

import pytest


@pytest.fixture
def mock_store():
    """Create a mock timer store."""
    store = Mock()
    store.get = Mock(return_value=None)
    store.put = Mock()
    store.delete = Mock(return_value=True)
    store.get_many = Mock(return_value={})
    store.put_many = Mock()
    store.delete_many = Mock(return_value=0)
    store.get_alarm = Mock(return_value=None)
    store.set_alarm = Mock()
    store.delete_alarm = Mock(return_value=False)
    return store


@pytest.fixture
def mock_logger():
    """Create a mock logger."""
    logger = Mock()
    logger.info = Mock()
    logger.warning = Mock()
    logger.error = Mock()
    logger.debug = Mock()
    logger.with_context = Mock(return_value=logger)
    return logger
