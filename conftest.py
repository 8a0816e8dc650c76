"""Shared pytest fixtures for metabox tests."""

import pytest
from unittest.mock import MagicMock

from metabox.security import principal_for_role
from metabox.store import InMemoryStore
from test_fixtures import make_nonces


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def spy_store():
    """InMemoryStore whose calls are recorded."""
    return MagicMock(wraps=InMemoryStore())


@pytest.fixture
def nonces():
    return make_nonces()


@pytest.fixture
def admin():
    return principal_for_role(1, 'admin', 'administrator')


@pytest.fixture
def author():
    return principal_for_role(3, 'author', 'author')
