"""Pytest configuration and shared fixtures for all tests."""

import os
import tempfile

import pytest

from create2_factory.predictor.sequential import NonceTable
from create2_factory.storage.sqlite_store import SQLiteNonceStore
from create2_factory.storage.store import InMemoryNonceStore

from tests.fixtures.addresses import CODE_HASH_11, DEPLOYER_AA


# =============================================================================
# Factory Fixtures
# =============================================================================

@pytest.fixture
def deployer():
    """Factory address 0xaa...aa."""
    return DEPLOYER_AA


@pytest.fixture
def code_hash():
    """Init code hash 0x11...11."""
    return CODE_HASH_11


# =============================================================================
# Nonce Table Fixtures
# =============================================================================

@pytest.fixture
def temp_db_path():
    """Create a temporary database file path."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = f.name
    yield db_path
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def nonce_table():
    """Fresh in-memory nonce table."""
    return NonceTable(InMemoryNonceStore())


@pytest.fixture
def sqlite_nonce_table(temp_db_path):
    """Nonce table persisted to a temporary SQLite file."""
    table = NonceTable(SQLiteNonceStore(temp_db_path))
    yield table
    table.close()


@pytest.fixture(params=["memory", "sqlite"])
def any_nonce_table(request, temp_db_path):
    """Nonce table over each store backend."""
    if request.param == "sqlite":
        table = NonceTable(SQLiteNonceStore(temp_db_path))
    else:
        table = NonceTable(InMemoryNonceStore())
    yield table
    table.close()
