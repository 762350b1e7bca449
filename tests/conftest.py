"""The pytest configuration for Note MCP testing.

Provides a temporary note collection, a storage backend on top of it and a
translation engine wired to a fake Anthropic client, so no test touches the
network or the real log directory.
"""

import os
import tempfile

# Log files go to a scratch directory; must be set before note_mcp is imported
os.environ.setdefault("NOTE_MCP_LOG_DIR", tempfile.mkdtemp(prefix="note_mcp_logs_"))
os.environ.setdefault("MCP_METRICS_ENABLED", "false")

import pytest  # noqa: E402

from note_mcp.config import reset_settings  # noqa: E402
from note_mcp.pipeline import TranslationPipeline  # noqa: E402
from note_mcp.pipeline import reset_pipeline  # noqa: E402
from note_mcp.storage import LocalStorageBackend  # noqa: E402
from note_mcp.storage import reset_storage  # noqa: E402
from note_mcp.translation import TranslationEngine  # noqa: E402

from tests.shared.mock_factories import create_mock_anthropic_client  # noqa: E402
from tests.shared.test_data import TEST_COLLECTION  # noqa: E402
from tests.shared.test_data import TEST_MODEL  # noqa: E402


@pytest.fixture(autouse=True)
def reset_singletons():
    """Drop cached settings, storage and pipeline between tests."""
    reset_settings()
    reset_storage()
    reset_pipeline()
    yield
    reset_settings()
    reset_storage()
    reset_pipeline()


@pytest.fixture
def notes_root(tmp_path):
    """Provide an empty note collection directory."""
    root = tmp_path / TEST_COLLECTION
    root.mkdir()
    return root


@pytest.fixture
def note_factory(notes_root):
    """Factory for creating notes inside the temporary collection."""

    def _create_note(path: str, content: str):
        note_path = notes_root / path
        note_path.parent.mkdir(parents=True, exist_ok=True)
        note_path.write_bytes(content.encode("utf-8"))
        return note_path

    return _create_note


@pytest.fixture
def storage(notes_root):
    return LocalStorageBackend(root_dir=notes_root, backup_retention_days=30)


@pytest.fixture
def mock_client():
    """Anthropic client whose translation prefixes every line with ``[FR]``."""
    return create_mock_anthropic_client()


@pytest.fixture
def engine(mock_client):
    return TranslationEngine(client=mock_client, model=TEST_MODEL, max_output_tokens=4000, timeout=5.0)


@pytest.fixture
def pipeline(storage, engine):
    return TranslationPipeline(
        storage=storage,
        engine=engine,
        collection=TEST_COLLECTION,
        default_target_language="Japanese",
        retention_days=30,
    )


@pytest.fixture
def note_env(monkeypatch, notes_root):
    """Point the settings at the temporary collection."""
    monkeypatch.setenv("NOTES_ROOT_DIR", str(notes_root))
    monkeypatch.setenv("NOTES_COLLECTION_NAME", TEST_COLLECTION)
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key")
    return notes_root


# Custom markers for pytest
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "integration: tests that run the full pipeline on a temporary collection")
