"""Pytest configuration and fixtures."""

import httpx
import pytest
from fastapi.testclient import TestClient

from scriptparser.api.app import create_app
from scriptparser.config import ScriptParserSettings, reset_settings, set_settings
from scriptparser.database import ScriptDataStore
from scriptparser.mcp.dispatcher import ToolDispatcher
from scriptparser.mcp.models import BackendConfig

BACKEND_URL = "http://testserver"


@pytest.fixture(autouse=True)
def isolated_test_environment(tmp_path, monkeypatch):
    """Point every test at its own database and strip backend env vars."""
    db_path = tmp_path / "test_scripts.db"
    monkeypatch.setenv("SCRIPTPARSER_DATABASE_PATH", str(db_path))
    for name in (
        "SCRIPT_API_URL",
        "SCRIPT_API_KEY",
        "SCRIPTPARSER_API_URL",
        "SCRIPTPARSER_API_KEY",
        "SCRIPTPARSER_CONFIG",
        "SCRIPTPARSER_DEBUG",
        "SCRIPTPARSER_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)

    set_settings(ScriptParserSettings(database_path=db_path))

    yield

    reset_settings()


@pytest.fixture
def settings(tmp_path):
    """Settings for a fresh database in the test's temp directory."""
    settings = ScriptParserSettings(
        database_path=tmp_path / "test_scripts.db",
        database_pool_min_size=1,
        database_pool_max_size=10,
        cors_origins=["http://localhost:5173"],
    )
    set_settings(settings)
    return settings


@pytest.fixture
def store(settings):
    """Initialized data store, closed after the test."""
    store = ScriptDataStore(settings).initialize()
    yield store
    store.close()


@pytest.fixture
def app(settings, store):
    """HTTP service bound to the test store."""
    return create_app(settings, store=store)


@pytest.fixture
def client(app):
    """Synchronous test client for the HTTP service."""
    with TestClient(app) as client:
        yield client


@pytest.fixture
async def dispatcher(app):
    """Dispatcher talking to the HTTP service in-process."""
    dispatcher = ToolDispatcher(
        BackendConfig(base_url=BACKEND_URL),
        transport=httpx.ASGITransport(app=app),
    )
    yield dispatcher
    await dispatcher.aclose()


@pytest.fixture
def project(store):
    """A stored project with no data."""
    return store.create_project("Pilot Episode", "Opening episode draft")
