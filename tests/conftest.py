"""Pytest configuration and fixtures."""

import os
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Set test environment before importing app modules
_TEST_DIR = Path(tempfile.mkdtemp(prefix="insight-engine-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DIR / 'app.db'}"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"
os.environ["TASK_DISPATCH_MODE"] = "inline"
os.environ["LLM_PROVIDER"] = "stub"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["SCRAPER_SCROLL_DELAY_MS"] = "0"
os.environ["ANALYSIS_BACKOFF_BASE_SECONDS"] = "0"
os.environ["ANALYSIS_BATCH_DELAY_SECONDS"] = "0"


@pytest.fixture
def repository(tmp_path: Path):
    """Task repository backed by a fresh SQLite file."""
    from sqlalchemy.orm import sessionmaker

    from insight_engine.db.repository import TaskRepository
    from insight_engine.db.session import create_db_engine, init_db

    engine = create_db_engine(f"sqlite:///{tmp_path / 'tasks.db'}")
    init_db(engine)
    factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    yield TaskRepository(session_factory=factory)
    engine.dispose()


@pytest.fixture
def browser_provider():
    """Get a stub browser provider with the default scripted results."""
    from insight_engine.adapters.browser.stub import StubBrowserProvider

    return StubBrowserProvider()


@pytest.fixture
def llm_provider():
    """Get a stub LLM provider."""
    from insight_engine.adapters.llm.stub import StubLLMProvider

    return StubLLMProvider()


@pytest.fixture
def task_service(repository, browser_provider, llm_provider):
    """Task service wired to stubs and a throwaway database."""
    from insight_engine.services.tasks import TaskService

    return TaskService(
        repository=repository,
        browser=browser_provider,
        llm_factory=lambda name: llm_provider,
    )


@pytest.fixture
def test_client(task_service) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI app, using the stub-backed task service."""
    from insight_engine.api.deps import get_task_service
    from insight_engine.main import app

    app.dependency_overrides[get_task_service] = lambda: task_service
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
