"""Fixtures for unit tests."""

from pathlib import Path
from typing import Generator

import pytest
import structlog
from graphql_responses import ScriptedQueryService

from github_mirror.configuration.config import RunContext
from github_mirror.notifications.queue import NotificationQueue
from github_mirror.store.store import EntityStore


@pytest.fixture(autouse=True)
def configure_structlog_for_caplog() -> Generator[None, None, None]:
    """Configure structlog for use with caplog."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    yield
    structlog.reset_defaults()


@pytest.fixture
def save_location(tmp_path: Path) -> Path:
    """Directory the entity store persists to."""
    return tmp_path / "mirror"


@pytest.fixture
def run_context(save_location: Path) -> RunContext:
    """Run context pointing at a temporary save location."""
    return RunContext(save_location=save_location, github_pat_token="test-token", query_batch_size=2, query_page_size=10)


@pytest.fixture
def store(run_context: RunContext) -> EntityStore:
    """Empty entity store."""
    return EntityStore(run_context)


@pytest.fixture
def queue() -> NotificationQueue:
    """Notification queue in standard mode."""
    return NotificationQueue()


@pytest.fixture
def scripted_service(run_context: RunContext) -> ScriptedQueryService:
    """Query service without responses; tests add them per operation name."""
    return ScriptedQueryService(run_context)
