"""Pytest configuration and fixtures."""

import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from drawyourmeme.api.app import create_app
from drawyourmeme.config import Settings
from drawyourmeme.registry.storage import Registry


class FakeClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + timedelta(seconds=1)
        return current


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def registry(clock: FakeClock) -> Registry:
    """Empty registry with a deterministic clock."""
    return Registry(clock=clock)


@pytest.fixture
def settings(temp_dir: Path) -> Settings:
    """Settings pointing uploads at a temp dir, without launch delay."""
    return Settings(
        uploads_dir=temp_dir / "uploads",
        launch_delay_seconds=0,
        max_upload_bytes=1024,
    )


@pytest.fixture
def client(settings: Settings, registry: Registry) -> Generator[TestClient, None, None]:
    """Test client for an app sharing the registry fixture."""
    app = create_app(settings=settings, registry=registry)
    with TestClient(app) as test_client:
        yield test_client
