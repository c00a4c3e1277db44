import logging
import os
import pytest
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typer.testing import CliRunner

from snapcache.infrastructure.cache.factory import CacheFactory
from snapcache.infrastructure.config import settings


class FakeClock:
    """Controllable clock; call it to get the current time, advance() to move it."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    return tmp_path / "caches"


@pytest.fixture
def factory(cache_dir: Path, clock: FakeClock) -> CacheFactory:
    """Factory writing into a temporary directory with a fake clock."""
    return CacheFactory(cache_dir, clock=clock)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path: Path):
    """Keep tests independent of the user's config file, .env and SNAPCACHE_* variables."""
    for name in list(os.environ):
        if name.startswith(settings.ENV_PREFIX):
            monkeypatch.delenv(name)
    monkeypatch.setattr(settings, "DEFAULT_CONFIG_FILE", tmp_path / "no-config.yaml")
    monkeypatch.setattr(settings, "find_dotenv_path", lambda: None)
    monkeypatch.setattr(settings, "_loaded", False)
    monkeypatch.setattr(settings, "_config", {})
    settings.clear_test_config()
    yield
    settings.clear_test_config()


@pytest.fixture(autouse=True)
def restore_root_logger():
    """setup_logging replaces root handlers; put the originals back after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
