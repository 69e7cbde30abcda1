"""Pytest configuration and fixtures."""

import pytest

from shortlinks.common.logging_config import setup_logging
from shortlinks.database.json_store import JsonFileStore
from shortlinks.service import LinkService
from shortlinks.shortcode import ShortCodeGenerator


class FakeClock:
    """Manually advanced clock returning epoch seconds."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeBrowser:
    """Records opened URLs instead of launching a browser."""

    def __init__(self, succeed: bool = True):
        self.succeed = succeed
        self.opened = []

    def __call__(self, url: str) -> bool:
        self.opened.append(url)
        return self.succeed


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
def data_file(tmp_path):
    """Path of a data file that does not exist yet."""
    return tmp_path / "data.json"


@pytest.fixture
def store(data_file, logger) -> JsonFileStore:
    """Create an empty store backed by a temporary file."""
    return JsonFileStore(data_file, logger=logger)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def browser():
    return FakeBrowser()


@pytest.fixture
def short_code_generator():
    """Create short code generator."""
    return ShortCodeGenerator(default_length=6)


@pytest.fixture
def service(store, short_code_generator, logger, clock, browser) -> LinkService:
    """Create service instance driven by the fake clock."""
    return LinkService(
        store=store,
        short_code_generator=short_code_generator,
        logger=logger,
        browser=browser,
        clock=clock,
    )


@pytest.fixture
def sample_urls():
    """Sample URLs for testing."""
    return [
        "https://example.com/test",
        "https://github.com/user/repo",
        "http://stackoverflow.com/questions/123456",
    ]
