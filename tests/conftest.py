"""
Test Configuration
==================

Pytest configuration with fixtures for all test types.
Provides test settings, a small site source tree and a fake browser.
"""

from pathlib import Path
from typing import Any, Callable, Dict
from unittest.mock import patch

import pytest
from pydantic_settings import SettingsConfigDict

from ogcards.config.settings import Settings
from ogcards.core.content.loader import ContentLoader
from ogcards.models.schemas import Site

from tests.utils.helpers import make_png, write_document
from tests.utils.mocks import FakeBrowserSession, FakeSessionFactory


# Test settings override
class TestSettings(Settings):
    """Test-specific settings."""

    __test__ = False

    environment: str = "testing"
    debug: bool = True
    site_title: str = "Test Site"
    site_owner: str = "Jane Doe"
    site_url: str = "https://example.com"
    capture_settle_delay: float = 0.0
    log_level: str = "DEBUG"

    model_config = SettingsConfigDict(env_file=".env.test")


STYLESHEET = """---
---
$brand: #dc3545;

.open-graph-card {
  h1 { color: $brand; }
}
"""


@pytest.fixture(scope="session", autouse=True)
def override_settings():
    """Keep global settings on the testing environment."""
    settings = TestSettings()
    with patch("ogcards.config.settings.settings", settings):
        yield settings


@pytest.fixture
def site_source(tmp_path: Path) -> Path:
    """Write a small site: two posts, three pages, a stylesheet and a static image."""
    source = tmp_path / "site"
    (source / "assets" / "css").mkdir(parents=True)
    (source / "assets" / "css" / "main.scss").write_text(STYLESHEET, encoding="utf-8")
    (source / "assets" / "images").mkdir(parents=True)
    (source / "assets" / "images" / "logo.png").write_bytes(make_png(16, 16))

    write_document(
        source / "_posts" / "2023-05-01-hello-world.md",
        {
            "title": "Hello World",
            "description": "First post",
            "tags": ["opinion"],
            "categories": ["Ruby on Rails"],
        },
        "Intro paragraph.\n\n## Headline 1\n\n![Diagram](./assets/some/image.png)\n",
    )
    write_document(
        source / "_posts" / "2023-06-01-custom-image.md",
        {
            "title": "Custom Image",
            "tags": ["opinion"],
            "og_image": "assets/images/custom.png",
        },
        "A post with its own card.\n",
    )
    write_document(source / "about.md", {"title": "About"}, "About this site.\n")
    write_document(source / "contact.html", {"title": "Contact"}, "<p>Write to us.</p>\n")
    write_document(source / "docs" / "guide.md", {"title": "Guide"}, "# Getting started\n")
    return source


@pytest.fixture
def make_settings(site_source: Path) -> Callable[..., Settings]:
    """Factory for settings rooted at the site source."""

    def _make(**overrides: Any) -> Settings:
        values: Dict[str, Any] = {"source_path": site_source}
        values.update(overrides)
        return TestSettings(**values)

    return _make


@pytest.fixture
def test_settings(make_settings: Callable[..., Settings]) -> Settings:
    """Test settings fixture."""
    return make_settings()


@pytest.fixture
def loaded_site(test_settings: Settings) -> Site:
    """Site content loaded from the fixture source."""
    return ContentLoader(test_settings).load()


@pytest.fixture
def fake_session() -> FakeBrowserSession:
    return FakeBrowserSession()


@pytest.fixture
def session_factory(fake_session: FakeBrowserSession) -> FakeSessionFactory:
    return FakeSessionFactory(fake_session)
