"""Shared fixtures for playwright-bridge tests."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from playwright_bridge.bridge import Bridge
from playwright_bridge.config import BridgeConfig
from playwright_bridge.session import BrowserSession, Ready


def _mock_locator() -> MagicMock:
    locator = MagicMock()
    locator.click = AsyncMock()
    locator.fill = AsyncMock()
    locator.press_sequentially = AsyncMock()
    return locator


@pytest.fixture
def home_dir(tmp_path, monkeypatch):
    """Patch Path.home() so per-user files live under tmp_path."""
    monkeypatch.setattr(Path, "home", lambda: tmp_path)
    return tmp_path / ".playwright-bridge"


@pytest.fixture
def default_config(tmp_path):
    """A default BridgeConfig with screenshots under tmp_path."""
    return BridgeConfig(screenshot_dir=str(tmp_path / "screenshots"))


@pytest.fixture
def config_file(tmp_path):
    """Write a config JSON file and return its path."""
    config = {
        "browser": {
            "browser_name": "firefox",
            "launch_options": {"headless": True},
        },
        "screenshot_dir": "./shots",
        "timeouts": {"assert_text": 2000},
    }
    path = tmp_path / "bridge-config.json"
    path.write_text(json.dumps(config), encoding="utf-8")
    return path


@pytest.fixture
def mock_page():
    """A MagicMock standing in for a Patchright Page."""
    page = MagicMock()
    page.url = "https://example.com/"
    page.title = AsyncMock(return_value="Example Domain")
    page.goto = AsyncMock()
    page.reload = AsyncMock()
    page.wait_for_load_state = AsyncMock()
    page.wait_for_selector = AsyncMock()
    page.wait_for_timeout = AsyncMock()
    page.text_content = AsyncMock(return_value="Example Domain body text")
    page.get_attribute = AsyncMock(return_value="value")
    page.evaluate = AsyncMock(return_value=42)
    page.screenshot = AsyncMock()
    page.select_option = AsyncMock()
    page.check = AsyncMock()
    page.uncheck = AsyncMock()
    page.hover = AsyncMock()

    page.keyboard = MagicMock()
    page.keyboard.press = AsyncMock()

    # One locator per lookup style so tests can fail them independently.
    page.get_by_role = MagicMock(return_value=_mock_locator())
    page.get_by_text = MagicMock(return_value=_mock_locator())
    page.get_by_test_id = MagicMock(return_value=_mock_locator())
    page.get_by_label = MagicMock(return_value=_mock_locator())
    page.get_by_placeholder = MagicMock(return_value=_mock_locator())
    page.locator = MagicMock(return_value=_mock_locator())
    return page


@pytest.fixture
def mock_context(mock_page):
    """A MagicMock standing in for a Patchright BrowserContext."""
    ctx = MagicMock()
    ctx.new_page = AsyncMock(return_value=mock_page)
    ctx.close = AsyncMock()
    ctx.set_default_timeout = MagicMock()
    ctx.set_default_navigation_timeout = MagicMock()
    return ctx


@pytest.fixture
def mock_browser(mock_context):
    """A MagicMock standing in for a Patchright Browser."""
    browser = MagicMock()
    browser.new_context = AsyncMock(return_value=mock_context)
    browser.close = AsyncMock()
    return browser


@pytest.fixture
def mock_playwright(mock_browser):
    """A MagicMock standing in for the started Patchright driver."""
    pw = MagicMock()
    pw.chromium = MagicMock()
    pw.chromium.launch = AsyncMock(return_value=mock_browser)
    pw.firefox = MagicMock()
    pw.firefox.launch = AsyncMock(return_value=mock_browser)
    pw.selectors = MagicMock()
    pw.stop = AsyncMock()
    return pw


@pytest.fixture
def patched_async_playwright(monkeypatch, mock_playwright):
    """Make ``async_playwright().start()`` return ``mock_playwright``."""
    factory = MagicMock()
    factory.return_value.start = AsyncMock(return_value=mock_playwright)
    monkeypatch.setattr("playwright_bridge.session.async_playwright", factory)
    return factory


@pytest.fixture
def ready_session(default_config, mock_playwright, mock_browser, mock_context, mock_page):
    """A BrowserSession already in the Ready state with mocked handles."""
    session = BrowserSession(default_config)
    session._state = Ready(
        playwright=mock_playwright,
        browser=mock_browser,
        context=mock_context,
        page=mock_page,
    )
    return session


@pytest.fixture
def bridge(default_config, patched_async_playwright):
    """A Bridge whose session starts against mocked Patchright objects."""
    return Bridge(default_config)


@pytest.fixture
def ready_bridge(default_config, ready_session):
    """A Bridge wrapping an already-ready session."""
    return Bridge(default_config, session=ready_session)
