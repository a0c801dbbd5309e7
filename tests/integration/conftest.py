"""Shared fixtures for playwright-bridge integration tests.

These fixtures launch a real headless Chromium browser via Patchright.
Every test gets a fresh browser instance (function-scoped) for isolation.
"""

from __future__ import annotations

import urllib.parse
from pathlib import Path

import pytest

from playwright_bridge.bridge import Bridge
from playwright_bridge.config import BridgeConfig, BrowserConfig
from playwright_bridge.protocol import Command

# ---------------------------------------------------------------------------
# Test HTML page served via data: URL (no external HTTP server needed)
# ---------------------------------------------------------------------------

TEST_HTML = "data:text/html," + urllib.parse.quote(
    """<html><head><title>Bridge Test Page</title></head><body>
<h1>Example Domain</h1>
<p id="status">idle</p>
<form onsubmit="return false">
  <label for="email">Email</label>
  <input type="text" id="email">
  <input type="text" placeholder="Search here">
  <input type="text" name="username">
  <input type="text" id="zip">
  <input type="text" data-testid="nickname">
  <input type="checkbox" id="agree">
  <select id="color"><option value="red">Red</option><option value="blue">Blue</option></select>
  <button type="button" onclick="document.getElementById('status').textContent='clicked'">Submit</button>
  <a href="https://example.com" id="link1">Example Link</a>
</form>
</body></html>"""
)


@pytest.fixture
def test_html_url() -> str:
    """The data: URL of the shared test page."""
    return TEST_HTML


@pytest.fixture
def integration_config(tmp_path: Path) -> BridgeConfig:
    """BridgeConfig for headless Chromium (no sandbox)."""
    return BridgeConfig(
        browser=BrowserConfig(
            launch_options={"headless": True, "chromium_sandbox": False},
        ),
        screenshot_dir=str(tmp_path / "screenshots"),
    )


@pytest.fixture
async def live_bridge(integration_config: BridgeConfig) -> Bridge:
    """A Bridge with a real browser session, closed after the test."""
    bridge = Bridge(integration_config)
    resp = await bridge.execute(Command(action="init"))
    assert resp["status"] == "ok", resp
    try:
        yield bridge  # type: ignore[misc]
    finally:
        await bridge.shutdown()


@pytest.fixture
async def test_page_bridge(live_bridge: Bridge) -> Bridge:
    """``live_bridge`` with its page showing TEST_HTML."""
    resp = await live_bridge.execute(Command(action="goto", params=TEST_HTML))
    assert resp["status"] == "ok", resp
    return live_bridge
