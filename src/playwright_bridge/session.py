"""Browser session lifecycle for playwright-bridge.

A process owns at most one browser session.  Its state is one of::

    Uninitialized --start()--> Ready --close()--> Closed

``Ready`` carries every engine handle at once, so the rest of the bridge never
sees a half-built session: a failed ``start()`` releases whatever it had
acquired and leaves the state ``Uninitialized``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from patchright.async_api import async_playwright

from playwright_bridge.config import BridgeConfig
from playwright_bridge.errors import (
    InitializationError,
    NotInitializedError,
    SessionClosedError,
)

logger = logging.getLogger("playwright_bridge.session")


# ---------------------------------------------------------------------------
# Session states
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Uninitialized:
    name: str = "uninitialized"


@dataclass(frozen=True)
class Ready:
    playwright: Any
    browser: Any
    context: Any
    page: Any
    name: str = "ready"


@dataclass(frozen=True)
class Closed:
    name: str = "closed"


SessionState = Uninitialized | Ready | Closed


# ---------------------------------------------------------------------------
# BrowserSession
# ---------------------------------------------------------------------------


class BrowserSession:
    """Owns the single Patchright browser, context and page."""

    def __init__(self, config: BridgeConfig) -> None:
        self.config: BridgeConfig = config
        self._state: SessionState = Uninitialized()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return isinstance(self._state, Ready)

    @property
    def is_closed(self) -> bool:
        return isinstance(self._state, Closed)

    @property
    def page(self) -> Any:
        """Return the active page, or raise if the session is not ready."""
        state = self._state
        if isinstance(state, Ready):
            return state.page
        if isinstance(state, Closed):
            raise SessionClosedError()
        raise NotInitializedError()

    # -- Lifecycle -----------------------------------------------------------

    async def start(self) -> bool:
        """Acquire the browser, a context and a page.

        Returns ``True`` when a new session was started and ``False`` if one
        was already running.
        """
        if isinstance(self._state, Closed):
            raise SessionClosedError()
        if isinstance(self._state, Ready):
            logger.info("start() called on a ready session, keeping it")
            return False

        bcfg = self.config.browser
        playwright = browser = context = None
        try:
            playwright = await async_playwright().start()
            playwright.selectors.set_test_id_attribute(self.config.test_id_attribute)
            browser_type = getattr(playwright, bcfg.browser_name)
            browser = await browser_type.launch(**bcfg.launch_options)
            context = await browser.new_context(**bcfg.context_options)
            context.set_default_timeout(self.config.timeouts.action)
            context.set_default_navigation_timeout(self.config.timeouts.navigation)
            page = await context.new_page()
        except Exception as exc:
            logger.exception("Browser session failed to start")
            await _release(playwright, browser, context)
            raise InitializationError("Initialization failed") from exc
        except BaseException:
            # Cancelled mid-start; the state never reached Ready.
            logger.warning("Browser session start interrupted, releasing handles")
            await _release(playwright, browser, context)
            raise

        self._state = Ready(
            playwright=playwright, browser=browser, context=context, page=page
        )
        logger.info(
            f"Browser session ready ({bcfg.browser_name}, "
            f"headless={bcfg.launch_options.get('headless', True)})"
        )
        return True

    async def close(self) -> None:
        """Release every handle and move to ``Closed``. Never raises."""
        state = self._state
        self._state = Closed()
        if isinstance(state, Ready):
            await _release(state.playwright, state.browser, state.context)
            logger.info("Browser session closed")


async def _release(playwright: Any, browser: Any, context: Any) -> None:
    """Close *context*, *browser* and stop *playwright*, whichever exist.

    Each step runs even if an earlier one fails so the browser process is not
    left behind.
    """
    steps = (
        ("context", context, "close"),
        ("browser", browser, "close"),
        ("playwright", playwright, "stop"),
    )
    for label, handle, method in steps:
        if handle is None:
            continue
        try:
            await getattr(handle, method)()
        except Exception:
            logger.warning(f"Failed to release {label}", exc_info=True)
