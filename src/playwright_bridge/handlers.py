"""Per-action handlers.

Each ``cmd_*`` coroutine takes the raw ``params`` of a command, normalizes it,
drives the page, and returns the payload that the dispatcher merges into the
``{"status": "ok", "action": ...}`` envelope.  Single-argument actions accept
either a bare scalar (``"https://..."``, ``1500``) or an object form.
"""

from __future__ import annotations

import logging
from typing import Any

from patchright.async_api import Error as PlaywrightError

from playwright_bridge import resolver
from playwright_bridge.config import BridgeConfig
from playwright_bridge.errors import InvalidParamsError, TextNotFoundError
from playwright_bridge.paths import resolve_screenshot_path, timestamp_ms
from playwright_bridge.session import BrowserSession

logger = logging.getLogger("playwright_bridge.handlers")

_SNIPPET_LENGTH = 500
_LOAD_STATES = ("load", "domcontentloaded", "networkidle", "commit")


# ---------------------------------------------------------------------------
# Param helpers
# ---------------------------------------------------------------------------


def _as_dict(action: str, params: Any) -> dict[str, Any]:
    if params is None:
        return {}
    if not isinstance(params, dict):
        raise InvalidParamsError(
            action, f"expected an object, got {type(params).__name__}"
        )
    return params


def _scalar_or_field(action: str, params: Any, key: str, kind: type | tuple) -> Any:
    """Accept ``value`` or ``{key: value}`` and return the value, or ``None``."""
    if isinstance(params, dict):
        value = params.get(key)
    else:
        value = params
    if value is not None and (isinstance(value, bool) or not isinstance(value, kind)):
        raise InvalidParamsError(
            action, f"'{key}' has unsupported type {type(value).__name__}"
        )
    return value


def _require_str(action: str, params: dict[str, Any], key: str) -> str:
    value = params.get(key)
    if not isinstance(value, str) or not value:
        raise InvalidParamsError(action, f"'{key}' is required")
    return value


def _selector(action: str, params: Any) -> str:
    selector = _scalar_or_field(action, params, "selector", str)
    if not selector:
        raise InvalidParamsError(action, "'selector' is required")
    return selector


def _wait_until(action: str, params: dict[str, Any], default: str) -> str:
    wait_until = params.get("waitUntil", params.get("wait_until", default))
    if wait_until not in _LOAD_STATES:
        raise InvalidParamsError(
            action,
            f"'waitUntil' must be one of {', '.join(_LOAD_STATES)}, got {wait_until!r}",
        )
    return wait_until


# ---------------------------------------------------------------------------
# ActionHandlers
# ---------------------------------------------------------------------------


class ActionHandlers:
    """The bridge's action implementations, bound to one ``BrowserSession``."""

    def __init__(self, session: BrowserSession, config: BridgeConfig) -> None:
        self.session = session
        self.config = config

    @property
    def page(self) -> Any:
        return self.session.page

    # -- Lifecycle -----------------------------------------------------------

    async def cmd_init(self, params: Any = None) -> dict[str, Any]:
        started = await self.session.start()
        if not started:
            return {"message": "Playwright already initialized"}
        return {"message": "Playwright initialized"}

    async def cmd_close(self, params: Any = None) -> dict[str, Any]:
        await self.session.close()
        return {"message": "Browser closed"}

    # -- Navigation ----------------------------------------------------------

    async def cmd_goto(self, params: Any) -> dict[str, Any]:
        """Navigate and wait for network-idle; report the page title."""
        url = _scalar_or_field("goto", params, "url", str)
        if not url:
            raise InvalidParamsError("goto", "'url' is required")
        options = params if isinstance(params, dict) else {}
        timeout = options.get("timeout", self.config.timeouts.navigation)
        wait_until = _wait_until("goto", options, "networkidle")

        page = self.page
        await page.goto(url, wait_until=wait_until, timeout=timeout)
        return {"url": url, "title": await page.title()}

    async def cmd_reload(self, params: Any = None) -> dict[str, Any]:
        page = self.page
        await page.reload(wait_until="networkidle")
        return {"url": page.url}

    async def cmd_wait_for_navigation(self, params: Any = None) -> dict[str, Any]:
        options = _as_dict("wait_for_navigation", params)
        wait_until = _wait_until("wait_for_navigation", options, "networkidle")
        page = self.page
        await page.wait_for_load_state(wait_until)
        return {"url": page.url, "ready": True}

    # -- Element actions -----------------------------------------------------

    async def cmd_click(self, params: Any) -> dict[str, Any]:
        target = _as_dict("click", params)
        strategy = await resolver.click(self.page, target, target.get("timeout"))
        return {"params": target, "strategy": strategy}

    async def cmd_fill(self, params: Any) -> dict[str, Any]:
        options = _as_dict("fill", params)
        field_name = _require_str("fill", options, "field")
        value = options.get("value")
        if value is None:
            raise InvalidParamsError("fill", "'value' is required")
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            value = str(value)
        if not isinstance(value, str):
            raise InvalidParamsError(
                "fill", f"'value' must be a string, got {type(value).__name__}"
            )
        strategy = await resolver.fill(
            self.page, field_name, value, options.get("timeout")
        )
        return {"field": field_name, "strategy": strategy}

    async def cmd_select(self, params: Any) -> dict[str, Any]:
        options = _as_dict("select", params)
        selector = _require_str("select", options, "selector")
        value = options.get("value")
        if value is None:
            raise InvalidParamsError("select", "'value' is required")
        await self.page.select_option(selector, value)
        return {"selected": value, "selector": selector}

    async def cmd_check(self, params: Any) -> dict[str, Any]:
        selector = _selector("check", params)
        await self.page.check(selector)
        return {"checked": True, "selector": selector}

    async def cmd_uncheck(self, params: Any) -> dict[str, Any]:
        selector = _selector("uncheck", params)
        await self.page.uncheck(selector)
        return {"checked": False, "selector": selector}

    async def cmd_hover(self, params: Any) -> dict[str, Any]:
        selector = _selector("hover", params)
        await self.page.hover(selector)
        return {"hovered": True, "selector": selector}

    async def cmd_type(self, params: Any) -> dict[str, Any]:
        """Type into *selector* one key at a time with a per-key delay."""
        options = _as_dict("type", params)
        selector = _require_str("type", options, "selector")
        text = options.get("text")
        if not isinstance(text, str):
            raise InvalidParamsError("type", "'text' is required")
        delay = options.get("delay", self.config.timeouts.type_delay)
        await self.page.locator(selector).press_sequentially(text, delay=delay)
        return {"typed": len(text), "selector": selector}

    async def cmd_press(self, params: Any) -> dict[str, Any]:
        key = _scalar_or_field("press", params, "key", str)
        if not key:
            raise InvalidParamsError("press", "'key' is required")
        await self.page.keyboard.press(key)
        return {"key": key}

    # -- Reading -------------------------------------------------------------

    async def cmd_assert_text(self, params: Any) -> dict[str, Any]:
        """Wait for *text* to appear; fail with a body snippet if it does not."""
        text = _scalar_or_field("assert_text", params, "text", str)
        if not text:
            raise InvalidParamsError("assert_text", "'text' is required")
        timeout = self.config.timeouts.assert_text
        if isinstance(params, dict) and params.get("timeout"):
            timeout = params["timeout"]

        page = self.page
        try:
            await page.wait_for_selector(f"text={text}", timeout=timeout)
        except PlaywrightError as exc:
            raise TextNotFoundError(text, await self._body_snippet()) from exc
        return {"text": text, "found": True}

    async def _body_snippet(self) -> str | None:
        try:
            content = await self.page.text_content("body", timeout=1000)
        except PlaywrightError:
            logger.debug("Could not read page body for snippet", exc_info=True)
            return None
        if not content:
            return None
        return content[:_SNIPPET_LENGTH]

    async def cmd_get_text(self, params: Any) -> dict[str, Any]:
        selector = _selector("getText", params)
        text = await self.page.text_content(selector)
        return {"text": text, "selector": selector}

    async def cmd_get_attribute(self, params: Any) -> dict[str, Any]:
        options = _as_dict("getAttribute", params)
        selector = _require_str("getAttribute", options, "selector")
        attribute = _require_str("getAttribute", options, "attribute")
        value = await self.page.get_attribute(selector, attribute)
        return {"attribute": attribute, "value": value, "selector": selector}

    async def cmd_evaluate(self, params: Any) -> dict[str, Any]:
        """Run caller-supplied script in the page. No sandboxing."""
        script = _scalar_or_field("evaluate", params, "script", str)
        if not script:
            raise InvalidParamsError("evaluate", "'script' is required")
        page = self.page
        if isinstance(params, dict) and "arg" in params:
            result = await page.evaluate(script, params["arg"])
        else:
            result = await page.evaluate(script)
        return {"result": result}

    # -- Misc ----------------------------------------------------------------

    async def cmd_take_screenshot(self, params: Any = None) -> dict[str, Any]:
        options = _as_dict("take_screenshot", params)
        timestamp = timestamp_ms()
        path = resolve_screenshot_path(
            options.get("dir") or self.config.screenshot_dir,
            filename=options.get("path") or options.get("filename"),
            full_path=options.get("fullPath"),
            timestamp=timestamp,
        )
        full_page = bool(options.get("fullPage", False))
        await self.page.screenshot(path=str(path), full_page=full_page)
        return {"path": str(path), "fullPage": full_page, "timestamp": timestamp}

    async def cmd_wait(self, params: Any = None) -> dict[str, Any]:
        duration = _scalar_or_field("wait", params, "duration", (int, float))
        # Zero, like a missing value, means the configured default.
        if not duration:
            duration = self.config.timeouts.wait
        if duration < 0:
            raise InvalidParamsError("wait", f"'duration' must be >= 0, got {duration}")
        await self.page.wait_for_timeout(duration)
        return {"duration": duration}
