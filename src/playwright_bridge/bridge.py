"""Command dispatch for playwright-bridge.

``Bridge`` owns the browser session and maps each command's ``action`` to a
handler through a fixed table.  It enforces that nothing but ``init`` runs
before the session is ready and turns every handler exception into an error
response, so a failing command never takes the process down.
"""

from __future__ import annotations

import logging
from typing import Any

from playwright_bridge.config import BridgeConfig
from playwright_bridge.errors import (
    BridgeError,
    NotInitializedError,
    ProtocolError,
    SessionClosedError,
)
from playwright_bridge.handlers import ActionHandlers
from playwright_bridge.protocol import (
    INVALID_COMMAND,
    Command,
    error_response,
    ok_response,
    parse_command,
)
from playwright_bridge.session import BrowserSession

logger = logging.getLogger("playwright_bridge.bridge")

# action name -> ActionHandlers method
ACTIONS: dict[str, str] = {
    "init": "cmd_init",
    "goto": "cmd_goto",
    "click": "cmd_click",
    "fill": "cmd_fill",
    "assert_text": "cmd_assert_text",
    "reload": "cmd_reload",
    "take_screenshot": "cmd_take_screenshot",
    "wait": "cmd_wait",
    "close": "cmd_close",
    "select": "cmd_select",
    "check": "cmd_check",
    "uncheck": "cmd_uncheck",
    "getText": "cmd_get_text",
    "get_text": "cmd_get_text",
    "getAttribute": "cmd_get_attribute",
    "get_attribute": "cmd_get_attribute",
    "evaluate": "cmd_evaluate",
    "press": "cmd_press",
    "type": "cmd_type",
    "hover": "cmd_hover",
    "wait_for_navigation": "cmd_wait_for_navigation",
}


class Bridge:
    """Single-consumer dispatcher over one ``BrowserSession``."""

    def __init__(
        self,
        config: BridgeConfig,
        session: BrowserSession | None = None,
        handlers: ActionHandlers | None = None,
    ) -> None:
        self.config = config
        self.session = session if session is not None else BrowserSession(config)
        self.handlers = (
            handlers if handlers is not None else ActionHandlers(self.session, config)
        )

    @property
    def closed(self) -> bool:
        return self.session.is_closed

    async def handle_line(self, line: bytes | str) -> dict[str, Any]:
        """Parse one input line and execute it."""
        try:
            command = parse_command(line)
        except ProtocolError as exc:
            logger.warning(f"Rejected input line: {exc}")
            return error_response(INVALID_COMMAND, exc)
        return await self.execute(command)

    async def execute(self, command: Command) -> dict[str, Any]:
        action = command.action
        logger.debug(f"Received command: {action} params={command.params!r}")

        if self.session.is_closed:
            return error_response(str(SessionClosedError()))
        if not self.session.is_ready and action != "init":
            return error_response(str(NotInitializedError()))

        method_name = ACTIONS.get(action)
        if method_name is None:
            logger.warning(f"Unknown action: {action!r}")
            return error_response(f"Unknown action: {action}")
        handler = getattr(self.handlers, method_name)

        try:
            payload = await handler(command.params)
        except BridgeError as exc:
            logger.warning(f"Command {action!r} failed: {exc}")
            return error_response(str(exc), exc)
        except Exception as exc:
            logger.exception(f"Command {action!r} raised an exception")
            return error_response(f"Command execution failed: {action}", exc)

        logger.debug(f"Command {action!r} succeeded")
        return ok_response(action, payload)

    async def shutdown(self) -> None:
        """Release the session outside of a ``close`` command (signals, EOF)."""
        if not self.session.is_closed:
            logger.info("Shutting down browser session")
            await self.session.close()
