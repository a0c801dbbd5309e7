"""Exception types raised inside the bridge.

Every class here is a ``BridgeError``; the dispatcher reports their text as the
response ``message``.  Errors raised by the browser engine itself
(``patchright.async_api.Error`` and its ``TimeoutError``) are not wrapped.
"""

from __future__ import annotations

from typing import Any


class BridgeError(Exception):
    """Base class for errors the bridge raises on purpose."""


class ProtocolError(BridgeError):
    """An input line could not be turned into a command."""


class NotInitializedError(BridgeError):
    def __init__(self) -> None:
        super().__init__('Bridge not initialized. Send "init" command first.')


class SessionClosedError(BridgeError):
    def __init__(self) -> None:
        super().__init__("Bridge is closed.")


class InitializationError(BridgeError):
    """The browser, context or page could not be acquired."""


class InvalidParamsError(BridgeError):
    """A handler was given params it cannot interpret."""

    def __init__(self, action: str, detail: str) -> None:
        self.action = action
        super().__init__(f"Invalid params for {action}: {detail}")


class ResolutionError(BridgeError):
    """No element targeting strategy succeeded."""

    def __init__(self, message: str, attempted: list[str] | None = None) -> None:
        self.attempted: list[str] = list(attempted or [])
        if self.attempted:
            message = f"{message} (tried: {', '.join(self.attempted)})"
        super().__init__(message)


class TextNotFoundError(BridgeError):
    """``assert_text`` timed out waiting for its text."""

    def __init__(self, text: str, snippet: str | None = None) -> None:
        self.text = text
        self.snippet = snippet
        message = f'Text not found: "{text}"'
        if snippet:
            message += f". Page contains: {snippet}..."
        super().__init__(message)


def describe_params(params: dict[str, Any]) -> str:
    """Render targeting params compactly for error messages."""
    return ", ".join(f"{k}={v!r}" for k, v in params.items() if v is not None)
