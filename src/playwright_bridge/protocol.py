"""Line-delimited JSON framing for the bridge.

Inbound: one JSON object per line, ``{"action": ..., "params": ...}``.
Outbound: one JSON object per line.  Successful and informational responses
go to stdout, errors go to stderr, so the parent can tell outcomes apart by
channel as well as by the ``status`` field.
"""

from __future__ import annotations

import json
import math
import sys
import traceback
from typing import Any, TextIO

from pydantic import BaseModel, ConfigDict, ValidationError

from playwright_bridge.errors import ProtocolError

INVALID_COMMAND = "Invalid JSON command"


class Command(BaseModel):
    """One parsed input line. ``params`` is interpreted by each handler."""

    model_config = ConfigDict(extra="ignore")

    action: str
    params: Any = None


def parse_command(line: bytes | str) -> Command:
    """Parse a single input line into a ``Command``.

    Raises ``ProtocolError`` for undecodable bytes, invalid JSON, a JSON value
    that is not an object, or an object without a string ``action``.
    """
    try:
        text = line.decode("utf-8") if isinstance(line, bytes) else line
        data = json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ProtocolError(f"{INVALID_COMMAND}: {exc}") from exc
    if not isinstance(data, dict):
        raise ProtocolError(
            f"{INVALID_COMMAND}: expected an object, got {type(data).__name__}"
        )
    try:
        return Command.model_validate(data, strict=True)
    except ValidationError as exc:
        raise ProtocolError(f"{INVALID_COMMAND}: 'action' must be a string") from exc


# ---------------------------------------------------------------------------
# Response envelopes
# ---------------------------------------------------------------------------


def ok_response(action: str, payload: dict[str, Any] | None = None) -> dict[str, Any]:
    return {"status": "ok", "action": action, **(payload or {})}


def ready_response() -> dict[str, Any]:
    return {"status": "ready", "message": "Playwright bridge started"}


def error_response(message: str, exc: BaseException | None = None) -> dict[str, Any]:
    """Build the error envelope, carrying *exc*'s message and trace if given."""
    error: dict[str, str] | None = None
    if exc is not None:
        error = {
            "message": str(exc),
            "stack": "".join(
                traceback.format_exception(type(exc), exc, exc.__traceback__)
            ),
        }
    return {"status": "error", "message": message, "error": error}


def is_error(response: dict[str, Any]) -> bool:
    return response.get("status") == "error"


# ---------------------------------------------------------------------------
# Writer
# ---------------------------------------------------------------------------


def _finite(value: Any) -> Any:
    """Replace NaN and infinities with ``None``, like ``JSON.stringify``."""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {k: _finite(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_finite(v) for v in value]
    return value


class ProtocolWriter:
    """Writes responses as single JSON lines to the right channel."""

    def __init__(self, out: TextIO | None = None, err: TextIO | None = None) -> None:
        self._out = out if out is not None else sys.stdout
        self._err = err if err is not None else sys.stderr

    def write(self, response: dict[str, Any]) -> None:
        stream = self._err if is_error(response) else self._out
        # One write call per message keeps lines whole.
        line = json.dumps(_finite(response), default=str, allow_nan=False)
        stream.write(line + "\n")
        stream.flush()
