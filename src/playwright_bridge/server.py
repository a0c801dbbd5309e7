"""Asyncio stdio server for playwright-bridge.

Reads one JSON command per line from stdin, runs it through ``Bridge`` and
writes one JSON response per line (stdout for success, stderr for errors).
The loop awaits each command to completion before reading the next line, so
commands never interleave on the shared page.

The process ends after a ``close`` command, on SIGINT/SIGTERM, or when stdin
reaches EOF; in every case the browser session is released first and the exit
code is 0.
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import sys
from typing import Any

from playwright_bridge.bridge import Bridge
from playwright_bridge.config import BridgeConfig
from playwright_bridge.errors import ProtocolError
from playwright_bridge.paths import get_log_path
from playwright_bridge.protocol import (
    INVALID_COMMAND,
    ProtocolWriter,
    error_response,
    ready_response,
)

logger = logging.getLogger("playwright_bridge.server")

_SIGNALS = (signal.SIGINT, signal.SIGTERM)


async def _discard_line(reader: asyncio.StreamReader, consumed: int) -> None:
    """Drop an over-long line up to and including its newline (or EOF).

    The rest of the line may still be arriving in pipe-sized chunks, so keep
    consuming until the terminator shows up.
    """
    while True:
        await reader.readexactly(consumed)
        try:
            await reader.readuntil(b"\n")
            return
        except asyncio.LimitOverrunError as exc:
            consumed = exc.consumed
        except asyncio.IncompleteReadError:
            return


async def serve(
    bridge: Bridge, reader: asyncio.StreamReader, writer: ProtocolWriter
) -> None:
    """Announce readiness, then process lines until close or EOF."""
    writer.write(ready_response())

    while not bridge.closed:
        try:
            line = await reader.readuntil(b"\n")
        except asyncio.IncompleteReadError as exc:
            # EOF; a final unterminated line is still a command.
            line = exc.partial
        except asyncio.LimitOverrunError as exc:
            await _discard_line(reader, exc.consumed)
            logger.warning(f"Input line exceeded the size limit: {exc}")
            writer.write(
                error_response(
                    INVALID_COMMAND, ProtocolError(f"{INVALID_COMMAND}: line too long")
                )
            )
            continue
        if not line:
            logger.info("stdin closed")
            break
        if not line.strip():
            continue

        response = await bridge.handle_line(line)
        writer.write(response)


async def run_bridge(
    config: BridgeConfig,
    stdin: Any = None,
    writer: ProtocolWriter | None = None,
) -> int:
    """Main entry point. Wires stdin to ``serve`` and handles termination signals."""
    bridge = Bridge(config)
    writer = writer if writer is not None else ProtocolWriter()
    loop = asyncio.get_running_loop()

    reader = asyncio.StreamReader(limit=config.max_line_bytes)
    protocol = asyncio.StreamReaderProtocol(reader)
    transport, _ = await loop.connect_read_pipe(
        lambda: protocol, stdin if stdin is not None else sys.stdin
    )

    stop_event = asyncio.Event()
    for sig in _SIGNALS:
        loop.add_signal_handler(sig, stop_event.set)

    serve_task = asyncio.create_task(serve(bridge, reader, writer))
    stop_task = asyncio.create_task(stop_event.wait())
    try:
        await asyncio.wait({serve_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)
        if stop_event.is_set():
            logger.info("Termination signal received, shutting down")
    finally:
        for task in (serve_task, stop_task):
            if not task.done():
                task.cancel()
        await asyncio.gather(serve_task, stop_task, return_exceptions=True)
        await bridge.shutdown()
        for sig in _SIGNALS:
            loop.remove_signal_handler(sig)
        transport.close()

    if not serve_task.cancelled() and serve_task.exception() is not None:
        raise serve_task.exception()
    return 0


def _setup_logging(config: BridgeConfig) -> None:
    """Send log records to a file.

    stdout and stderr both carry protocol messages, so nothing but JSON lines
    may be written there.
    """
    log_path = get_log_path(config.log_file)
    handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root = logging.getLogger()
    root.setLevel(config.log_level)
    root.addHandler(handler)


def start_bridge(config: BridgeConfig) -> int:
    """Entry point for the bridge process. Returns the exit code."""
    _setup_logging(config)
    logger.info(f"Bridge starting (pid={os.getpid()})")
    try:
        return asyncio.run(run_bridge(config))
    except Exception:
        logger.exception("Bridge crashed")
        raise
