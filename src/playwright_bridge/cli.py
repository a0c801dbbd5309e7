"""Argparse-based entry point for playwright-bridge.

The parent process spawns ``playwright-bridge`` and talks to it over stdio;
the flags here only shape the configuration the bridge starts with.
"""

from __future__ import annotations

import argparse
import sys

from playwright_bridge.config import BridgeConfig, get_version, load_config
from playwright_bridge.server import start_bridge


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="playwright-bridge",
        description="Line-delimited JSON bridge to a Patchright browser session",
    )
    parser.add_argument(
        "--version", action="version", version=f"playwright-bridge {get_version()}"
    )
    parser.add_argument("--config", default=None, help="Path to a JSON config file")
    parser.add_argument(
        "--headless",
        action="store_true",
        default=None,
        help="Run the browser without a window",
    )
    parser.add_argument(
        "--browser",
        choices=["chromium", "firefox", "webkit"],
        default=None,
        help="Browser engine to launch (default: chromium)",
    )
    parser.add_argument(
        "--screenshot-dir", default=None, help="Directory for screenshots"
    )
    parser.add_argument("--log-file", default=None, help="Path to the log file")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        default=None,
        help="Log level (default: INFO)",
    )
    return parser


def apply_args(config: BridgeConfig, args: argparse.Namespace) -> BridgeConfig:
    """Merge command-line flags into *config*; flags win."""
    if args.headless:
        config.browser.launch_options["headless"] = True
    if args.browser is not None:
        config.browser.browser_name = args.browser
    if args.screenshot_dir is not None:
        config.screenshot_dir = args.screenshot_dir
    if args.log_file is not None:
        config.log_file = args.log_file
    if args.log_level is not None:
        config.log_level = args.log_level
    return config


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    config = apply_args(load_config(args.config), args)
    sys.exit(start_bridge(config))
