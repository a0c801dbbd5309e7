"""Tests for playwright_bridge.cli module."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from playwright_bridge.cli import apply_args, build_parser, main
from playwright_bridge.config import BridgeConfig


class TestParser:
    def test_defaults_leave_config_alone(self):
        args = build_parser().parse_args([])
        config = apply_args(BridgeConfig(), args)
        assert config.browser.launch_options == {"headless": False}
        assert config.browser.browser_name == "chromium"
        assert config.screenshot_dir == "./screenshots"
        assert config.log_file is None
        assert config.log_level == "INFO"

    def test_flags_override_config(self):
        args = build_parser().parse_args(
            [
                "--headless",
                "--browser",
                "webkit",
                "--screenshot-dir",
                "/tmp/s",
                "--log-file",
                "/tmp/b.log",
                "--log-level",
                "debug",
            ]
        )
        config = apply_args(BridgeConfig(), args)
        assert config.browser.launch_options["headless"] is True
        assert config.browser.browser_name == "webkit"
        assert config.screenshot_dir == "/tmp/s"
        assert config.log_file == "/tmp/b.log"
        assert config.log_level == "DEBUG"

    def test_rejects_unknown_browser(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--browser", "lynx"])

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as info:
            build_parser().parse_args(["--version"])
        assert info.value.code == 0
        assert "playwright-bridge" in capsys.readouterr().out


class TestMain:
    def test_runs_bridge_and_exits_with_its_code(self, config_file):
        with patch("playwright_bridge.cli.start_bridge", return_value=0) as start:
            with pytest.raises(SystemExit) as info:
                main(["--config", str(config_file), "--headless"])
        assert info.value.code == 0
        config = start.call_args.args[0]
        assert config.browser.browser_name == "firefox"
        assert config.browser.launch_options["headless"] is True
