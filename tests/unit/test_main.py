"""
Tests for main.py entry point functionality.

This module tests logging setup and rotation, signal handling, and the main
entry point function against temporary projects.
"""

import asyncio
import logging
import os
import signal
import time
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from transsfc import main as sync_main
from transsfc.main import (
    cleanup_old_logs,
    main,
    rotate_logs_on_startup,
    setup_logging,
    setup_signal_handlers,
)
from tests.utils.test_helpers import read_catalog, translation_block, write_template


@pytest.fixture
def preserved_root_logger() -> Iterator[logging.Logger]:
    """Restore the root logger's handlers and level after the test."""
    root_logger = logging.getLogger()
    original_handlers = root_logger.handlers[:]
    original_level = root_logger.level
    try:
        yield root_logger
    finally:
        for handler in root_logger.handlers:
            if handler not in original_handlers:
                handler.close()
        root_logger.handlers = original_handlers
        root_logger.setLevel(original_level)


@pytest.fixture
def laravel_project(tmp_path: Path) -> Path:
    """Project using the default layout with one template and one catalog."""
    views = tmp_path / "resources" / "views"
    _ = write_template(
        views,
        "auth/login.blade.php",
        translation_block("en", "['title' => 'Login']"),
        translation_block("de", "['title' => 'Anmelden']"),
    )
    (tmp_path / "lang" / "en").mkdir(parents=True)
    return tmp_path


class TestLoggingSetup:
    """Test cases for logging configuration."""

    def test_setup_logging_configures_handlers(
        self, tmp_path: Path, preserved_root_logger: logging.Logger
    ) -> None:
        """Test that setup_logging configures file, console and error handlers."""
        logs_dir = tmp_path / "logs"

        setup_logging(logs_dir)

        assert logs_dir.is_dir()
        handler_types = [type(h).__name__ for h in preserved_root_logger.handlers]
        assert handler_types.count("RotatingFileHandler") == 2
        assert "StreamHandler" in handler_types
        assert logging.getLogger("watchdog").level == logging.WARNING

    def test_rotate_logs_on_startup(self, tmp_path: Path) -> None:
        """Test that existing logs are renamed with a timestamp."""
        _ = (tmp_path / "transsfc.log").write_text("old run", encoding="utf-8")

        rotate_logs_on_startup(tmp_path)

        assert not (tmp_path / "transsfc.log").exists()
        rotated = list(tmp_path.glob("transsfc.log.*"))
        assert len(rotated) == 1
        assert rotated[0].read_text(encoding="utf-8") == "old run"

    def test_cleanup_old_logs(self, tmp_path: Path) -> None:
        """Test that only the newest rotated logs are kept."""
        now = time.time()
        for i in range(5):
            path = tmp_path / f"transsfc.log.2024010{i}_000000"
            _ = path.write_text(str(i), encoding="utf-8")
            os.utime(path, (now - 100 + i, now - 100 + i))
        _ = (tmp_path / "transsfc.log").write_text("current", encoding="utf-8")

        cleanup_old_logs(tmp_path, max_files=2)

        remaining = sorted(p.name for p in tmp_path.glob("transsfc.log.*"))
        assert remaining == ["transsfc.log.20240103_000000", "transsfc.log.20240104_000000"]
        assert (tmp_path / "transsfc.log").exists()


class TestSignalHandling:
    """Test cases for signal handling functionality."""

    @pytest.mark.asyncio
    async def test_signal_sets_shutdown_event(self) -> None:
        """Test that SIGTERM and SIGINT set the shutdown event."""
        shutdown_event = asyncio.Event()

        with patch("signal.signal") as mock_signal:
            setup_signal_handlers(shutdown_event)

            signals_handled = [call[0][0] for call in mock_signal.call_args_list]  # pyright: ignore[reportAny]
            assert signals_handled == [signal.SIGTERM, signal.SIGINT]

            signal_handler = mock_signal.call_args_list[0][0][1]  # pyright: ignore[reportAny]
            signal_handler(signal.SIGTERM, None)

        await asyncio.wait_for(shutdown_event.wait(), timeout=1)
        assert shutdown_event.is_set()


class TestMain:
    """Test cases for the async main entry point."""

    @pytest.mark.asyncio
    async def test_main_once_synchronizes_and_exits(
        self, laravel_project: Path, preserved_root_logger: logging.Logger
    ) -> None:
        """Test a one-shot run against a project with default layout."""
        with patch("transsfc.main.setup_logging"), \
             patch("transsfc.main.setup_signal_handlers"):
            await main(["--project-root", str(laravel_project), "--once"])

        catalogs = laravel_project / "lang"
        assert read_catalog(catalogs, "en") == {"sfc.auth.login.title": "Login"}
        assert read_catalog(catalogs, "de") == {"sfc.auth.login.title": "Anmelden"}

    @pytest.mark.asyncio
    async def test_main_uses_config_file(
        self, tmp_path: Path, preserved_root_logger: logging.Logger
    ) -> None:
        """Test that a config file relative to the project root is honoured."""
        _ = write_template(
            tmp_path / "templates", "home.blade.php", translation_block("en", "['title' => 'Home']")
        )
        _ = (tmp_path / "transsfc.yml").write_text(
            "paths:\n  templates_root: templates\n  catalogs_root: i18n\ncatalogs:\n  key_prefix: ui\n",
            encoding="utf-8",
        )

        with patch("transsfc.main.setup_logging"), \
             patch("transsfc.main.setup_signal_handlers"):
            await main(["--project-root", str(tmp_path), "--once"])

        assert read_catalog(tmp_path / "i18n", "en") == {"ui.home.title": "Home"}

    @pytest.mark.asyncio
    async def test_main_missing_templates_root_exits(
        self, tmp_path: Path, preserved_root_logger: logging.Logger
    ) -> None:
        """Test that a missing templates root exits with status 1."""
        with patch("transsfc.main.setup_logging"), \
             patch("transsfc.main.setup_signal_handlers"):
            with pytest.raises(SystemExit) as exc_info:
                await main(["--project-root", str(tmp_path), "--once"])

        assert exc_info.value.code == 1

    @pytest.mark.asyncio
    async def test_main_invalid_config_exits(
        self, tmp_path: Path, preserved_root_logger: logging.Logger
    ) -> None:
        """Test that an invalid configuration exits with status 1."""
        _ = (tmp_path / "transsfc.yml").write_text("watcher:\n  max_concurrency: 0\n", encoding="utf-8")

        with patch("transsfc.main.setup_logging"), \
             patch("transsfc.main.SyncEngine") as mock_engine:
            with pytest.raises(SystemExit) as exc_info:
                await main(["--project-root", str(tmp_path)])

        assert exc_info.value.code == 1
        mock_engine.assert_not_called()

    @pytest.mark.asyncio
    async def test_main_write_sample_config(self, tmp_path: Path) -> None:
        """Test that --write-sample-config writes the file and returns."""
        with patch("transsfc.main.setup_logging") as mock_setup_logging:
            await main(["--project-root", str(tmp_path), "--write-sample-config"])

        assert (tmp_path / "transsfc.yml").exists()
        mock_setup_logging.assert_not_called()

    @pytest.mark.asyncio
    async def test_main_watch_until_shutdown(
        self, laravel_project: Path, preserved_root_logger: logging.Logger
    ) -> None:
        """Test that watch mode is requested unless --once is given."""
        engine = MagicMock()
        engine.run = AsyncMock()

        with patch("transsfc.main.setup_logging"), \
             patch("transsfc.main.setup_signal_handlers"), \
             patch("transsfc.main.SyncEngine", return_value=engine):
            await main(["--project-root", str(laravel_project)])

        engine.run.assert_awaited_once()
        assert engine.run.await_args.kwargs["watch"] is True  # pyright: ignore[reportOptionalMemberAccess]


class TestSyncEntryPoint:
    """Test cases for the synchronous console script wrapper."""

    def test_failure_exits_with_status_one(self) -> None:
        """Test that an unexpected error is logged and exits with status 1."""
        with patch("transsfc.async_main", new=AsyncMock(side_effect=RuntimeError("boom"))):
            with pytest.raises(SystemExit) as exc_info:
                sync_main()

        assert exc_info.value.code == 1
