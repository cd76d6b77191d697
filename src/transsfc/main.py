"""
Main entry point for TransSFC.

This module parses arguments, sets up logging, loads configuration, and runs
the synchronization engine until it is asked to shut down.
"""

import asyncio
import logging
import logging.handlers
import signal
import sys
from datetime import datetime
from pathlib import Path

import yaml
from pydantic import ValidationError

from .config.manager import ConfigManager
from .sync.engine import SyncEngine
from .utils.cli.args import get_parsed_args
from .utils.core.exceptions import ConfigurationError

LOG_FILES = ["transsfc.log", "transsfc-errors.log"]


def rotate_logs_on_startup(logs_dir: Path) -> None:
    """
    Rotate existing log files on startup with timestamp-based naming.

    Args:
        logs_dir: Directory containing log files
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    for log_file in LOG_FILES:
        log_path = logs_dir / log_file
        if log_path.exists():
            backup_path = logs_dir / f"{log_file}.{timestamp}"
            try:
                _ = log_path.rename(backup_path)
            except OSError as e:
                print(f"Warning: Failed to rotate {log_file}: {e}", file=sys.stderr)


def cleanup_old_logs(logs_dir: Path, max_files: int = 10) -> None:
    """
    Clean up old timestamped log files, keeping only the most recent ones.

    Args:
        logs_dir: Directory containing log files
        max_files: Maximum number of timestamped log files to keep per type
    """
    for log_type in LOG_FILES:
        timestamped_files = [
            file_path
            for file_path in logs_dir.glob(f"{log_type}.*")
            if file_path.name != log_type
        ]

        # Newest first
        timestamped_files.sort(key=lambda x: x.stat().st_mtime, reverse=True)

        for file_path in timestamped_files[max_files:]:
            try:
                file_path.unlink()
            except OSError as e:
                print(f"Warning: Failed to remove {file_path.name}: {e}", file=sys.stderr)


def setup_logging(logs_dir: Path, console_level: int | str = logging.INFO) -> None:
    """
    Configure logging with rotation and multiple handlers.

    Sets up a detailed rotating file log, an errors-only rotating file log
    and a console handler at the requested level.

    Args:
        logs_dir: Directory for log files
        console_level: Minimum level shown on stdout
    """
    _ = logs_dir.mkdir(exist_ok=True, parents=True)

    rotate_logs_on_startup(logs_dir)
    cleanup_old_logs(logs_dir, max_files=10)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    detailed_formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
    )
    simple_formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")

    file_handler = logging.handlers.RotatingFileHandler(
        logs_dir / "transsfc.log",
        maxBytes=5 * 1024 * 1024,  # 5MB
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(detailed_formatter)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(simple_formatter)

    error_handler = logging.handlers.RotatingFileHandler(
        logs_dir / "transsfc-errors.log",
        maxBytes=5 * 1024 * 1024,  # 5MB
        backupCount=3,
        encoding="utf-8",
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(detailed_formatter)

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)
    root_logger.addHandler(error_handler)

    # Set specific log levels for noisy libraries
    logging.getLogger("watchdog").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


logger = logging.getLogger(__name__)


def setup_signal_handlers(shutdown_event: asyncio.Event) -> None:
    """
    Setup signal handlers for graceful shutdown.

    SIGTERM and SIGINT set the shutdown event; the engine then stops the
    watcher and waits for in-flight processing.
    """
    loop = asyncio.get_running_loop()

    def signal_handler(signum: int, _frame: object) -> None:
        """Handle shutdown signals."""
        signal_name = signal.Signals(signum).name
        logger.info(f"Received {signal_name} signal, initiating graceful shutdown...")
        _ = loop.call_soon_threadsafe(shutdown_event.set)

    _ = signal.signal(signal.SIGTERM, signal_handler)
    _ = signal.signal(signal.SIGINT, signal_handler)

    logger.debug("Signal handlers registered for graceful shutdown")


async def main(args: list[str] | None = None) -> None:
    """
    Main entry point for the TransSFC application.

    Sets up logging, loads configuration, and runs the engine with
    comprehensive error handling. Exits with status 1 on startup failures.
    """
    parsed_args = get_parsed_args(args)

    if parsed_args.write_sample_config:
        ConfigManager.create_sample_config(parsed_args.config_file)
        print(f"Sample configuration written to {parsed_args.config_file}")
        return

    setup_logging(parsed_args.log_folder)
    logger.info("TransSFC starting up...")

    try:
        config = ConfigManager.load_or_default(parsed_args.config_file)
    except (yaml.YAMLError, ValueError, ValidationError) as e:
        logger.error(f"Failed to load configuration: {e}")
        logger.error(f"Please check {parsed_args.config_file} for errors")
        sys.exit(1)

    for handler in logging.getLogger().handlers:
        if not isinstance(handler, logging.FileHandler):
            handler.setLevel(config.logging.level)

    engine = SyncEngine(config, project_root=parsed_args.project_root)
    watch = config.watcher.enabled and not parsed_args.once

    shutdown_event = asyncio.Event()
    setup_signal_handlers(shutdown_event)

    try:
        await engine.run(shutdown_event, watch=watch)
    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(1)
    except Exception as e:
        logger.exception(f"Fatal error in main: {e}")
        sys.exit(1)
    finally:
        logger.info("TransSFC shutdown complete")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Stopped by user")
