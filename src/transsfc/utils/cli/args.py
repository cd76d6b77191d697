"""
Command-line argument parsing for TransSFC.

This module provides functionality for parsing command-line arguments
to locate the project, its configuration file and the log folder.
"""

import argparse
import sys
from pathlib import Path
from typing import NamedTuple

from ..core.version import get_version


class PathValidationError(Exception):
    """Raised when a path validation fails."""

    pass


class ParsedArgs(NamedTuple):
    """Container for parsed command-line arguments."""

    project_root: Path
    config_file: Path
    log_folder: Path
    once: bool
    write_sample_config: bool


class DefaultPaths:
    """Default paths for TransSFC."""

    PROJECT_ROOT: Path = Path(".")
    CONFIG_FILE: Path = Path("transsfc.yml")
    LOG_FOLDER: Path = Path("storage/logs/transsfc")


def validate_config_file_path(config_file_str: str, project_root: Path) -> Path:
    """
    Validate configuration file path.

    Args:
        config_file_str: String path to configuration file, relative paths
            are taken relative to the project root
        project_root: Resolved project root

    Returns:
        Resolved Path object for the configuration file

    Raises:
        PathValidationError: If the configuration file path is invalid
    """
    try:
        config_file = (project_root / Path(config_file_str).expanduser()).resolve()
    except (OSError, ValueError) as e:
        raise PathValidationError(f"Invalid config file path: {e}") from e

    if config_file.exists() and config_file.is_dir():
        raise PathValidationError(
            f"Config file path exists but is not a file: {config_file}"
        )

    if not config_file.parent.exists():
        raise PathValidationError(
            f"Parent directory for config file does not exist: {config_file.parent}"
        )

    return config_file


def validate_folder_path(path_str: str, folder_name: str, must_exist: bool = False) -> Path:
    """
    Validate and resolve a folder path.

    Args:
        path_str: String representation of the folder path
        folder_name: Name of the folder (for error messages)
        must_exist: Whether the folder has to exist already

    Returns:
        Resolved absolute path to the folder

    Raises:
        PathValidationError: If the path is invalid
    """
    try:
        path = Path(path_str).expanduser().resolve()
    except (OSError, ValueError) as e:
        raise PathValidationError(f"Invalid {folder_name} path: {e}") from e

    if path.exists() and not path.is_dir():
        raise PathValidationError(
            f"{folder_name.capitalize()} path exists but is not a directory: {path}"
        )
    if must_exist and not path.exists():
        raise PathValidationError(f"{folder_name.capitalize()} does not exist: {path}")

    return path


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create the argument parser for TransSFC.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="transsfc",
        description="TransSFC - keep language catalogs in sync with translation blocks in templates",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  transsfc
    Scan resources/views, update lang/<code>/app.php and keep watching

  transsfc --once
    Synchronize once and exit

  transsfc --project-root ~/sites/shop --config-file config/transsfc.yml
    Run against another project with a custom config file

  transsfc --write-sample-config
    Write a documented transsfc.yml and exit
""",
    )

    defaults = DefaultPaths()

    _ = parser.add_argument(
        "--project-root",
        type=str,
        default=str(defaults.PROJECT_ROOT),
        help="Project directory that relative paths are resolved against (default: current directory).",
        metavar="PATH",
    )

    _ = parser.add_argument(
        "--config-file",
        type=str,
        default=str(defaults.CONFIG_FILE),
        help=(
            "Path to the configuration file, relative to the project root (default: %(default)s). "
            "Built-in defaults are used if the file doesn't exist."
        ),
        metavar="PATH",
    )

    _ = parser.add_argument(
        "--log-folder",
        type=str,
        default=None,
        help=(
            f"Path to the log folder (default: <project-root>/{defaults.LOG_FOLDER}). "
            "The directory will be created if it doesn't exist."
        ),
        metavar="PATH",
    )

    _ = parser.add_argument(
        "--once",
        action="store_true",
        help="Synchronize all templates once and exit instead of watching for changes.",
    )

    _ = parser.add_argument(
        "--write-sample-config",
        action="store_true",
        help="Write a documented sample configuration to the config file path and exit.",
    )

    _ = parser.add_argument(
        "--version", action="version", version=f"%(prog)s {get_version()}"
    )

    return parser


def parse_arguments(args: list[str] | None = None) -> ParsedArgs:
    """
    Parse command-line arguments.

    Args:
        args: List of arguments to parse (defaults to sys.argv[1:])

    Returns:
        ParsedArgs containing validated and resolved paths

    Raises:
        SystemExit: If argument parsing or path validation fails, or --help is requested
    """
    parser = create_argument_parser()
    parsed = parser.parse_args(args)

    try:
        project_root_str: str = getattr(parsed, "project_root", "")
        config_file_str: str = getattr(parsed, "config_file", "")
        log_folder_str: str | None = getattr(parsed, "log_folder", None)

        if not project_root_str or not config_file_str:
            raise ValueError("Missing required arguments from parser")

        project_root = validate_folder_path(project_root_str, "project root", must_exist=True)
        config_file = validate_config_file_path(config_file_str, project_root)
        log_folder = validate_folder_path(
            log_folder_str or str(project_root / DefaultPaths.LOG_FOLDER), "log folder"
        )
    except PathValidationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    return ParsedArgs(
        project_root=project_root,
        config_file=config_file,
        log_folder=log_folder,
        once=bool(getattr(parsed, "once", False)),
        write_sample_config=bool(getattr(parsed, "write_sample_config", False)),
    )


def ensure_directories_exist(parsed_args: ParsedArgs) -> None:
    """
    Ensure that the log directory exists.

    Args:
        parsed_args: Parsed command-line arguments

    Raises:
        OSError: If directory creation fails
    """
    parsed_args.log_folder.mkdir(parents=True, exist_ok=True)


def get_parsed_args(args: list[str] | None = None) -> ParsedArgs:
    """
    Parse arguments and ensure directories exist.

    Returns:
        ParsedArgs containing validated paths with directories created

    Raises:
        SystemExit: If argument parsing fails
        OSError: If directory creation fails
    """
    parsed_args = parse_arguments(args)
    ensure_directories_exist(parsed_args)
    return parsed_args
