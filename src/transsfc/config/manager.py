"""Configuration manager for TransSFC.

This module provides functionality for loading and validating YAML
configuration files with Pydantic model validation, and for writing a
documented sample configuration.
"""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from .schema import TransSFCConfig


logger = logging.getLogger(__name__)


class ConfigManager:
    """Configuration manager for handling YAML config files with Pydantic validation."""

    @staticmethod
    def load_config(config_path: Path) -> TransSFCConfig:
        """
        Load and validate configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            TransSFCConfig: Validated configuration object

        Raises:
            FileNotFoundError: If the config file doesn't exist
            yaml.YAMLError: If the YAML syntax is invalid
            ValueError: If the document is not a mapping
            ValidationError: If the configuration fails Pydantic validation
        """
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with config_path.open("r", encoding="utf-8") as f:
                raw_config_data: object = yaml.safe_load(f)  # pyright: ignore[reportAny]
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML syntax in {config_path}: {e}") from e

        if raw_config_data is None:
            config_data: dict[str, object] = {}
        elif isinstance(raw_config_data, dict):
            config_data = raw_config_data  # pyright: ignore[reportUnknownVariableType]
        else:
            raise ValueError(
                f"Configuration file must contain a YAML dictionary, got {type(raw_config_data).__name__}"
            )

        parsed_data = ConfigManager._parse_config_data(config_data)

        try:
            return TransSFCConfig(**parsed_data)  # pyright: ignore[reportArgumentType]
        except ValidationError as e:
            raise e

    @staticmethod
    def load_or_default(config_path: Path) -> TransSFCConfig:
        """
        Load the configuration file, falling back to defaults if it does not exist.

        Raises:
            yaml.YAMLError: If the YAML syntax is invalid
            ValueError: If the document is not a mapping
            ValidationError: If the configuration fails Pydantic validation
        """
        if not config_path.exists():
            logger.info(f"No configuration file at {config_path}, using defaults")
            return ConfigManager.get_default_config()
        config = ConfigManager.load_config(config_path)
        logger.info(f"Configuration loaded from {config_path}")
        return config

    @staticmethod
    def _parse_config_data(config_data: dict[str, object]) -> dict[str, object]:
        """
        Normalize raw configuration data before validation.

        Args:
            config_data: Raw configuration data from YAML

        Returns:
            dict[str, object]: Parsed configuration data
        """
        parsed_data = config_data.copy()

        for section, value in config_data.items():
            match section, value:
                case "templates", {"extension": str() as extension, **rest}:
                    # Allow "blade.php" as shorthand for ".blade.php"
                    extension = extension.strip()
                    if extension and not extension.startswith("."):
                        extension = f".{extension}"
                    parsed_data[section] = {**rest, "extension": extension}

                case "logging", {"level": str() as level, **rest}:
                    parsed_data[section] = {**rest, "level": level.strip().upper()}

                case "logging", str() as level:
                    # Shorthand: "logging: debug"
                    parsed_data[section] = {"level": level.strip().upper()}

                case _:
                    parsed_data[section] = value

        return parsed_data

    @staticmethod
    def get_default_config() -> TransSFCConfig:
        """
        Get a configuration object with default values.

        Returns:
            TransSFCConfig: Configuration matching a standard Laravel project layout
        """
        return TransSFCConfig()

    @staticmethod
    def create_sample_config(sample_path: Path) -> None:
        """
        Create a sample configuration file with all options and documentation.

        Args:
            sample_path: Path where to create the sample configuration file
        """
        sample_content = ConfigManager._generate_sample_content()

        _ = sample_path.parent.mkdir(parents=True, exist_ok=True)
        _ = sample_path.write_text(sample_content, encoding="utf-8")

    @staticmethod
    def _generate_sample_content() -> str:
        """
        Generate sample configuration file content with documentation.

        Returns:
            str: Sample configuration file content
        """
        return """# TransSFC Configuration File
# Keeps per-language catalog files in sync with the translation blocks
# embedded in your templates.

# ============================================================================
# Paths (relative to the project root)
# ============================================================================

paths:
  # Directory containing the template files
  templates_root: resources/views
  # Directory containing one subdirectory per language code
  catalogs_root: lang

# ============================================================================
# Templates
# ============================================================================

templates:
  # File extension identifying template files
  extension: .blade.php
  # Directive opening a translation block, e.g. @TransSFC('en')
  open_tag: "@TransSFC"
  # Directive closing a translation block
  close_tag: "@endTransSFC"

# ============================================================================
# Catalogs
# ============================================================================

catalogs:
  # Catalog file name inside each language directory
  filename: app.php
  # First line of every catalog file
  header: "<?php"
  # Prefix of every key managed by TransSFC (keys look like sfc.<view>.<key>)
  key_prefix: sfc
  # Spaces per indentation level (1-8)
  indent_width: 4

# ============================================================================
# Watcher
# ============================================================================

watcher:
  # Keep watching for changes after the initial scan
  enabled: true
  # Quiet period in milliseconds after the last change before a file is processed
  debounce_ms: 300
  # Maximum number of files processed at the same time (1-64)
  max_concurrency: 2
  # Remove keys of templates that no longer exist after the initial scan
  prune_orphans: false

# ============================================================================
# Logging
# ============================================================================

logging:
  # Console log level (DEBUG, INFO, WARNING, ERROR)
  level: INFO
"""
