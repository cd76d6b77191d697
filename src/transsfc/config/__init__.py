"""Configuration loading and validation for TransSFC."""

from .manager import ConfigManager
from .schema import TransSFCConfig

__all__ = ["ConfigManager", "TransSFCConfig"]
