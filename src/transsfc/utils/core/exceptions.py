"""
Basic exception classes for TransSFC.

This module contains the error taxonomy shared by the synchronization engine.
None of these errors is fatal to a running watcher: each one is recovered at
the granularity of a single block, catalog or template.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path


class ErrorSeverity(Enum):
    """Error severity levels for classification and handling."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Categories of errors for appropriate handling strategies."""

    PARSE = "parse"
    IO = "io"
    SCHEDULER = "scheduler"
    CONFIGURATION = "configuration"
    UNKNOWN = "unknown"


class TransSFCError(Exception):
    """Base exception class for TransSFC specific errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        context: object | None = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message)
        self.category: ErrorCategory = category
        self.severity: ErrorSeverity = severity
        self.context: object | None = context
        self.recoverable: bool = recoverable


class ParseError(TransSFCError):
    """Malformed array literal in a translation block or catalog file."""

    def __init__(
        self,
        message: str,
        source: str = "",
        position: int | None = None,
    ) -> None:
        super().__init__(
            message,
            category=ErrorCategory.PARSE,
            severity=ErrorSeverity.LOW,
            context=source,
        )
        self.source: str = source
        self.position: int | None = position


class CatalogIOError(TransSFCError):
    """Reading, writing or renaming a catalog file failed."""

    def __init__(self, message: str, catalog_path: Path) -> None:
        super().__init__(
            message,
            category=ErrorCategory.IO,
            severity=ErrorSeverity.MEDIUM,
            context=catalog_path,
        )
        self.catalog_path: Path = catalog_path


class SchedulerFault(TransSFCError):
    """Unexpected failure inside a processing task."""

    def __init__(self, message: str, path: Path, error: BaseException) -> None:
        super().__init__(
            message,
            category=ErrorCategory.SCHEDULER,
            severity=ErrorSeverity.MEDIUM,
            context=path,
        )
        self.path: Path = path
        self.error: BaseException = error


class ConfigurationError(TransSFCError):
    """Configuration-related errors."""

    def __init__(self, message: str, context: object | None = None) -> None:
        super().__init__(
            message,
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.HIGH,
            recoverable=False,
            context=context,
        )
