"""Configuration schema for TransSFC using nested Pydantic models."""

from pathlib import Path
from typing import Annotated, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.core.exceptions import ParseError


class PathsConfig(BaseModel):
    """Filesystem locations, relative to the project root unless absolute."""

    templates_root: Path = Field(
        default=Path("resources/views"),
        description="Directory containing the template files",
    )
    catalogs_root: Path = Field(
        default=Path("lang"),
        description="Directory containing one subdirectory per language code",
    )

    def resolve(self, project_root: Path) -> tuple[Path, Path]:
        """
        Resolve both roots against a project root.

        Args:
            project_root: Base directory for relative paths

        Returns:
            Absolute ``(templates_root, catalogs_root)``
        """
        return (
            (project_root / self.templates_root).resolve(),
            (project_root / self.catalogs_root).resolve(),
        )


class TemplatesConfig(BaseModel):
    """Template discovery and block delimiters."""

    extension: str = Field(
        default=".blade.php",
        description="File extension identifying template files",
        min_length=2,
    )
    open_tag: str = Field(
        default="@TransSFC",
        description="Directive opening a translation block, followed by ('<lang>')",
        min_length=1,
    )
    close_tag: str = Field(
        default="@endTransSFC",
        description="Directive closing a translation block",
        min_length=1,
    )

    @field_validator("extension")
    @classmethod
    def validate_extension(cls, v: str) -> str:
        """Ensure the extension starts with a dot."""
        return v if v.startswith(".") else f".{v}"


class CatalogsConfig(BaseModel):
    """Catalog file layout and formatting."""

    filename: str = Field(
        default="app.php",
        description="Catalog file name inside each language directory",
        pattern=r"^[^/\\]+$",
    )
    header: str = Field(
        default="<?php",
        description="First line of every catalog file",
    )
    key_prefix: str = Field(
        default="sfc",
        description="Prefix of every key managed by TransSFC",
        pattern=r"^\w+$",
    )
    indent_width: Annotated[int, Field(ge=1, le=8)] = Field(
        default=4,
        description="Spaces per indentation level in catalog files",
    )

    @field_validator("header")
    @classmethod
    def validate_header(cls, v: str) -> str:
        """Ensure catalogs written under this header can be read back."""
        from ..sync.codec import parse, render_catalog

        try:
            _ = parse(render_catalog({}, v))
        except ParseError as e:
            raise ValueError(f"Catalogs written with header {v!r} cannot be read back: {e}") from e
        return v

    @property
    def indent(self) -> str:
        """One level of indentation."""
        return " " * self.indent_width


class WatcherConfig(BaseModel):
    """Watching and scheduling behaviour."""

    enabled: bool = Field(
        default=True,
        description="Keep watching for changes after the initial scan",
    )
    debounce_ms: Annotated[int, Field(ge=0, le=60000)] = Field(
        default=300,
        description="Quiet period after the last event before a file is processed",
    )
    max_concurrency: Annotated[int, Field(ge=1, le=64)] = Field(
        default=2,
        description="Maximum number of files processed at the same time",
    )
    prune_orphans: bool = Field(
        default=False,
        description="Remove prefixed keys of templates that no longer exist after the initial scan",
    )

    @property
    def debounce_seconds(self) -> float:
        """Debounce window in seconds."""
        return self.debounce_ms / 1000


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Minimum level shown on the console",
    )

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: object) -> object:
        """Accept lowercase level names."""
        return v.upper() if isinstance(v, str) else v


class TransSFCConfig(BaseModel):
    """
    Configuration model for TransSFC with nested structure.

    Every section is optional; an empty file yields the defaults.
    """

    paths: PathsConfig = Field(default_factory=PathsConfig)
    templates: TemplatesConfig = Field(default_factory=TemplatesConfig)
    catalogs: CatalogsConfig = Field(default_factory=CatalogsConfig)
    watcher: WatcherConfig = Field(default_factory=WatcherConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config: ClassVar[ConfigDict] = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
        extra="forbid",
        frozen=False,
    )
