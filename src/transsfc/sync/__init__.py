"""
Synchronization package for TransSFC.

Extracts translation blocks from templates and keeps the per-language
catalog files in sync with them.
"""

from .cache import ChangeCache
from .catalog import CatalogStore, merge_entries
from .codec import decode, encode, parse, parse_with_duplicates, render_catalog
from .engine import SyncEngine
from .extractor import BlockExtractor, ExtractionResult, flatten, namespace_for
from .scheduler import DebouncedScheduler
from .types import CatalogUpdate, PathState, SchedulerMetrics
from .watcher import TemplateEventHandler, TemplateWatcher, iter_templates

__all__ = [
    # Types and enums
    "CatalogUpdate",
    "PathState",
    "SchedulerMetrics",
    "ExtractionResult",
    # Codec
    "decode",
    "encode",
    "parse",
    "parse_with_duplicates",
    "render_catalog",
    # Core components
    "BlockExtractor",
    "ChangeCache",
    "CatalogStore",
    "DebouncedScheduler",
    "TemplateEventHandler",
    "TemplateWatcher",
    "SyncEngine",
    # Helpers
    "flatten",
    "iter_templates",
    "merge_entries",
    "namespace_for",
]
