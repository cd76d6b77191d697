"""
Translation synchronization engine.

Wires the walker, watcher, scheduler, extractor, change cache and catalog
store together: every add, change or remove event for a template is
debounced, bounded by the scheduler, and finally turned into the minimal set
of catalog rewrites.
"""

import asyncio
import logging
import os
from pathlib import Path

from .cache import ChangeCache
from .catalog import CatalogStore
from .extractor import BlockExtractor, Translations
from .scheduler import DebouncedScheduler
from .types import CatalogUpdate
from .watcher import TemplateWatcher, iter_templates
from ..config.schema import TransSFCConfig
from ..utils.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class SyncEngine:
    """
    Keeps language catalogs synchronized with template translation blocks.

    All state (fingerprints, extractions, timers, known namespaces) is owned
    by the instance, so several engines can watch different roots side by side.
    """

    def __init__(self, config: TransSFCConfig, project_root: Path | None = None) -> None:
        """
        Initialize the engine.

        Args:
            config: Validated configuration
            project_root: Base directory for relative paths (defaults to the
                current working directory)
        """
        self.config: TransSFCConfig = config
        self.templates_root, self.catalogs_root = config.paths.resolve(
            project_root or Path.cwd()
        )

        self.extractor: BlockExtractor = BlockExtractor(
            self.templates_root,
            extension=config.templates.extension,
            open_tag=config.templates.open_tag,
            close_tag=config.templates.close_tag,
            key_prefix=config.catalogs.key_prefix,
        )
        self.cache: ChangeCache = ChangeCache()
        self.catalogs: CatalogStore = CatalogStore(
            self.catalogs_root,
            filename=config.catalogs.filename,
            header=config.catalogs.header,
            key_prefix=config.catalogs.key_prefix,
            indent=config.catalogs.indent,
        )
        self.scheduler: DebouncedScheduler = DebouncedScheduler(
            self.sync_path,
            debounce=config.watcher.debounce_seconds,
            max_concurrency=config.watcher.max_concurrency,
        )
        self._watcher: TemplateWatcher | None = None
        # Namespaces of live templates, used to shield nested namespaces
        self._namespaces: dict[Path, str] = {}

    @staticmethod
    def normalize(path: Path | str) -> Path:
        """Absolute, symlink-preserving form used as the key for a template path."""
        return Path(os.path.abspath(path))

    def notify(self, path: Path | str) -> None:
        """Schedule a template path after an add, change or remove event."""
        self.scheduler.submit(self.normalize(path))

    def notify_directory_removed(self, directory: Path | str) -> None:
        """Schedule every known template below a directory that disappeared."""
        root = self.normalize(directory)
        known = set(self._namespaces) | set(self.cache.known_paths())
        for path in sorted(known):
            if path.is_relative_to(root):
                self.scheduler.submit(path)

    async def start(self, watch: bool = True) -> int:
        """
        Start watching (optionally) and run the initial scan.

        The watcher starts before the scan so no edit made during the scan is
        missed; duplicate events are harmless.

        Returns:
            Number of templates found by the initial scan

        Raises:
            ConfigurationError: If the templates root does not exist
        """
        if not self.templates_root.is_dir():
            raise ConfigurationError(
                f"Templates root does not exist or is not a directory: {self.templates_root}",
                context=self.templates_root,
            )

        if watch:
            self._watcher = TemplateWatcher(
                self.templates_root,
                self.config.templates.extension,
                on_path=self.notify,
                on_directory_removed=self.notify_directory_removed,
            )
            self._watcher.start(asyncio.get_running_loop())

        return await self.initial_scan()

    async def stop(self) -> None:
        """Stop the watcher and let in-flight processing finish."""
        if self._watcher is not None:
            await asyncio.to_thread(self._watcher.stop)
            self._watcher = None
        await self.scheduler.stop()
        logger.debug(f"Scheduler metrics: {self.scheduler.metrics.to_dict()}")

    async def run(self, shutdown_event: asyncio.Event, watch: bool = True) -> None:
        """
        Scan, then keep watching until the shutdown event is set.

        Args:
            shutdown_event: Event signalling graceful shutdown
            watch: If False, return right after the initial scan
        """
        try:
            _ = await self.start(watch=watch)
            if watch:
                logger.info("Lang watcher is running...")
                _ = await shutdown_event.wait()
        finally:
            await self.stop()

    async def initial_scan(self) -> int:
        """
        Process every template under the templates root.

        Paths go through the scheduler without a debounce delay, so the
        concurrency bound still applies. Optionally prunes orphaned keys
        afterwards.

        Returns:
            Number of templates found
        """
        templates = await asyncio.to_thread(
            lambda: [
                self.normalize(p)
                for p in iter_templates(self.templates_root, self.config.templates.extension)
            ]
        )

        # Register every namespace first so nested namespaces are shielded from the start
        for path in templates:
            self._namespaces[path] = self.extractor.namespace_for(path)

        for path in templates:
            self.scheduler.submit(path, delay=0)
        await self.scheduler.drain()

        if self.config.watcher.prune_orphans:
            _ = await self.catalogs.prune(set(self._namespaces.values()))

        logger.info(
            f"Initial scan complete: {len(templates)} templates in {self.templates_root}"
        )
        return len(templates)

    async def sync_path(self, path: Path) -> None:
        """
        Bring the catalogs in line with the current state of one template.

        Decides at run time whether the template still exists, which makes
        duplicate and out-of-order events harmless.
        """
        if await asyncio.to_thread(path.is_file):
            await self._update(path)
        else:
            await self._remove(path)

    async def _update(self, path: Path) -> None:
        try:
            content = await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError:
            await self._remove(path)
            return

        if not self.cache.should_process(path, content):
            logger.debug(f"Content unchanged, skipping {path}")
            return

        namespace = self.extractor.namespace_for(path)
        self._namespaces[path] = namespace
        first_seen = not self.cache.has_extraction(path)

        result = self.extractor.scan(content.decode("utf-8", errors="replace"), path)
        changed = self.cache.diff(path, result.translations, result.failed_languages)

        if first_seen:
            # Clean up entries left behind by edits made while nobody was watching
            for language in self.catalogs.languages():
                if language not in result.failed_languages:
                    _ = changed.setdefault(language, result.translations.get(language, {}))

        if not changed:
            logger.debug(f"No translation changes in {path}")
            return

        if not await self._apply(namespace, changed):
            self.cache.invalidate(path)
            logger.warning(
                f"Some catalogs were not updated for {path}; it will be retried on its next change"
            )

    async def _remove(self, path: Path) -> None:
        namespace = self._namespaces.pop(path, None) or self.extractor.namespace_for(path)
        self.cache.invalidate(path)

        outcomes = await self.catalogs.remove(
            namespace, shielded=set(self._namespaces.values())
        )
        if CatalogUpdate.FAILED in outcomes.values():
            logger.warning(f"Some catalogs still contain translations of removed {path}")

    async def _apply(self, namespace: str, changed: Translations) -> bool:
        shielded = set(self._namespaces.values())
        succeeded = True
        for language, entries in changed.items():
            outcome = await self.catalogs.apply(language, namespace, entries, shielded)
            if outcome is CatalogUpdate.FAILED:
                succeeded = False
        return succeeded
