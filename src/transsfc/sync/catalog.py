"""
Per-language catalog storage and merging.

Each language has one catalog file, ``<catalogs_root>/<language>/<filename>``.
A template owns every key starting with ``<prefix>.<namespace>.``; applying
its entries replaces exactly those keys and leaves the rest of the catalog
alone. Merges for the same catalog file are serialized with a per-file lock
and written atomically, so concurrent templates never lose each other's
updates and readers never see a half-written file.
"""

import asyncio
import logging
import os
import stat
import tempfile
from collections.abc import Iterable, Mapping
from functools import lru_cache
from pathlib import Path

from . import codec
from .codec import Catalog
from .types import CatalogUpdate
from ..utils.core.exceptions import CatalogIOError, ParseError

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def default_file_mode() -> int:
    """Permissions a plain ``open()`` gives a new file under the process umask."""
    umask = os.umask(0)
    _ = os.umask(umask)
    return 0o666 & ~umask


def merge_entries(
    existing: Mapping[str, codec.CatalogValue],
    owned_prefix: str,
    entries: Mapping[str, str],
    shielded_prefixes: Iterable[str] = (),
) -> Catalog:
    """
    Replace the keys owned by one template with its new entries.

    Args:
        existing: Catalog as loaded from disk
        owned_prefix: Prefix of keys owned by the template (with trailing dot)
        entries: The template's new flattened entries
        shielded_prefixes: Prefixes of longer namespaces nested under the owned
            prefix; their keys belong to other templates and are kept

    Returns:
        New mapping; ``existing`` is not modified
    """
    shields = tuple(
        prefix
        for prefix in shielded_prefixes
        if prefix != owned_prefix and prefix.startswith(owned_prefix)
    )
    merged: Catalog = {
        key: value
        for key, value in existing.items()
        if not key.startswith(owned_prefix) or key.startswith(shields)
    }
    merged.update(entries)
    return merged


class CatalogStore:
    """Loads, merges and atomically rewrites language catalogs."""

    def __init__(
        self,
        catalogs_root: Path,
        filename: str = "app.php",
        header: str = codec.DEFAULT_HEADER,
        key_prefix: str = "sfc",
        indent: str = codec.DEFAULT_INDENT,
    ) -> None:
        self.catalogs_root: Path = catalogs_root
        self.filename: str = filename
        self.header: str = header
        self.key_prefix: str = key_prefix
        self.indent: str = indent
        self._locks: dict[Path, asyncio.Lock] = {}

    def catalog_path(self, language: str) -> Path:
        """Path of the catalog file for a language."""
        return self.catalogs_root / language / self.filename

    def owner_prefix(self, namespace: str) -> str:
        """Key prefix owned by a namespace, including the trailing dot."""
        return f"{self.key_prefix}.{namespace}."

    def languages(self) -> list[str]:
        """Language codes that have a catalog file under the catalogs root."""
        if not self.catalogs_root.is_dir():
            return []
        return sorted(
            entry.name
            for entry in self.catalogs_root.iterdir()
            if entry.is_dir() and (entry / self.filename).is_file()
        )

    def load(self, language: str) -> Catalog:
        """
        Load a language catalog from disk.

        Returns:
            The decoded catalog, or an empty mapping if the file does not exist

        Raises:
            ParseError: If the catalog file is malformed
            CatalogIOError: If the file exists but cannot be read
        """
        path = self.catalog_path(language)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise CatalogIOError(f"Failed to read catalog {path}: {e}", path) from e

        if not text.strip():
            return {}
        return codec.parse(text)

    async def apply(
        self,
        language: str,
        namespace: str,
        entries: Mapping[str, str],
        shielded: Iterable[str] = (),
    ) -> CatalogUpdate:
        """
        Replace a namespace's entries in one language catalog.

        The catalog is only rewritten when the merged result differs from what
        is on disk, so repeated calls with the same entries never touch the file.

        Args:
            language: Language code of the catalog
            namespace: Namespace of the template that owns the entries
            entries: Flattened ``{key: value}`` entries of the template
            shielded: Other known namespaces; keys of those nested under
                ``namespace`` are left alone

        Returns:
            CatalogUpdate describing what happened
        """
        path = self.catalog_path(language)
        owned_prefix = self.owner_prefix(namespace)
        shielded_prefixes = [self.owner_prefix(ns) for ns in shielded]

        async with self._lock_for(path):
            try:
                existing = await asyncio.to_thread(self.load, language)
                merged = merge_entries(existing, owned_prefix, entries, shielded_prefixes)
                if merged == existing:
                    logger.debug(f"No changes for {language} in {path}")
                    return CatalogUpdate.UNCHANGED
                await asyncio.to_thread(self._write_catalog, path, merged)
            except ParseError as e:
                logger.error(f"Error parsing {path}, leaving it untouched: {e}")
                return CatalogUpdate.FAILED
            except CatalogIOError as e:
                logger.error(str(e))
                return CatalogUpdate.FAILED

        if entries:
            logger.info(f"Updated translations for {language} in {path}")
        else:
            logger.info(f"Removed translations for prefix {owned_prefix[:-1]} in {path}")
        return CatalogUpdate.WRITTEN

    async def remove(
        self, namespace: str, shielded: Iterable[str] = ()
    ) -> dict[str, CatalogUpdate]:
        """
        Remove a namespace's entries from every language catalog on disk.

        Returns:
            Outcome per language code
        """
        shielded = list(shielded)
        return {
            language: await self.apply(language, namespace, {}, shielded)
            for language in self.languages()
        }

    async def prune(self, live_namespaces: Iterable[str]) -> dict[str, int]:
        """
        Drop prefixed keys that no live template namespace owns.

        Args:
            live_namespaces: Namespaces of every template currently on disk

        Returns:
            Number of removed keys per language whose catalog was rewritten
        """
        live_prefixes = tuple(self.owner_prefix(ns) for ns in live_namespaces)
        managed_prefix = f"{self.key_prefix}."
        removed: dict[str, int] = {}

        for language in self.languages():
            path = self.catalog_path(language)
            async with self._lock_for(path):
                try:
                    existing = await asyncio.to_thread(self.load, language)
                    kept: Catalog = {
                        key: value
                        for key, value in existing.items()
                        if not key.startswith(managed_prefix) or key.startswith(live_prefixes)
                    }
                    if len(kept) == len(existing):
                        continue
                    await asyncio.to_thread(self._write_catalog, path, kept)
                except ParseError as e:
                    logger.error(f"Error parsing {path}, skipping orphan pruning: {e}")
                    continue
                except CatalogIOError as e:
                    logger.error(str(e))
                    continue

                removed[language] = len(existing) - len(kept)
                logger.info(f"Pruned {removed[language]} orphaned translations in {path}")

        return removed

    def _lock_for(self, path: Path) -> asyncio.Lock:
        return self._locks.setdefault(path, asyncio.Lock())

    def _write_catalog(self, path: Path, catalog: Mapping[str, object]) -> None:
        """
        Write a catalog with an atomic replace.

        Raises:
            CatalogIOError: If the directory, temporary file or rename fails
        """
        content = codec.render_catalog(catalog, self.header, self.indent)

        temp_file = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            mode = (
                stat.S_IMODE(path.stat().st_mode) if path.exists() else default_file_mode()
            )
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=path.parent,
                prefix=f".{path.name}.",
                suffix=".tmp",
                delete=False,
            ) as temp_file:
                _ = temp_file.write(content)
                temp_file.flush()
                temp_path = Path(temp_file.name)

            # NamedTemporaryFile creates 0600 files; carry over the catalog mode
            os.chmod(temp_path, mode)
            _ = temp_path.replace(path)

        except OSError as e:
            if temp_file and Path(temp_file.name).exists():
                Path(temp_file.name).unlink(missing_ok=True)
            raise CatalogIOError(f"Failed to write catalog {path}: {e}", path) from e
