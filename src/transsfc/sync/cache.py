"""
Per-template change cache.

Remembers, for every template path, the fingerprint of the content last
processed and the translations last extracted from it. Editors that re-save
unchanged bytes and duplicate file-system events become cheap no-ops, and
only the languages whose entries actually changed are written back.
"""

import hashlib
from collections.abc import Iterable
from pathlib import Path

from .extractor import Translations


class ChangeCache:
    """Content fingerprints and last extractions keyed by template path."""

    def __init__(self) -> None:
        self._fingerprints: dict[Path, str] = {}
        self._extractions: dict[Path, Translations] = {}

    @staticmethod
    def fingerprint(content: str | bytes) -> str:
        """SHA-256 hex digest of template content."""
        if isinstance(content, str):
            content = content.encode("utf-8")
        return hashlib.sha256(content).hexdigest()

    def should_process(self, path: Path, content: str | bytes) -> bool:
        """
        Check whether a template's content changed since it was last seen.

        Records the new fingerprint when it differs.

        Returns:
            False only if the content is byte-identical to the last call for this path
        """
        digest = self.fingerprint(content)
        if self._fingerprints.get(path) == digest:
            return False
        self._fingerprints[path] = digest
        return True

    def diff(
        self,
        path: Path,
        extraction: Translations,
        frozen_languages: Iterable[str] = (),
    ) -> Translations:
        """
        Compute the languages whose entries changed and remember the new extraction.

        A language present before but missing now is reported with an empty
        mapping so its entries get removed. Languages listed in
        ``frozen_languages`` (blocks that failed to parse) keep their previous
        entries and are never reported.

        Args:
            path: Template path
            extraction: Freshly extracted ``{language: {key: value}}``
            frozen_languages: Languages to leave untouched this round

        Returns:
            ``{language: new_entries}`` restricted to changed languages
        """
        frozen = set(frozen_languages)
        previous = self._extractions.get(path, {})

        current: Translations = {
            language: entries
            for language, entries in previous.items()
            if language in frozen
        }
        for language, entries in extraction.items():
            if language not in frozen:
                current[language] = entries

        changed: Translations = {}
        for language in sorted(set(previous) | set(current)):
            if previous.get(language, {}) != current.get(language, {}):
                changed[language] = current.get(language, {})

        self._extractions[path] = current
        return changed

    def has_extraction(self, path: Path) -> bool:
        """Whether an extraction has been recorded for this path."""
        return path in self._extractions

    def invalidate(self, path: Path) -> None:
        """Forget everything about a path so it is processed from scratch next time."""
        _ = self._fingerprints.pop(path, None)
        _ = self._extractions.pop(path, None)

    def known_paths(self) -> list[Path]:
        """Paths with a recorded fingerprint or extraction."""
        return sorted(set(self._fingerprints) | set(self._extractions))

    def __contains__(self, path: object) -> bool:
        return path in self._fingerprints

    def __len__(self) -> int:
        return len(self._fingerprints)
