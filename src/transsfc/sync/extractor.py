"""
Translation block extraction for template files.

Templates embed per-language translations between an open tag carrying a
quoted language code and a matching close tag:

    @TransSFC('en')
    [
        'title' => 'Login',
        'form' => ['email' => 'Email address'],
    ]
    @endTransSFC

Every leaf value becomes a catalog entry keyed
``<prefix>.<namespace>.<local.key.path>``, where the namespace is the
template's path relative to the templates root with separators turned into
dots and the template extension stripped.
"""

import logging
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TypeAlias

from . import codec
from ..utils.core.exceptions import ParseError

logger = logging.getLogger(__name__)

Translations: TypeAlias = dict[str, dict[str, str]]


@dataclass
class ExtractionResult:
    """Outcome of scanning one template."""

    translations: Translations = field(default_factory=dict)
    failed_languages: set[str] = field(default_factory=set)
    block_count: int = 0


def flatten(mapping: Mapping[str, object], prefix: str) -> Iterator[tuple[str, str]]:
    """
    Yield dotted keys and string leaves of a nested mapping.

    Args:
        mapping: Decoded block literal
        prefix: Key prefix prepended to every path, without a trailing dot

    Yields:
        ``(prefix.k1.k2...kn, value)`` pairs in document order
    """
    for key, value in mapping.items():
        full_key = f"{prefix}.{key}"
        if isinstance(value, Mapping):
            yield from flatten(value, full_key)  # pyright: ignore[reportUnknownArgumentType]
        else:
            yield full_key, str(value)


def namespace_for(path: Path, templates_root: Path, extension: str) -> str:
    """
    Derive the dotted namespace that owns a template's translations.

    Args:
        path: Template path, absolute or relative to the working directory
        templates_root: Root directory of all templates
        extension: Template extension to strip (e.g. ``.blade.php``)

    Returns:
        Namespace such as ``auth.login`` for ``<root>/auth/login.blade.php``

    Raises:
        ValueError: If the path is not below the templates root
    """
    try:
        relative = Path(path).resolve().relative_to(templates_root.resolve())
    except ValueError as e:
        raise ValueError(f"{path} is not inside templates root {templates_root}") from e

    relative_str = relative.as_posix()
    if extension and relative_str.endswith(extension):
        relative_str = relative_str[: -len(extension)]
    return ".".join(part for part in relative_str.split("/") if part)


class BlockExtractor:
    """Scans template text for translation blocks and flattens them into catalog keys."""

    def __init__(
        self,
        templates_root: Path,
        extension: str = ".blade.php",
        open_tag: str = "@TransSFC",
        close_tag: str = "@endTransSFC",
        key_prefix: str = "sfc",
    ) -> None:
        self.templates_root: Path = templates_root
        self.extension: str = extension
        self.key_prefix: str = key_prefix
        # Blocks never nest, so the shortest match up to the close tag is the block.
        self._block_pattern: re.Pattern[str] = re.compile(
            re.escape(open_tag)
            + r"\(\s*['\"](\w+)['\"]\s*\)(.*?)"
            + re.escape(close_tag),
            re.DOTALL,
        )

    def namespace_for(self, path: Path) -> str:
        """Namespace of a template below this extractor's root."""
        return namespace_for(path, self.templates_root, self.extension)

    def owner_prefix(self, namespace: str) -> str:
        """Key prefix owned by a namespace, including the trailing dot."""
        return f"{self.key_prefix}.{namespace}."

    def extract(self, text: str, path: Path) -> Translations:
        """
        Extract translations grouped by language code.

        Args:
            text: Raw template content
            path: Template path, used for the namespace and diagnostics

        Returns:
            ``{language: {key: value}}`` for every language with a well-formed block
        """
        return self.scan(text, path).translations

    def scan(self, text: str, path: Path) -> ExtractionResult:
        """
        Extract translations and report languages whose blocks failed to parse.

        A malformed block is logged and skipped without affecting other blocks
        in the same file. Later blocks override earlier ones for the same key.
        """
        base = f"{self.key_prefix}.{self.namespace_for(path)}"
        result = ExtractionResult()

        for match in self._block_pattern.finditer(text):
            language = match.group(1)
            body = match.group(2).strip()
            result.block_count += 1

            if not (body.startswith("[") and body.endswith("]")):
                logger.error(
                    f"Error in {path}: Translation block for language '{language}' "
                    + "must be enclosed in square brackets []"
                )
                result.failed_languages.add(language)
                continue

            try:
                decoded, repeated = codec.parse_with_duplicates(body)
            except ParseError as e:
                logger.error(
                    f"Error in {path}: Could not parse translation block for language '{language}': {e}"
                )
                logger.error(f"Offending text:\n{body}")
                result.failed_languages.add(language)
                continue

            for local_key in repeated:
                self._warn_duplicate(f"{base}.{local_key}", language, path)

            bucket = result.translations.setdefault(language, {})
            for key, value in flatten(decoded, base):
                if key in bucket:
                    self._warn_duplicate(key, language, path)
                bucket[key] = value

        return result

    @staticmethod
    def _warn_duplicate(key: str, language: str, path: Path) -> None:
        logger.warning(
            f"Duplicate translation key '{key}' for language '{language}' in {path}; "
            + "the later definition wins"
        )
