"""
Global test configuration fixtures for TransSFC tests.

Provides a temporary project layout (templates root plus catalogs root),
a matching configuration and ready-made engine components.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from transsfc.config.schema import TransSFCConfig
from transsfc.sync.catalog import CatalogStore
from transsfc.sync.engine import SyncEngine
from transsfc.sync.extractor import BlockExtractor
from tests.utils.test_helpers import create_test_config


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """
    Create an empty project with ``views/`` and ``lang/`` directories.

    Returns:
        Path: The project root
    """
    (tmp_path / "views").mkdir()
    (tmp_path / "lang").mkdir()
    return tmp_path


@pytest.fixture
def templates_root(project_root: Path) -> Path:
    """Templates root of the temporary project."""
    return project_root / "views"


@pytest.fixture
def catalogs_root(project_root: Path) -> Path:
    """Catalogs root of the temporary project."""
    return project_root / "lang"


@pytest.fixture
def base_config() -> TransSFCConfig:
    """
    Configuration for the temporary project.

    Uses a 20 ms debounce window so tests stay fast.
    """
    return create_test_config()


@pytest.fixture
def extractor(templates_root: Path) -> BlockExtractor:
    """Block extractor rooted at the temporary templates root."""
    return BlockExtractor(templates_root)


@pytest.fixture
def catalog_store(catalogs_root: Path) -> CatalogStore:
    """Catalog store rooted at the temporary catalogs root."""
    return CatalogStore(catalogs_root)


@pytest.fixture
def engine(base_config: TransSFCConfig, project_root: Path) -> SyncEngine:
    """Synchronization engine for the temporary project (not started)."""
    return SyncEngine(base_config, project_root=project_root)
