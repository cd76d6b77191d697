"""
Test utilities package for TransSFC tests.

## Available Modules

### test_helpers.py
Core test utilities for configuration and file management:
- `create_temp_config_file()`: Context manager for temporary YAML config files
- `create_test_config()`: Config pointing at a temporary project
- `translation_block()`: Render a translation block for a template
- `write_template()`: Write a template below the templates root
- `write_catalog()` / `read_catalog()`: Catalog files on disk

### async_helpers.py
Async testing utilities:
- `wait_for_condition()`: Wait for conditions to become true with timeout
- `ConcurrencyProbe`: Records start/end timestamps of instrumented coroutines
"""

from .async_helpers import ConcurrencyProbe, wait_for_condition
from .test_helpers import (
    create_temp_config_file,
    create_test_config,
    read_catalog,
    translation_block,
    write_catalog,
    write_template,
)

__all__ = [
    "ConcurrencyProbe",
    "create_temp_config_file",
    "create_test_config",
    "read_catalog",
    "translation_block",
    "wait_for_condition",
    "write_catalog",
    "write_template",
]
