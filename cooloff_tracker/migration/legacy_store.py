"""Flat key-value store used by the previous version of the tracker.

Every entry is a named string, kept together in one JSON object on disk.
The application list lived under a single key as a JSON-encoded array.
"""

import json
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..utils.config import config
from ..utils.logging import get_logger

logger = get_logger(__name__)


class LegacyStore:
    """Named string entries persisted as a single JSON file."""

    def __init__(self, path: Optional[Union[str, Path]] = None):
        """Initialize legacy store.

        Args:
            path: JSON file backing the store. Defaults to migration.legacy_store_path.
        """
        if path is None:
            path = config.get_legacy_store_path()
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}

        with open(self.path, 'r', encoding='utf-8') as f:
            content = f.read()

        if not content.strip():
            return {}

        data = json.loads(content)
        if not isinstance(data, dict):
            raise ValueError(f"Legacy store {self.path} is not a JSON object")
        return data

    def _write(self, data: Dict[str, str]):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)

    def get_item(self, name: str) -> Optional[str]:
        """Get the string stored under `name`, or None."""
        return self._read().get(name)

    def set_item(self, name: str, value: str):
        """Store `value` under `name`. Only strings are stored, as in the browser store."""
        if not isinstance(value, str):
            raise TypeError(f"Legacy store values must be str, got {type(value).__name__}")

        data = self._read()
        data[name] = value
        self._write(data)
        logger.debug(f"Stored legacy entry '{name}' ({len(data[name])} chars)")

    def remove_item(self, name: str):
        data = self._read()
        if data.pop(name, None) is not None:
            self._write(data)
            logger.info(f"Removed legacy entry '{name}'")

    def keys(self) -> List[str]:
        return list(self._read())
