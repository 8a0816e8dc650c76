"""
Durable key/value storage for metabox panels.
Per-post field values plus site-wide options (used for queued errors).
"""

import copy
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Union
import logging

logger = logging.getLogger(__name__)

# Marks an absent entry (stored values may be None)
_MISSING = object()


class KeyValueStore:
    """Interface of the durable store consumed by the metabox pipeline."""

    def get(self, post_id: Any, key: str, default: Any = None) -> Any:
        raise NotImplementedError

    def get_all(self, post_id: Any) -> Dict[str, Any]:
        raise NotImplementedError

    def set(self, post_id: Any, key: str, value: Any) -> bool:
        """
        Store a value for a post.

        Returns:
            True if the stored value changed, False if it was unchanged or the write failed
        """
        raise NotImplementedError

    def get_option(self, key: str, default: Any = None) -> Any:
        raise NotImplementedError

    def set_option(self, key: str, value: Any) -> bool:
        raise NotImplementedError

    def delete_option(self, key: str) -> bool:
        raise NotImplementedError


class InMemoryStore(KeyValueStore):
    """Dictionary-backed store."""

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        data = data or {}
        self._meta: Dict[str, Dict[str, Any]] = copy.deepcopy(data.get('meta', {}))
        self._options: Dict[str, Any] = copy.deepcopy(data.get('options', {}))

    def get(self, post_id: Any, key: str, default: Any = None) -> Any:
        post_meta = self._meta.get(str(post_id), {})
        if key not in post_meta:
            return default
        return copy.deepcopy(post_meta[key])

    def get_all(self, post_id: Any) -> Dict[str, Any]:
        return copy.deepcopy(self._meta.get(str(post_id), {}))

    def set(self, post_id: Any, key: str, value: Any) -> bool:
        post_meta = self._meta.setdefault(str(post_id), {})
        if key in post_meta and post_meta[key] == value:
            return False

        return self._apply(post_meta, key, copy.deepcopy(value))

    def get_option(self, key: str, default: Any = None) -> Any:
        if key not in self._options:
            return default
        return copy.deepcopy(self._options[key])

    def set_option(self, key: str, value: Any) -> bool:
        if key in self._options and self._options[key] == value:
            return False

        return self._apply(self._options, key, copy.deepcopy(value))

    def delete_option(self, key: str) -> bool:
        if key not in self._options:
            return False

        return self._apply(self._options, key, _MISSING)

    def _apply(self, table: Dict[str, Any], key: str, value: Any) -> bool:
        """Change one entry and commit it, restoring the entry if the commit fails."""
        previous = table.get(key, _MISSING)
        if value is _MISSING:
            del table[key]
        else:
            table[key] = value

        if self._commit():
            return True

        if previous is _MISSING:
            table.pop(key, None)
        else:
            table[key] = previous
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {'meta': copy.deepcopy(self._meta), 'options': copy.deepcopy(self._options)}

    def _commit(self) -> bool:
        return True


class JsonFileStore(InMemoryStore):
    """
    Store persisted to a single JSON file.

    Every write rewrites the file through a temporary file and an atomic
    replace; concurrent writers follow last-write-wins.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        super().__init__(self._load())

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            logger.info(f"Store file not found, starting empty: {self.path}")
            return {}

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load store file {self.path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.error(f"Store file is not a JSON object: {self.path}")
            return {}

        return data

    def reload(self) -> None:
        """Re-read the file, discarding in-memory state."""
        data = self._load()
        self._meta = data.get('meta', {})
        self._options = data.get('options', {})

    def _commit(self) -> bool:
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp")
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.path)
            tmp_name = None
            return True

        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to write store file {self.path}: {e}")
            return False

        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.remove(tmp_name)
