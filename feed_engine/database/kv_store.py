"""
Synchronous key/value stores backing persisted engine state
"""
import json
import logging
import os
import tempfile
import threading
from typing import Dict, Optional, Protocol

from feed_engine.database.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Single synchronous read/write surface for persisted text values"""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class InMemoryKeyValueStore:
    """Dict-backed store; nothing survives the process"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileKeyValueStore:
    """
    Keeps every key in one JSON object on disk.

    Writes go to a temporary file in the same directory which then replaces
    the original, so an interrupted write leaves the previous file intact.
    An unreadable or malformed file reads as empty.
    """

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()

    def _read_all(self) -> Dict[str, str]:
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning(f"Store file {self.path} is unreadable, treating as empty: {str(e)}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Store file {self.path} does not hold an object, treating as empty")
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, data: Dict[str, str]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".store-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, ensure_ascii=False)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read_all()
            data[key] = value
            self._write_all(data)

    def delete(self, key: str) -> None:
        with self._lock:
            data = self._read_all()
            if key in data:
                del data[key]
                self._write_all(data)


class SupabaseKeyValueStore:
    """Stores values as rows of the Supabase key/value table"""

    def __init__(self, client: SupabaseClient):
        self.client = client

    def get(self, key: str) -> Optional[str]:
        return self.client.get_value(key)

    def set(self, key: str, value: str) -> None:
        self.client.set_value(key, value)

    def delete(self, key: str) -> None:
        self.client.delete_value(key)
