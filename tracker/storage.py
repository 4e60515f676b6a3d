"""Async key-value stores holding whole JSON documents.

A store maps a string key to a text value. ``get`` returns ``None`` for an
absent key; ``set`` and ``remove`` raise :class:`StorageError` on failure.
"""
import asyncio
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from tracker.errors import StorageError

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    async def remove(self, key: str) -> None:
        pass


class MemoryStore(KeyValueStore):

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        await asyncio.sleep(0)
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.sleep(0)
        self._data[key] = value

    async def remove(self, key: str) -> None:
        await asyncio.sleep(0)
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class JsonFileStore(KeyValueStore):
    """Keeps each key in ``<directory>/<key>.json``.

    Writes land in a temporary file first and are moved into place with
    ``os.replace``, so readers see either the old or the new document.
    """

    def __init__(self, directory: Path | str):
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def _read(self, key: str) -> Optional[str]:
        target = self.path_for(key)
        if not target.exists():
            return None
        with target.open("r", encoding="utf-8") as handle:
            return handle.read()

    def _write(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(tmp, self.path_for(key))
        except OSError:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def _remove(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)

    async def get(self, key: str) -> Optional[str]:
        try:
            return await asyncio.to_thread(self._read, key)
        except OSError as e:
            logger.error("Could not read %s: %s", self.path_for(key), e)
            raise StorageError(f"Could not read {key}", key=key) from e

    async def set(self, key: str, value: str) -> None:
        try:
            await asyncio.to_thread(self._write, key, value)
        except OSError as e:
            logger.error("Could not write %s: %s", self.path_for(key), e)
            raise StorageError(f"Could not save {key}", key=key) from e

    async def remove(self, key: str) -> None:
        try:
            await asyncio.to_thread(self._remove, key)
        except OSError as e:
            logger.error("Could not remove %s: %s", self.path_for(key), e)
            raise StorageError(f"Could not remove {key}", key=key) from e


async def read_document(
    store: KeyValueStore, key: str, default: Any = None, strict: bool = False
) -> Any:
    """Load and decode the JSON document under ``key``.

    An absent key yields ``default``. A document that is not valid JSON
    yields ``default`` too, unless ``strict`` is set, in which case it
    raises :class:`StorageError`.
    """
    text = await store.get(key)
    if text is None:
        return default
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        if strict:
            logger.error("Document %r is not valid JSON: %s", key, e)
            raise StorageError(f"Stored document {key!r} is unreadable", key=key) from e
        logger.warning("Document %r is not valid JSON (%s); using default", key, e)
        return default


async def write_document(store: KeyValueStore, key: str, value: Any) -> None:
    await store.set(key, json.dumps(value, ensure_ascii=False))
