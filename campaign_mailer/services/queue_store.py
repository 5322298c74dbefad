"""
Queue store service.

A minimal key/value contract over the blob store that holds queued emails:

  put(key, record)   write once; an existing key is never overwritten
  list_keys()        every key currently stored, in no guaranteed order
  get(key)           the record, or None when the key is absent
  delete(key)        idempotent; returns True only if this call removed it

Two implementations:
  SupabaseQueueStore  - one JSON object per record in a Supabase Storage bucket
  InMemoryQueueStore  - a dict, for tests and single-process development

delete() doubles as the claim step of a drain: a record is only handed to a
consumer when the delete that follows the read actually removed the object,
so two concurrent drains can never both return the same key.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import Optional

from fastapi.concurrency import run_in_threadpool

logger = logging.getLogger(__name__)

_OBJECT_SUFFIX = ".json"
_LIST_PAGE_SIZE = 1000


class QueueStoreError(Exception):
    """An I/O failure talking to the underlying store."""


class QueueKeyExistsError(QueueStoreError):
    """put() was called with a key that is already stored."""


class QueueStore(ABC):
    """Async key/value contract used by the queue backend and the drain endpoint."""

    @abstractmethod
    async def put(self, key: str, record: dict) -> None:
        ...

    @abstractmethod
    async def list_keys(self) -> list[str]:
        ...

    @abstractmethod
    async def get(self, key: str) -> Optional[dict]:
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        ...


# ---------------------------------------------------------------------------
# Supabase Storage
# ---------------------------------------------------------------------------

class SupabaseQueueStore(QueueStore):
    """
    Queue store backed by a Supabase Storage bucket.

    Each record is stored as ``<key>.json`` at the bucket root. Uploads use
    ``upsert: "false"`` so the storage server itself refuses to overwrite an
    existing object. ``remove()`` returns the objects it actually deleted,
    which gives a per-key conditional delete.

    The supabase-py client is synchronous, so every call runs in the
    threadpool to keep the event loop free.
    """

    def __init__(self, client, bucket: str):
        self.client = client
        self.bucket = bucket

    def _bucket(self):
        return self.client.storage.from_(self.bucket)

    @staticmethod
    def _path(key: str) -> str:
        return f"{key}{_OBJECT_SUFFIX}"

    async def put(self, key: str, record: dict) -> None:
        body = json.dumps(record).encode("utf-8")
        try:
            await run_in_threadpool(
                self._bucket().upload,
                self._path(key),
                body,
                {"content-type": "application/json", "upsert": "false"},
            )
        except Exception as e:
            error_msg = str(e).lower()
            if "already exists" in error_msg or "duplicate" in error_msg:
                raise QueueKeyExistsError(f"Queue key already exists: {key}")
            raise QueueStoreError(f"Failed to write {key} to queue bucket '{self.bucket}': {str(e)}")

    def _list_all(self) -> list[str]:
        keys: list[str] = []
        offset = 0
        while True:
            page = self._bucket().list(
                None,
                {
                    "limit": _LIST_PAGE_SIZE,
                    "offset": offset,
                    "sortBy": {"column": "created_at", "order": "asc"},
                },
            )
            page = page or []
            for obj in page:
                name = obj.get("name", "")
                # Folders come back with id None; queued records are flat .json objects
                if obj.get("id") is None or not name.endswith(_OBJECT_SUFFIX):
                    continue
                keys.append(name[: -len(_OBJECT_SUFFIX)])
            if len(page) < _LIST_PAGE_SIZE:
                return keys
            offset += _LIST_PAGE_SIZE

    async def list_keys(self) -> list[str]:
        try:
            return await run_in_threadpool(self._list_all)
        except Exception as e:
            raise QueueStoreError(f"Failed to list queue bucket '{self.bucket}': {str(e)}")

    async def get(self, key: str) -> Optional[dict]:
        try:
            raw = await run_in_threadpool(self._bucket().download, self._path(key))
        except Exception as e:
            if "not found" in str(e).lower():
                return None
            raise QueueStoreError(f"Failed to read {key} from queue bucket '{self.bucket}': {str(e)}")

        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError as e:
            raise QueueStoreError(f"Queue object {key} is not valid JSON: {str(e)}")

    async def delete(self, key: str) -> bool:
        try:
            removed = await run_in_threadpool(self._bucket().remove, [self._path(key)])
        except Exception as e:
            raise QueueStoreError(f"Failed to delete {key} from queue bucket '{self.bucket}': {str(e)}")

        # Supabase returns the list of deleted objects; empty means it was already gone
        return bool(removed)


# ---------------------------------------------------------------------------
# In-memory
# ---------------------------------------------------------------------------

class InMemoryQueueStore(QueueStore):
    """
    Dict-backed queue store.

    Only suitable for tests and local development: records live in this
    process and are lost on restart. Records are copied through JSON on the
    way in and out so callers can never mutate what is stored.
    """

    def __init__(self) -> None:
        self._records: dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def put(self, key: str, record: dict) -> None:
        async with self._lock:
            if key in self._records:
                raise QueueKeyExistsError(f"Queue key already exists: {key}")
            self._records[key] = json.dumps(record)

    async def list_keys(self) -> list[str]:
        return list(self._records)

    async def get(self, key: str) -> Optional[dict]:
        raw = self._records.get(key)
        return json.loads(raw) if raw is not None else None

    async def delete(self, key: str) -> bool:
        async with self._lock:
            return self._records.pop(key, None) is not None

    def __len__(self) -> int:
        return len(self._records)
