"""In-process record store, for development and testing."""

import threading
from bisect import bisect_left, bisect_right, insort
from typing import Dict, Iterable, List, Optional

from . import NotFound, Page, RecordStore


class InMemoryRecordStore(RecordStore):
    """
    Keeps records in a dict, with keys also held in sorted order.

    The continuation token is the last key of the previous page, so listing
    tolerates keys being deleted or added between pages.
    """

    def __init__(self, page_size: int = 1000) -> None:
        if page_size < 1:
            raise ValueError('page_size must be positive')
        self.page_size = page_size
        self._data: Dict[str, bytes] = {}
        self._keys: List[str] = []
        self._lock = threading.Lock()

    def get(self, key: str) -> bytes:
        with self._lock:
            try:
                return self._data[key]
            except KeyError:
                raise NotFound(key)

    def put(self, key: str, data: bytes) -> None:
        with self._lock:
            if key not in self._data:
                insort(self._keys, key)
            self._data[key] = bytes(data)

    def list_keys(self, prefix: str, token: Optional[str] = None) -> Page:
        with self._lock:
            if token is None:
                start = bisect_left(self._keys, prefix)
            else:
                start = bisect_right(self._keys, token)
            keys: List[str] = []
            for key in self._keys[start:]:
                if not key.startswith(prefix):
                    break
                keys.append(key)
                if len(keys) == self.page_size:
                    break
            more = start + len(keys) < len(self._keys) \
                and self._keys[start + len(keys)].startswith(prefix)
        return Page(keys, keys[-1] if more and keys else None)

    def delete_batch(self, keys: Iterable[str]) -> None:
        with self._lock:
            for key in keys:
                if self._data.pop(key, None) is not None:
                    self._keys.remove(key)

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)
