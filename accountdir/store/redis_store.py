"""
Record store backed by Redis.

Listing uses ``SCAN``; the cursor is the continuation token. ``SCAN`` may
return a key more than once over a full iteration, so listings from this
backend are complete but not necessarily unique.
"""

import logging
import re
from typing import Iterable, List, Optional

import redis

from . import NotFound, Page, RecordStore, StorageError

logger = logging.getLogger(__name__)

_GLOB_SPECIAL = re.compile(r'([*?\[\]\\])')


def _escape(prefix: str) -> str:
    return _GLOB_SPECIAL.sub(r'\\\1', prefix)


class RedisRecordStore(RecordStore):
    """
    Manages a connection to Redis.

    The StrictRedis instance is thread safe and connections are attached at
    the time a command is executed.
    """

    def __init__(self, host: str, port: int, db: int = 0,
                 page_size: int = 1000) -> None:
        """Open the connection to Redis."""
        logger.debug('New Redis connection at %s, port %s', host, port)
        self.r = redis.StrictRedis(host=host, port=port, db=db)
        self.page_size = page_size

    def get(self, key: str) -> bytes:
        try:
            data: Optional[bytes] = self.r.get(key)
        except redis.exceptions.RedisError as e:
            raise StorageError(f'Failed to get {key}: {e}') from e
        if data is None:
            raise NotFound(key)
        return data

    def put(self, key: str, data: bytes) -> None:
        try:
            self.r.set(key, data)
        except redis.exceptions.RedisError as e:
            raise StorageError(f'Failed to put {key}: {e}') from e

    def list_keys(self, prefix: str, token: Optional[str] = None) -> Page:
        cursor = int(token) if token is not None else 0
        try:
            cursor, raw = self.r.scan(cursor=cursor,
                                      match=f'{_escape(prefix)}*',
                                      count=self.page_size)
        except redis.exceptions.RedisError as e:
            raise StorageError(f'Failed to list {prefix}: {e}') from e
        keys = [k.decode('utf-8') if isinstance(k, bytes) else k
                for k in raw]
        return Page(keys, str(cursor) if int(cursor) != 0 else None)

    def delete_batch(self, keys: Iterable[str]) -> None:
        batch: List[str] = list(keys)
        if not batch:
            return
        try:
            self.r.delete(*batch)
        except redis.exceptions.RedisError as e:
            raise StorageError(f'Failed to delete {len(batch)} keys: {e}') \
                from e
