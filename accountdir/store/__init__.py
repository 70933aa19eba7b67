"""
Key-value record store backing the account directory.

A :class:`RecordStore` holds opaque byte blobs by key. Listing is paginated:
:meth:`RecordStore.list_keys` returns one page and an opaque continuation
token, which must be fed back to get the next page. Use
:meth:`RecordStore.iter_keys` or :meth:`RecordStore.pages` to walk an entire
prefix without holding more than one page in memory.
"""

import logging
from typing import Iterable, Iterator, List, NamedTuple, Optional

from ..exceptions import NotFound, StorageError

logger = logging.getLogger(__name__)


class Page(NamedTuple):
    """One page of a prefix listing."""

    keys: List[str]
    next_token: Optional[str] = None
    """Pass back to :meth:`RecordStore.list_keys`; ``None`` when done."""


class RecordStore(object):
    """Base class for record store backends."""

    def get(self, key: str) -> bytes:
        """
        Get the blob stored at ``key``.

        Raises
        ------
        :class:`NotFound`
            If there is nothing at ``key``.
        :class:`StorageError`
            If the backend fails.

        """
        raise NotImplementedError('Implemented by a backend')

    def put(self, key: str, data: bytes) -> None:
        """Store ``data`` at ``key``, replacing anything already there."""
        raise NotImplementedError('Implemented by a backend')

    def list_keys(self, prefix: str, token: Optional[str] = None) -> Page:
        """
        List one page of keys that start with ``prefix``.

        Pages may be any size, including empty pages that are not the last.
        """
        raise NotImplementedError('Implemented by a backend')

    def delete_batch(self, keys: Iterable[str]) -> None:
        """Delete ``keys``. Keys that are already absent are ignored."""
        raise NotImplementedError('Implemented by a backend')

    def pages(self, prefix: str) -> Iterator[List[str]]:
        """Generate successive pages of keys under ``prefix``."""
        token: Optional[str] = None
        while True:
            page = self.list_keys(prefix, token)
            yield page.keys
            if page.next_token is None:
                return
            token = page.next_token

    def iter_keys(self, prefix: str) -> Iterator[str]:
        """Generate every key under ``prefix``, one page at a time."""
        for keys in self.pages(prefix):
            yield from keys


def get_store(settings) -> RecordStore:
    """Get the record store backend selected by ``settings``."""
    if settings.store_backend == 's3':
        from .s3 import S3RecordStore
        return S3RecordStore(settings.s3_bucket, region=settings.s3_region,
                             endpoint_url=settings.s3_endpoint_url,
                             page_size=settings.list_page_size)
    if settings.store_backend == 'redis':
        from .redis_store import RedisRecordStore
        return RedisRecordStore(settings.redis_host, settings.redis_port,
                                settings.redis_database,
                                page_size=settings.list_page_size)
    if settings.store_backend == 'memory':
        from .memory import InMemoryRecordStore
        logger.warning('Using the in-memory record store; nothing persists')
        return InMemoryRecordStore(page_size=settings.list_page_size)
    raise ValueError(f'Unknown store backend: {settings.store_backend}')


__all__ = ('NotFound', 'Page', 'RecordStore', 'StorageError', 'get_store')
