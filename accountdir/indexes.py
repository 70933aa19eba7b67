"""Maintain the username and email secondary indexes."""

import logging

from . import domain, keys
from .exceptions import MalformedRecord, NotFound
from .store import RecordStore

logger = logging.getLogger(__name__)


class IndexManager(object):
    """
    Point lookups and repairs against the ``by-username`` and ``by-email``
    namespaces.

    Each index entry is a JSON object ``{"accountId": ...}`` stored at
    :func:`keys.index_key`. Entries are never rewritten to point at a
    different account, except by :meth:`write`.
    """

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def normalize(self, field: str, value: str) -> str:
        """Get the index key for ``value`` in the ``field`` namespace."""
        return keys.index_key(field, value)

    def lookup(self, field: str, value: str) -> str:
        """
        Get the ID of the account indexed under ``value``.

        Raises
        ------
        :class:`NotFound`
            If there is no index entry for ``value``.
        :class:`MalformedRecord`
            If the entry exists but cannot be decoded.
        :class:`StorageError`
            If the store fails.

        """
        key = self.normalize(field, value)
        data = domain.decode(key, self.store.get(key))
        account_id = data.get('accountId') if isinstance(data, dict) else None
        if not isinstance(account_id, str) or not account_id:
            raise MalformedRecord(key, 'missing accountId')
        return account_id

    def write(self, field: str, value: str, account_id: str) -> None:
        """Point the index entry for ``value`` at ``account_id``."""
        key = self.normalize(field, value)
        self.store.put(key, domain.encode({'accountId': account_id}))

    def ensure(self, field: str, value: str, account_id: str) -> bool:
        """
        Write the index entry for ``value`` if it is absent.

        An existing entry is left alone, even if it points at a different
        account.

        Returns
        -------
        bool
            ``True`` if an entry was written.

        """
        key = self.normalize(field, value)
        try:
            self.store.get(key)
        except NotFound:
            logger.info('Index entry %s is missing; writing it', key)
            self.write(field, value, account_id)
            return True
        return False

    def clear(self, field: str) -> int:
        """Delete every entry in the ``field`` namespace; return the count."""
        deleted = 0
        for page in self.store.pages(keys.index_prefix(field)):
            if not page:
                continue
            self.store.delete_batch(page)
            deleted += len(page)
        logger.info('Cleared %i %s index entries', deleted, field)
        return deleted
