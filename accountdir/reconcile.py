"""
Bring the secondary indexes into agreement with the account records.

Two policies are available (see :class:`.domain.Policy`):

``additive``
    Walks every account and writes any index entry that is absent. Never
    deletes, never overwrites, so it is safe to run alongside live traffic,
    but it cannot correct an entry that points at the wrong account.

``destructive``
    Deletes every index entry, then writes both entries for every account.
    Afterwards each account has exactly one entry per namespace and no entry
    points at a missing account. While it runs, lookups for accounts not yet
    rewritten fail, so it should not run while logins are expected.

Both passes read the account listing lazily, one page at a time. An account
record that cannot be decoded or read is logged and skipped. A
:class:`.StorageError` while listing, deleting or writing aborts the pass.
"""

import logging
from functools import partial
from typing import Dict, Iterator

from . import domain, fanout, keys
from .domain import Account, Policy, RebuildReport
from .exceptions import MalformedRecord, NotFound, StorageError
from .indexes import IndexManager
from .store import RecordStore

logger = logging.getLogger(__name__)


class Reconciler(object):
    """Runs reconciliation passes over the whole account key space."""

    def __init__(self, store: RecordStore, indexes: IndexManager,
                 max_workers: int = fanout.DEFAULT_MAX_WORKERS) -> None:
        self.store = store
        self.indexes = indexes
        self.max_workers = max_workers

    def run(self, policy: Policy) -> RebuildReport:
        """
        Run a single reconciliation pass.

        Parameters
        ----------
        policy : :class:`.Policy`

        Returns
        -------
        :class:`.RebuildReport`

        Raises
        ------
        :class:`.StorageError`
            If the store fails to list, write or delete.

        """
        logger.info('Starting %s index rebuild', policy.value)
        if policy is Policy.ADDITIVE:
            report = self._additive()
        elif policy is Policy.DESTRUCTIVE:
            report = self._destructive()
        else:
            raise ValueError(f'Unknown policy: {policy}')
        logger.info('Finished %s index rebuild', policy.value,
                    extra={'report': report.to_dict()})
        return report

    def _additive(self) -> RebuildReport:
        counts = _counter()
        for account in self._accounts(counts):
            wrote = fanout.gather(
                partial(self.indexes.ensure, keys.USERNAME,
                        account.username, account.account_id),
                partial(self.indexes.ensure, keys.EMAIL,
                        account.email, account.account_id),
                max_workers=self.max_workers
            )
            if any(wrote):
                counts['rebuilt'] += 1
            else:
                counts['skipped'] += 1
        return RebuildReport(Policy.ADDITIVE, **counts)

    def _destructive(self) -> RebuildReport:
        counts = _counter()
        counts['cleared'] = sum(self.indexes.clear(field)
                                for field in keys.INDEXED_FIELDS)
        for account in self._accounts(counts):
            fanout.gather(
                partial(self.indexes.write, keys.USERNAME,
                        account.username, account.account_id),
                partial(self.indexes.write, keys.EMAIL,
                        account.email, account.account_id),
                max_workers=self.max_workers
            )
            counts['rebuilt'] += 1
        return RebuildReport(Policy.DESTRUCTIVE, **counts)

    def _accounts(self, counts: Dict[str, int]) -> Iterator[Account]:
        """Generate every decodable account, updating ``counts`` on the way."""
        for key in self.store.iter_keys(keys.USERS_PREFIX):
            account_id = keys.parse_account_key(key)
            if account_id is None:
                continue
            counts['visited'] += 1
            try:
                account = self._load(account_id, key)
            except NotFound:
                logger.warning('Account %s disappeared during rebuild', key)
                counts['missing'] += 1
                continue
            except MalformedRecord as e:
                logger.warning('Skipping malformed account: %s', e)
                counts['malformed'] += 1
                continue
            except StorageError as e:
                logger.warning('Could not read account %s: %s', key, e)
                counts['failed'] += 1
                continue
            yield account

    def _load(self, account_id: str, key: str) -> Account:
        return Account.from_record(account_id, key,
                                   domain.decode(key, self.store.get(key)))


def _counter() -> Dict[str, int]:
    return {'visited': 0, 'rebuilt': 0, 'skipped': 0, 'malformed': 0,
            'missing': 0, 'cleared': 0, 'failed': 0}
