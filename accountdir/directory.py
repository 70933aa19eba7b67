"""Provide the account directory operations consumed by the request layer."""

import logging
import uuid
from datetime import date
from functools import partial
from typing import Any, Dict, Optional, Tuple

from . import domain, fanout, keys, passwords
from .domain import Account, Policy, RebuildReport
from .duplicates import DuplicateChecker
from .exceptions import AuthenticationFailed, MalformedRecord, NotFound, \
    StorageError
from .indexes import IndexManager
from .reconcile import Reconciler
from .settings import Settings
from .store import RecordStore, get_store

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = 'Invalid username or password'


class AccountDirectory(object):
    """
    Composes the record store, indexes and reconciler.

    Parameters
    ----------
    store : :class:`.RecordStore`
    max_workers : int
        Upper bound on concurrent store calls within one operation.
    bcrypt_rounds : int
        Cost of the throwaway hash checked when a username is unknown, so
        that it takes as long to reject as a wrong password.

    """

    def __init__(self, store: RecordStore,
                 max_workers: int = fanout.DEFAULT_MAX_WORKERS,
                 bcrypt_rounds: int = passwords.DEFAULT_ROUNDS) -> None:
        self.store = store
        self.max_workers = max_workers
        self.bcrypt_rounds = bcrypt_rounds
        self.indexes = IndexManager(store)
        self.duplicates = DuplicateChecker(self.indexes, max_workers)
        self.reconciler = Reconciler(store, self.indexes, max_workers)

    @classmethod
    def from_settings(cls, settings: Settings,
                      store: Optional[RecordStore] = None) \
            -> 'AccountDirectory':
        """Build a directory, and its store unless one is given."""
        if store is None:
            store = get_store(settings)
        return cls(store, max_workers=settings.max_workers,
                   bcrypt_rounds=settings.bcrypt_rounds)

    def create_account(self, username: str, email: str, password_hash: str,
                       birthday: date) -> str:
        """
        Create a new account.

        The account record, its default config, and both index entries are
        written concurrently. If any of those writes fails, the others are
        not rolled back.

        Parameters
        ----------
        username : str
        email : str
        password_hash : str
            Output of :func:`.passwords.hash_password`.
        birthday : :class:`datetime.date`

        Returns
        -------
        str
            The ID of the new account.

        Raises
        ------
        :class:`.DuplicateConflict`
            If the username or email address is already indexed.
        :class:`.StorageError`
            If the duplicate check or any of the writes fails.

        """
        self.duplicates.check_available(username, email)

        account = Account(account_id=str(uuid.uuid4()), username=username,
                          email=email, password_hash=password_hash,
                          birthday=birthday)
        try:
            fanout.gather(
                partial(self.store.put, keys.account_key(account.account_id),
                        domain.encode(account.to_record())),
                partial(self.store.put, keys.config_key(account.account_id),
                        domain.encode(domain.DEFAULT_CONFIG)),
                partial(self.indexes.write, keys.USERNAME, username,
                        account.account_id),
                partial(self.indexes.write, keys.EMAIL, email,
                        account.account_id),
                max_workers=self.max_workers
            )
        except StorageError as e:
            logger.error('Account %s partially written: %s',
                         account.account_id, e)
            raise
        logger.info('Created account %s', account.account_id)
        return account.account_id

    def authenticate(self, username: str, password: str) \
            -> Tuple[str, Dict[str, Any]]:
        """
        Validate a username and password, and load the account's config.

        An unknown username and a wrong password fail in exactly the same
        way, and every rejection costs one bcrypt check. On success, any
        missing index entry for the account is rewritten. Login goes
        through the username index only, so an account whose username
        entry is missing cannot log in until a reconciliation pass
        restores it.

        Returns
        -------
        str
            Account ID.
        dict
            The account's config; empty if it is absent or unreadable.

        Raises
        ------
        :class:`.AuthenticationFailed`
            If the credentials are not valid.
        :class:`.StorageError`
            If the store fails.

        """
        try:
            account_id = self.indexes.lookup(keys.USERNAME, username)
            account = self.get_account(account_id)
        except NotFound as e:
            logger.debug('No account for username: %s', e)
            self._reject(password)
            raise AuthenticationFailed(INVALID_CREDENTIALS) from e
        except MalformedRecord as e:
            logger.warning('Cannot authenticate against bad record: %s', e)
            self._reject(password)
            raise AuthenticationFailed(INVALID_CREDENTIALS) from e

        if keys.normalize(account.username) != keys.normalize(username):
            logger.warning('Stale username index entry for account %s',
                           account_id)
            self._reject(password)
            raise AuthenticationFailed(INVALID_CREDENTIALS)
        if not passwords.check_password(password, account.password_hash):
            raise AuthenticationFailed(INVALID_CREDENTIALS)

        self._self_heal(account)
        return account_id, self._load_config(account_id)

    def _reject(self, password: str) -> None:
        """Spend the cost of a password check that cannot succeed."""
        passwords.check_password(password,
                                 passwords.dummy_hash(self.bcrypt_rounds))

    def _self_heal(self, account: Account) -> None:
        outcomes = fanout.join(
            partial(self.indexes.ensure, keys.USERNAME, account.username,
                    account.account_id),
            partial(self.indexes.ensure, keys.EMAIL, account.email,
                    account.account_id),
            max_workers=self.max_workers
        )
        for field, outcome in zip(keys.INDEXED_FIELDS, outcomes):
            if not outcome.ok:
                logger.warning('Could not repair %s index for %s: %s', field,
                               account.account_id, outcome.error)

    def _load_config(self, account_id: str) -> Dict[str, Any]:
        try:
            return self.get_config(account_id)
        except NotFound:
            logger.info('No config for account %s', account_id)
        except MalformedRecord as e:
            logger.warning('Ignoring malformed config: %s', e)
        return {}

    def rebuild_all(self, policy: Policy) -> RebuildReport:
        """Run a reconciliation pass with the given policy."""
        return self.reconciler.run(policy)

    def get_account(self, account_id: str) -> Account:
        """
        Load an account by ID.

        Raises
        ------
        :class:`.NotFound`
        :class:`.MalformedRecord`

        """
        key = keys.account_key(account_id)
        return Account.from_record(account_id, key,
                                   domain.decode(key, self.store.get(key)))

    def get_config(self, account_id: str) -> Dict[str, Any]:
        """Load the config of an account."""
        key = keys.config_key(account_id)
        config = domain.decode(key, self.store.get(key))
        if not isinstance(config, dict):
            raise MalformedRecord(key, 'not a JSON object')
        return config

    def save_config(self, account_id: str, config: Dict[str, Any]) -> None:
        """Replace the config of an account."""
        self.store.put(keys.config_key(account_id), domain.encode(config))

    def update_setting(self, account_id: str, key: str, value: Any) \
            -> Dict[str, Any]:
        """
        Set a single config value, and return the updated config.

        This is a read-modify-write without any locking; concurrent updates
        to the same account may be lost.
        """
        config = self.get_config(account_id)
        config[key] = value
        self.save_config(account_id, config)
        return config
