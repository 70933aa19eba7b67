"""Reject account creation for usernames or email addresses already taken."""

import logging
from functools import partial

from . import fanout, keys
from .exceptions import DuplicateConflict, MalformedRecord, NotFound, \
    StorageError
from .indexes import IndexManager

logger = logging.getLogger(__name__)


class DuplicateChecker(object):
    """
    Consults the secondary indexes before an account is created.

    This is a check-then-act sequence with no lock or conditional write
    behind it: two concurrent creations for the same username can both pass.
    """

    def __init__(self, indexes: IndexManager,
                 max_workers: int = fanout.DEFAULT_MAX_WORKERS) -> None:
        self.indexes = indexes
        self.max_workers = max_workers

    def check_available(self, username: str, email: str) -> None:
        """
        Verify that neither ``username`` nor ``email`` is indexed.

        Both lookups are issued concurrently. If both are taken, the conflict
        is reported for the username.

        Raises
        ------
        :class:`DuplicateConflict`
            If either value already has an index entry.
        :class:`StorageError`
            If either lookup fails for any reason other than absence. No
            conflict is reported in that case, even if the other lookup hit.

        """
        values = {keys.USERNAME: username, keys.EMAIL: email}
        outcomes = fanout.join(
            *[partial(self.indexes.lookup, field, values[field])
              for field in keys.INDEXED_FIELDS],
            max_workers=self.max_workers
        )
        taken = []
        for field, outcome in zip(keys.INDEXED_FIELDS, outcomes):
            if outcome.ok:
                taken.append(field)
            elif isinstance(outcome.error, MalformedRecord):
                logger.warning('Unreadable %s index entry counts as taken: %s',
                               field, outcome.error)
                taken.append(field)
            elif isinstance(outcome.error, StorageError):
                raise StorageError(f'Could not check {field}: '
                                   f'{outcome.error}') from outcome.error
            elif not isinstance(outcome.error, NotFound):
                raise outcome.error     # type: ignore
        if taken:
            logger.debug('Rejecting duplicate %s', taken[0])
            raise DuplicateConflict(taken[0])
