"""Defines account directory concepts."""

import json
import logging
from datetime import date
from enum import Enum
from typing import Any, Dict, NamedTuple

import dateutil.parser

from .exceptions import MalformedRecord

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {'theme': 'light', 'notifications': True}
"""Settings written for every new account."""


class Account(NamedTuple):
    """A user account, as stored at ``users/<accountId>/account.json``."""

    account_id: str
    """Opaque unique identifier; not part of the stored record."""

    username: str
    """Username as entered at signup (not case-folded)."""

    email: str
    """Email address as entered at signup (not case-folded)."""

    password_hash: str
    """Opaque output of :func:`accountdir.passwords.hash_password`."""

    birthday: date

    def to_record(self) -> Dict[str, Any]:
        """Get the stored representation of this account."""
        return {
            'username': self.username,
            'passwordHash': self.password_hash,
            'email': self.email,
            'birthday': self.birthday.isoformat(),
        }

    def to_public(self) -> Dict[str, Any]:
        """Get a representation of this account that is safe to hand out."""
        return {
            'userId': self.account_id,
            'username': self.username,
            'email': self.email,
            'birthday': self.birthday.isoformat(),
        }

    @classmethod
    def from_record(cls, account_id: str, key: str,
                    data: Dict[str, Any]) -> 'Account':
        """
        Instantiate an :class:`Account` from a decoded stored record.

        Records written before the field was renamed keep the hash under
        ``password``; both are accepted.

        Raises
        ------
        :class:`MalformedRecord`
            If a required field is absent, empty, or of the wrong type.

        """
        if not isinstance(data, dict):
            raise MalformedRecord(key, 'not a JSON object')
        password_hash = data.get('passwordHash', data.get('password'))
        for name, value in (('username', data.get('username')),
                            ('email', data.get('email')),
                            ('passwordHash', password_hash),
                            ('birthday', data.get('birthday'))):
            if not isinstance(value, str) or not value:
                raise MalformedRecord(key, f'missing or invalid {name}')
        try:
            birthday = dateutil.parser.isoparse(data['birthday']).date()
        except (ValueError, OverflowError) as e:
            raise MalformedRecord(key, f'invalid birthday: {e}') from e
        return cls(account_id=account_id, username=data['username'],
                   email=data['email'], password_hash=password_hash,
                   birthday=birthday)


class Policy(Enum):
    """Index reconciliation strategies."""

    ADDITIVE = 'additive'
    """Write index entries that are absent; never delete or overwrite."""

    DESTRUCTIVE = 'destructive'
    """Delete every index entry, then regenerate all of them."""


class RebuildReport(NamedTuple):
    """Counters from a single reconciliation pass."""

    policy: Policy
    visited: int = 0
    """Primary account keys seen in the listing."""
    rebuilt: int = 0
    """Accounts for which at least one index entry was written."""
    skipped: int = 0
    """Accounts whose index entries were all present already."""
    malformed: int = 0
    """Accounts whose record could not be decoded."""
    missing: int = 0
    """Accounts listed but gone by the time they were read."""
    cleared: int = 0
    """Index entries deleted before regeneration."""
    failed: int = 0
    """Accounts whose record could not be read from the store."""

    def to_dict(self) -> Dict[str, Any]:
        """Get a JSON-friendly representation of the report."""
        data = self._asdict()
        data['policy'] = self.policy.value
        return data


def encode(data: Any) -> bytes:
    """Serialize a record for storage."""
    return json.dumps(data, indent=2).encode('utf-8')


def decode(key: str, raw: bytes) -> Any:
    """
    Deserialize a stored record.

    Raises
    ------
    :class:`MalformedRecord`
        If ``raw`` is not valid UTF-8 JSON.

    """
    try:
        return json.loads(raw.decode('utf-8'))
    except (UnicodeDecodeError, ValueError) as e:
        raise MalformedRecord(key, str(e)) from e
