"""
Key layout of the backing record store.

.. code-block:: text

   users/<accountId>/account.json            -> {username, passwordHash, email,
                                                 birthday}
   users/<accountId>/config.json             -> {<arbitrary settings>}
   users/by-username/<lower(username)>.json  -> {accountId}
   users/by-email/<lower(email)>.json        -> {accountId}

"""

from typing import Optional

USERS_PREFIX = 'users/'
ACCOUNT_FILE = 'account.json'
CONFIG_FILE = 'config.json'

USERNAME = 'username'
EMAIL = 'email'
INDEXED_FIELDS = (USERNAME, EMAIL)
"""Fields with a secondary index, in duplicate-check priority order."""

_NAMESPACES = {f'by-{field}' for field in INDEXED_FIELDS}


def normalize(value: str) -> str:
    """Case-fold a username or email address for use in an index key."""
    return value.lower()


def account_key(account_id: str) -> str:
    """Key of the primary account record."""
    return f'{USERS_PREFIX}{account_id}/{ACCOUNT_FILE}'


def config_key(account_id: str) -> str:
    """Key of the per-account config record."""
    return f'{USERS_PREFIX}{account_id}/{CONFIG_FILE}'


def index_prefix(field: str) -> str:
    """Prefix under which all index entries for ``field`` live."""
    if field not in INDEXED_FIELDS:
        raise ValueError(f'Not an indexed field: {field}')
    return f'{USERS_PREFIX}by-{field}/'


def index_key(field: str, value: str) -> str:
    """Key of the index entry for ``value`` in the ``field`` namespace."""
    return f'{index_prefix(field)}{normalize(value)}.json'


def parse_account_key(key: str) -> Optional[str]:
    """
    Get the account ID from a primary account key.

    Returns ``None`` for any other key under ``users/`` (config records,
    index entries, stray objects).
    """
    if not key.startswith(USERS_PREFIX):
        return None
    parts = key[len(USERS_PREFIX):].split('/')
    if len(parts) != 2 or parts[1] != ACCOUNT_FILE:
        return None
    account_id = parts[0]
    if not account_id or account_id in _NAMESPACES:
        return None
    return account_id
