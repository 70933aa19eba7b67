"""Testing helpers."""

from datetime import date

from accountdir import keys, passwords
from accountdir.directory import AccountDirectory
from accountdir.store.memory import InMemoryRecordStore

ROUNDS = 4
"""Cheapest bcrypt cost, to keep tests fast."""


def new_directory(page_size: int = 1000) -> AccountDirectory:
    """Get a directory over an empty in-memory store."""
    return AccountDirectory(InMemoryRecordStore(page_size=page_size),
                            max_workers=4, bcrypt_rounds=ROUNDS)


def create(directory: AccountDirectory, username: str, email: str,
           password: str = 'thepassword',
           birthday: date = date(1990, 1, 2)) -> str:
    """Create an account through the directory, hashing the password."""
    return directory.create_account(
        username, email, passwords.hash_password(password, ROUNDS), birthday
    )


def index_keys(store: InMemoryRecordStore) -> list:
    """All index entry keys in ``store``."""
    return [key for field in keys.INDEXED_FIELDS
            for key in store.iter_keys(keys.index_prefix(field))]
