"""Hash and check account passwords with bcrypt."""

import logging
from functools import lru_cache

import bcrypt

logger = logging.getLogger(__name__)

DEFAULT_ROUNDS = 10


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Generate a salted bcrypt hash of a password."""
    hashed = bcrypt.hashpw(password.encode('utf-8'),
                           bcrypt.gensalt(rounds=rounds))
    return hashed.decode('ascii')


def check_password(password: str, hashed: str) -> bool:
    """
    Check a password against a stored hash.

    A hash that bcrypt cannot parse never matches.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'),
                              hashed.encode('ascii'))
    except (ValueError, UnicodeEncodeError) as e:
        logger.warning('Unusable password hash: %s', e)
        return False


@lru_cache(maxsize=None)
def dummy_hash(rounds: int = DEFAULT_ROUNDS) -> str:
    """A hash of nothing, for checks that must fail at full cost."""
    return hash_password('', rounds)
