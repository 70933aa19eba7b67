"""Check user input before it reaches the account directory."""

import re
from datetime import date
from typing import Optional

USERNAME_PATTERN = re.compile(r'[A-Za-z0-9!$%^&*()_+=|;. -]+')
EMAIL_PATTERN = re.compile(r'[A-Za-z0-9.@_-]+')
BIRTHDAY_PATTERN = re.compile(r'(\d{4})-(\d{2})-(\d{2})')


def is_clean_username(username: str) -> bool:
    """Whether a username uses only allowed characters."""
    return bool(USERNAME_PATTERN.fullmatch(username))


def is_clean_email(email: str) -> bool:
    """Whether an email address uses only allowed characters."""
    return bool(EMAIL_PATTERN.fullmatch(email))


def parse_birthday(birthday: str) -> Optional[date]:
    """
    Parse a ``YYYY-MM-DD`` birthday.

    Returns ``None`` if the string is not in that format, or is not a real
    calendar date (e.g. ``2001-02-30``).
    """
    match = BIRTHDAY_PATTERN.fullmatch(birthday)
    if match is None:
        return None
    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None
