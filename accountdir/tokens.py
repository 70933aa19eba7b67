"""Issue and verify the bearer tokens handed out at login."""

from datetime import datetime, timedelta
from typing import NamedTuple

import jwt
from pytz import UTC

from .exceptions import ExpiredToken, InvalidToken

ALGORITHM = 'HS256'


class Claims(NamedTuple):
    """Identity carried by a bearer token."""

    user_id: str
    username: str
    expires: datetime


def encode(user_id: str, username: str, secret: str,
           expiry: timedelta = timedelta(days=7)) -> str:
    """Encode a signed JWT for an authenticated account."""
    now = datetime.now(tz=UTC)
    claims = {'user_id': user_id, 'username': username,
              'iat': now, 'exp': now + expiry}
    return jwt.encode(claims, secret, algorithm=ALGORITHM)


def decode(token: str, secret: str) -> Claims:
    """
    Verify a token and get its claims.

    Raises
    ------
    :class:`ExpiredToken`
        If the token is past its expiry.
    :class:`InvalidToken`
        If the token is malformed, was signed with another secret, or lacks
        the account claims.

    """
    try:
        data: dict = jwt.decode(token, secret, algorithms=[ALGORITHM],
                                options={'require': ['exp']})
    except jwt.exceptions.ExpiredSignatureError as e:
        raise ExpiredToken('Token has expired') from e
    except jwt.exceptions.InvalidTokenError as e:
        raise InvalidToken('Not a valid token') from e
    try:
        return Claims(user_id=str(data['user_id']),
                      username=str(data['username']),
                      expires=datetime.fromtimestamp(data['exp'], tz=UTC))
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidToken('Token payload malformed') from e
