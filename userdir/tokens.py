"""Functions for working with session tokens issued at registration."""

from typing import Optional
from datetime import datetime

import jwt

from . import domain
from .util import now


class InvalidToken(ValueError):
    """Token is forged, corrupted, or was signed with another secret."""


def encode(account: domain.Account, secret: str,
           issued_at: Optional[datetime] = None) -> str:
    """Encode a session token for an account as a signed JWT."""
    issued_at = issued_at or now()
    claims = {'id': account.account_id, 'iat': int(issued_at.timestamp())}
    token: str = jwt.encode(claims, secret, algorithm='HS256')
    return token


def decode(token: str, secret: str) -> dict:
    """Decode a session token and get its claims."""
    try:
        claims: dict = jwt.decode(token, secret, algorithms=['HS256'])
    except jwt.exceptions.InvalidTokenError as e:
        raise InvalidToken('Not a valid token') from e
    return claims
