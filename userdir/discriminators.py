"""
Allocation of discriminators.

A discriminator is the four-digit suffix that tells apart accounts sharing a
username (``alice#0421``, ``alice#7730``). New discriminators are drawn at
random and checked against the active accounts. The check is not atomic with
the write that follows it: two registrations for the same username can pass
the check with the same candidate. The unique index on the account table is
what actually guarantees uniqueness, and the loser of such a race moves on to
the next candidate (see :func:`userdir.accounts.register`).
"""

from typing import Callable, Iterator, Optional
import logging
import random
import re

from .exceptions import ConflictError

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 5
"""Number of candidates drawn for a single registration."""

RESERVED = '0000'
"""Discriminator of system and migrated accounts. Never drawn at random."""

LOWEST = 1
HIGHEST = 9999

USERNAME_TOO_MANY_USERS = 'USERNAME_TOO_MANY_USERS'

_PATTERN = re.compile(r'^\d{4}$')


def is_valid(discriminator: str, allow_reserved: bool = True) -> bool:
    """Whether ``discriminator`` is a well-formed four-digit string."""
    if not _PATTERN.match(discriminator):
        return False
    return allow_reserved or discriminator != RESERVED


def exhausted(username: str) -> ConflictError:
    """Get the error raised when no free discriminator could be found."""
    return ConflictError(
        'username', USERNAME_TOO_MANY_USERS,
        f'Too many users have the username {username}; please try another.'
    )


class DiscriminatorAllocator:
    """
    Draws free discriminators for a username.

    Parameters
    ----------
    exists : callable
        ``exists(username, discriminator) -> bool``; whether an active
        account already holds the identity.
    rng : :class:`random.Random`
        Source of randomness. Defaults to the system RNG.
    max_attempts : int
        Total number of candidates drawn per registration.

    """

    def __init__(self, exists: Callable[[str, str], bool],
                 rng: Optional[random.Random] = None,
                 max_attempts: int = MAX_ATTEMPTS) -> None:
        self.exists = exists
        self.rng = rng or random.SystemRandom()
        self.max_attempts = max_attempts

    def generate(self) -> str:
        """Draw a candidate uniformly from ``0001``..``9999``."""
        return str(self.rng.randint(LOWEST, HIGHEST)).zfill(4)

    def candidates(self, username: str) -> Iterator[str]:
        """
        Generate candidates that are free as of the moment they are checked.

        At most :attr:`max_attempts` candidates are drawn in total, whether
        they turn out to be taken here or are rejected later by the caller.
        """
        for attempt in range(1, self.max_attempts + 1):
            candidate = self.generate()
            if self.exists(username, candidate):
                logger.debug('%s#%s is taken (attempt %i)', username,
                             candidate, attempt)
                continue
            yield candidate

    def allocate(self, username: str) -> str:
        """
        Get a free discriminator for ``username``.

        Raises
        ------
        :class:`.ConflictError`
            If every candidate was taken.

        """
        for candidate in self.candidates(username):
            return candidate
        raise exhausted(username)
