"""Password hashing."""

import bcrypt

ROUNDS = 12
"""bcrypt cost factor. The salt is stored in the hash itself."""


def hash_password(password: str) -> str:
    """
    Generate a secure hash of a password.

    bcrypt only considers the first 72 bytes of its input; longer passwords
    are rejected during validation.
    """
    hashed = bcrypt.hashpw(password.encode('utf-8'),
                           bcrypt.gensalt(rounds=ROUNDS))
    return hashed.decode('ascii')


def check_password(password: str, encrypted: str) -> bool:
    """Check a password against a hash produced by :func:`hash_password`."""
    try:
        return bcrypt.checkpw(password.encode('utf-8'),
                              encrypted.encode('ascii'))
    except ValueError:  # Not a bcrypt hash.
        return False
