"""Exceptions raised while registering accounts."""

from typing import Dict, List, Optional

from .domain import FieldError


class RegistrationError(RuntimeError):
    """
    A registration was refused because of the submitted data.

    Carries one or more field-scoped errors, so that a client can highlight
    every offending input at once.
    """

    def __init__(self, field: Optional[str] = None, code: str = '',
                 message: str = '',
                 errors: Optional[Dict[str, List[FieldError]]] = None) \
            -> None:
        self.errors: Dict[str, List[FieldError]] = dict(errors or {})
        if field is not None:
            self.errors.setdefault(field, []).append(FieldError(code, message))
        super(RegistrationError, self).__init__(message or str(self.errors))

    @property
    def fields(self) -> List[str]:
        """Names of the fields that have errors."""
        return list(self.errors.keys())

    def codes(self, field: str) -> List[str]:
        """Error codes attached to ``field``."""
        return [error.code for error in self.errors.get(field, [])]


class ValidationError(RegistrationError):
    """A field is missing, malformed, or out of range."""


class PolicyError(RegistrationError):
    """Registration is not permitted under the current policy."""


class ConflictError(RegistrationError):
    """The submitted identity collides with an existing account."""


class ChallengeRequired(RuntimeError):
    """
    The client must solve a captcha challenge and resubmit.

    This is not a failure of the submitted data, and carries no field errors.
    """

    def __init__(self, service: Optional[str], sitekey: Optional[str]) \
            -> None:
        self.service = service
        self.sitekey = sitekey
        super(ChallengeRequired, self).__init__('Captcha required')


class TransientPersistenceError(RuntimeError):
    """A unique constraint was violated by a concurrent registration."""


class DetachedTaskError(RuntimeError):
    """A best-effort background task failed."""


class RegistrationFailed(RuntimeError):
    """The account could not be written to the database."""


class NoSuchAccount(RuntimeError):
    """Account does not exist."""


class Unavailable(RuntimeError):
    """The database is temporarily unavailable."""
