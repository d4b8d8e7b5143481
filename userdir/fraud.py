"""
Policy and abuse checks applied before an account is created.

The checks run in a fixed order and stop at the first failure. Cheap policy
checks come first, so that nothing is looked up for a registration that
would be refused anyway.

Each failure is raised as a field-scoped :class:`.RegistrationError`. A
missing captcha is not a failure: it raises :class:`.ChallengeRequired`,
and the client is expected to resubmit with a solved challenge.
"""

from typing import Optional
from datetime import date
import logging

from dateutil.relativedelta import relativedelta

from . import accounts, canonical, domain
from .exceptions import ChallengeRequired, ConflictError, PolicyError, \
    ValidationError
from .services.ipdata import OriginClassifier
from .util import now

logger = logging.getLogger(__name__)

REGISTRATION_DISABLED = 'REGISTRATION_DISABLED'
CONSENT_REQUIRED = 'CONSENT_REQUIRED'
INVITE_ONLY = 'INVITE_ONLY'
IP_BLOCKED = 'IP_BLOCKED'
INVALID_EMAIL = 'INVALID_EMAIL'
EMAIL_ALREADY_REGISTERED = 'EMAIL_ALREADY_REGISTERED'
BASE_TYPE_REQUIRED = 'BASE_TYPE_REQUIRED'
DATE_OF_BIRTH_UNDERAGE = 'DATE_OF_BIRTH_UNDERAGE'


def check_registration_open(policy: domain.RegistrationPolicy) -> None:
    """Refuse everything while new registrations are switched off."""
    if not policy.allow_new_registration:
        raise PolicyError('email', REGISTRATION_DISABLED,
                          'New user registration is disabled.')


def check_consent(registration: domain.Registration) -> None:
    """The user must agree to the terms of service."""
    if not registration.consent:
        raise PolicyError('consent', CONSENT_REQUIRED,
                          'You must agree to the Terms of Service and'
                          ' Privacy Policy.')


def check_invite(registration: domain.Registration,
                 policy: domain.RegistrationPolicy) -> None:
    """Some deployments only admit users who were sent an invite."""
    if policy.require_invite and not registration.invite:
        raise PolicyError('email', INVITE_ONLY,
                          'You must be invited to register.')


def check_origin(ip: Optional[str], policy: domain.RegistrationPolicy,
                 classifier: Optional[OriginClassifier]) -> None:
    """Refuse requests coming through proxies, when so configured."""
    if not policy.block_proxies or classifier is None:
        return
    if classifier.is_proxy(ip):
        logger.info('proxy %s blocked from registration', ip)
        raise PolicyError('ip', IP_BLOCKED,
                          'Your IP is blocked from registration.')


def check_email(registration: domain.Registration,
                policy: domain.RegistrationPolicy) -> Optional[str]:
    """
    Canonicalize the e-mail address and make sure it is not in use.

    Returns
    -------
    str or None
        The canonical address, or ``None`` if no address was supplied.

    """
    if not registration.email:
        if policy.email_required:
            raise ValidationError('email', BASE_TYPE_REQUIRED,
                                  'This field is required.')
        return None

    email = canonical.canonicalize_email(registration.email)
    if email is None:
        raise ValidationError('email', INVALID_EMAIL,
                              'Invalid email address.')
    if accounts.does_email_exist(email):
        raise ConflictError('email', EMAIL_ALREADY_REGISTERED,
                            'Email is already registered.')
    return email


def check_age(registration: domain.Registration,
              policy: domain.RegistrationPolicy,
              today: Optional[date] = None) -> None:
    """Enforce the minimum age, when one is configured."""
    date_of_birth = registration.date_of_birth
    if date_of_birth is None:
        if policy.date_of_birth_required:
            raise ValidationError('date_of_birth', BASE_TYPE_REQUIRED,
                                  'This field is required.')
        return
    if not policy.minimum_age:
        return

    today = today or now().date()
    latest = today - relativedelta(years=policy.minimum_age)
    if date_of_birth > latest:  # Later is younger.
        raise PolicyError('date_of_birth', DATE_OF_BIRTH_UNDERAGE,
                          f'You need to be {policy.minimum_age} years or'
                          f' older.')


def check_fingerprint(registration: domain.Registration,
                      policy: domain.RegistrationPolicy) -> None:
    """
    Refuse a device that already registered an account.

    Reported against ``email`` with the duplicate-address code, so that the
    response does not reveal how the duplicate was detected.
    """
    if policy.allow_multiple_accounts or not registration.fingerprint:
        return
    if accounts.does_fingerprint_exist(registration.fingerprint):
        logger.info('fingerprint reused for registration of %s',
                    registration.username)
        raise ConflictError('email', EMAIL_ALREADY_REGISTERED,
                            'Email is already registered.')


def check_captcha(registration: domain.Registration,
                  policy: domain.RegistrationPolicy) -> None:
    """Ask for a captcha when one is required and none was solved."""
    if policy.captcha_required and not registration.captcha_key:
        raise ChallengeRequired(policy.captcha_service,
                                policy.captcha_sitekey)


def evaluate(registration: domain.Registration,
             policy: domain.RegistrationPolicy,
             ip: Optional[str] = None,
             classifier: Optional[OriginClassifier] = None) -> Optional[str]:
    """
    Run every check against a registration.

    Parameters
    ----------
    registration : :class:`.domain.Registration`
    policy : :class:`.domain.RegistrationPolicy`
    ip : str
        Address of the client requesting the registration.
    classifier : :class:`.OriginClassifier`
        Used to detect proxies when ``policy.block_proxies`` is set.

    Returns
    -------
    str or None
        The canonical e-mail address to store on the account.

    Raises
    ------
    :class:`.RegistrationError`
        The first check that failed.
    :class:`.ChallengeRequired`
        If a captcha must be solved.

    """
    check_registration_open(policy)
    check_consent(registration)
    check_invite(registration, policy)
    check_origin(ip, policy, classifier)
    email = check_email(registration, policy)
    check_age(registration, policy)
    check_fingerprint(registration, policy)
    check_captcha(registration, policy)
    return email
