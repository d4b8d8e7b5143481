"""Provide methods for creating and loading accounts."""

from typing import Iterable, Optional
import json
import logging

from flask import current_app
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from . import canonical, communities, discriminators, domain, fraud, \
    passwords, snowflake, util
from .discriminators import DiscriminatorAllocator
from .exceptions import ConflictError, NoSuchAccount, RegistrationFailed, \
    TransientPersistenceError, Unavailable
from .flags import DEFAULT_RIGHTS, Rights, UserFlags
from .models import DBAccount, DBAccountSettings, DBFingerprint, db
from .services.ipdata import OriginClassifier
from .tasks import BackgroundTasks

logger = logging.getLogger(__name__)


def does_email_exist(email: str) -> bool:
    """
    Determine whether an active account already uses an e-mail address.

    Parameters
    ----------
    email : str
        Should already be in canonical form.

    Returns
    -------
    bool

    """
    try:
        data = db.session.query(DBAccount.account_id) \
            .filter(DBAccount.email == email) \
            .filter(DBAccount.deleted == False) \
            .first()    # noqa: E712
    except OperationalError as e:
        raise Unavailable('Database is temporarily unavailable') from e
    return data is not None


def does_tag_exist(username: str, discriminator: str) -> bool:
    """Determine whether an active account holds ``username#discriminator``."""
    try:
        data = db.session.query(DBAccount.account_id) \
            .filter(DBAccount.username == username) \
            .filter(DBAccount.discriminator == discriminator) \
            .filter(DBAccount.deleted == False) \
            .first()    # noqa: E712
    except OperationalError as e:
        raise Unavailable('Database is temporarily unavailable') from e
    return data is not None


def does_fingerprint_exist(fingerprint: str) -> bool:
    """Determine whether any account has been seen with a fingerprint."""
    try:
        data = db.session.query(DBFingerprint.fingerprint_id) \
            .filter(DBFingerprint.fingerprint == fingerprint) \
            .first()
    except OperationalError as e:
        raise Unavailable('Database is temporarily unavailable') from e
    return data is not None


def register(registration: domain.Registration,
             policy: domain.RegistrationPolicy,
             ip: Optional[str] = None,
             locale: str = 'en-US',
             classifier: Optional[OriginClassifier] = None,
             tasks: Optional[BackgroundTasks] = None,
             allocator: Optional[DiscriminatorAllocator] = None) \
        -> domain.Account:
    """
    Create a new account.

    Parameters
    ----------
    registration : :class:`.domain.Registration`
        Submitted data, already validated field by field.
    policy : :class:`.domain.RegistrationPolicy`
        Registration policy in effect.
    ip : str
        The IP address of the client requesting the registration.
    locale : str
        Initial locale for the account's settings.
    classifier : :class:`.OriginClassifier`
        Used to detect proxies, if the policy blocks them.
    tasks : :class:`.BackgroundTasks`
        Executor for the post-registration auto-join.
    allocator : :class:`.DiscriminatorAllocator`
        Source of discriminators; one backed by the database by default.

    Returns
    -------
    :class:`.domain.Account`
        The created account. Issuing a session token is up to the caller.

    Raises
    ------
    :class:`.RegistrationError`
        If the registration was refused.
    :class:`.ChallengeRequired`
        If a captcha must be solved first.
    :class:`.RegistrationFailed`
        If the account could not be written.

    """
    username = canonical.sanitize_username(registration.username)
    logger.info('register %s %s %s', registration.email, username, ip)

    email = fraud.evaluate(registration, policy, ip=ip, classifier=classifier)
    password_hash = passwords.hash_password(registration.password)
    fingerprints = [registration.fingerprint] if registration.fingerprint \
        else []

    allocator = allocator or DiscriminatorAllocator(does_tag_exist)
    for discriminator in allocator.candidates(username):
        try:
            account = create_account(username, discriminator,
                                     password_hash=password_hash,
                                     email=email, locale=locale,
                                     fingerprints=fingerprints)
        except TransientPersistenceError as e:
            logger.info('%s; trying another discriminator', e)
            continue
        break
    else:
        raise discriminators.exhausted(username)

    logger.info('registered %s as %s', account.tag, account.account_id)
    communities.schedule_auto_join(current_app._get_current_object(),
                                   account, policy, tasks)
    return account


def create_account(username: str, discriminator: str,
                   password_hash: Optional[str] = None,
                   email: Optional[str] = None,
                   locale: str = 'en-US',
                   fingerprints: Iterable[str] = (),
                   flags: Optional[UserFlags] = None,
                   rights: Optional[Rights] = None,
                   system: bool = False,
                   account_id: Optional[int] = None) -> domain.Account:
    """
    Write an account and its settings record in a single transaction.

    Either both rows are committed, or neither is.

    Raises
    ------
    :class:`.TransientPersistenceError`
        If a concurrent registration took the same identity first.
    :class:`.ConflictError`
        If a concurrent registration took the same e-mail address first.
    :class:`.RegistrationFailed`
        If the rows could not be written for any other reason.

    """
    if not discriminators.is_valid(discriminator, allow_reserved=system):
        raise ValueError(f'Not a valid discriminator: {discriminator!r}')

    flags = flags or UserFlags()
    created = util.to_db(util.now())
    account_id = account_id or snowflake.generate()
    try:
        with util.transaction() as session:
            db_settings = DBAccountSettings(settings_id=account_id,
                                            locale=locale)
            session.add(db_settings)
            db_account = DBAccount(
                account_id=account_id,
                username=username,
                discriminator=discriminator,
                email=email,
                password_hash=password_hash,
                created_at=created,
                valid_tokens_since=created,
                verified=False,
                disabled=False,
                deleted=False,
                system=system,
                flags=str(flags),
                public_flags=int(flags) & 0xFFFFFFFF,
                rights=str(rights if rights is not None else DEFAULT_RIGHTS),
                extended_settings='{}',
                settings=db_settings,
            )
            session.add(db_account)
            _attach_fingerprints(db_account, fingerprints)
            session.commit()
    except IntegrityError as e:
        raise _classify_conflict(username, discriminator, email) from e
    except OperationalError as e:
        raise Unavailable('Database is temporarily unavailable') from e
    except SQLAlchemyError as e:
        logger.debug(e)
        raise RegistrationFailed('Could not create account') from e
    return _to_domain(db_account)


def create_system_account(username: str,
                          account_id: Optional[int] = None) -> domain.Account:
    """
    Create an account that is operated by the platform itself.

    System accounts use the reserved discriminator ``0000`` and have no
    password.
    """
    username = canonical.sanitize_username(username)
    return create_account(username, discriminators.RESERVED,
                          flags=UserFlags(['SYSTEM']), system=True,
                          account_id=account_id)


def get_account_by_id(account_id: str) -> domain.Account:
    """Load an active account from the database."""
    return _to_domain(_get_db_account(account_id))


def get_public_account(account_id: str) -> domain.PublicAccount:
    """Load the public view of an active account."""
    return domain.to_public(get_account_by_id(account_id))


def add_fingerprint(account_id: str, fingerprint: str) -> domain.Account:
    """Record a fingerprint against an account. Fingerprints are never lost."""
    with util.transaction() as session:
        db_account = _get_db_account(account_id)
        _attach_fingerprints(db_account, [fingerprint])
        session.add(db_account)
    return _to_domain(db_account)


def soft_delete(account_id: str) -> None:
    """
    Mark an account as deleted.

    The row is kept, so that records referring to it stay intact; its
    identity and e-mail address become available to new registrations.
    """
    with util.transaction() as session:
        db_account = _get_db_account(account_id)
        db_account.deleted = True
        session.add(db_account)
    logger.info('soft-deleted account %s', account_id)


def _classify_conflict(username: str, discriminator: str,
                       email: Optional[str]) -> Exception:
    """Work out which constraint a failed write ran into."""
    if does_tag_exist(username, discriminator):
        return TransientPersistenceError(
            f'{username}#{discriminator} was taken concurrently'
        )
    if email is not None and does_email_exist(email):
        return ConflictError('email', fraud.EMAIL_ALREADY_REGISTERED,
                             'Email is already registered.')
    return RegistrationFailed('Could not create account')


def _attach_fingerprints(db_account: DBAccount,
                         fingerprints: Iterable[str]) -> None:
    known = {f.fingerprint for f in db_account.fingerprints}
    for fingerprint in fingerprints:
        if fingerprint in known:
            continue
        db_account.fingerprints.append(
            DBFingerprint(fingerprint=fingerprint,
                          created_at=util.to_db(util.now()))
        )
        known.add(fingerprint)


def _get_db_account(account_id: str) -> DBAccount:
    try:
        db_account = db.session.query(DBAccount) \
            .filter(DBAccount.account_id == int(account_id)) \
            .filter(DBAccount.deleted == False) \
            .first()    # noqa: E712
    except OperationalError as e:
        raise Unavailable('Database is temporarily unavailable') from e
    except ValueError as e:     # Not a numeric identifier.
        raise NoSuchAccount('Account does not exist') from e
    if db_account is None:
        raise NoSuchAccount('Account does not exist')
    return db_account


def _to_domain(db_account: DBAccount) -> domain.Account:
    db_settings = db_account.settings
    settings = domain.Settings(**{
        field: getattr(db_settings, field)
        for field in domain.Settings._fields
    })
    return domain.Account(
        account_id=str(db_account.account_id),
        username=db_account.username,
        discriminator=db_account.discriminator,
        created_at=util.from_db(db_account.created_at),
        settings=settings,
        email=db_account.email,
        verified=bool(db_account.verified),
        disabled=bool(db_account.disabled),
        deleted=bool(db_account.deleted),
        bot=bool(db_account.bot),
        system=bool(db_account.system),
        avatar=db_account.avatar,
        bio=db_account.bio or '',
        flags=UserFlags.from_string(db_account.flags),
        public_flags=db_account.public_flags,
        rights=Rights.from_string(db_account.rights),
        fingerprints=tuple(f.fingerprint for f in db_account.fingerprints),
        extended_settings=json.loads(db_account.extended_settings or '{}'),
        valid_tokens_since=util.from_db(db_account.valid_tokens_since),
    )
