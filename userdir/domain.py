"""Defines account concepts for the user directory."""

from typing import Any, Dict, Mapping, NamedTuple, Optional, Tuple
from datetime import date, datetime

from .flags import BitField, UserFlags, Rights


class FieldError(NamedTuple):
    """A problem with a single submitted field."""

    code: str
    """Machine-readable error code, e.g. ``CONSENT_REQUIRED``."""

    message: str
    """Human-readable explanation."""


class Settings(NamedTuple):
    """Per-account client preferences."""

    locale: str = 'en-US'
    theme: str = 'dark'
    status: str = 'offline'
    afk_timeout: int = 300
    timezone_offset: int = 0
    developer_mode: bool = False
    message_display_compact: bool = False
    explicit_content_filter: int = 0
    animate_emoji: bool = True
    gif_auto_play: bool = True
    render_embeds: bool = True
    inline_embed_media: bool = True


class Account(NamedTuple):
    """Represents an account and everything the directory knows about it."""

    account_id: str
    """
    Snowflake identifier, as a decimal string.

    Time-ordered and immutable once assigned.
    """

    username: str
    """Display name chosen at registration, with control characters removed."""

    discriminator: str
    """Four-digit suffix that disambiguates accounts sharing a username."""

    created_at: datetime
    """When the account was registered."""

    settings: Settings
    """The account's settings record."""

    email: Optional[str] = None
    """Canonical form of the account's e-mail address, if any."""

    verified: bool = False
    """Whether or not the e-mail address has been verified."""

    disabled: bool = False
    deleted: bool = False
    bot: bool = False
    system: bool = False

    avatar: Optional[str] = None
    bio: str = ''

    flags: UserFlags = UserFlags()
    """Capability flags; see :class:`.flags.UserFlags`."""

    public_flags: int = 0
    """Publicly visible subset of :attr:`.flags`."""

    rights: Rights = Rights()
    """Platform rights; see :class:`.flags.Rights`."""

    fingerprints: Tuple[str, ...] = ()
    """Device/registration fingerprints seen for this account."""

    extended_settings: Optional[Dict[str, Any]] = None
    """Settings written by clients that this build does not know about."""

    valid_tokens_since: Optional[datetime] = None
    """Session tokens issued before this moment are no longer valid."""

    @property
    def tag(self) -> str:
        """The ``username#discriminator`` form of the identity."""
        return f'{self.username}#{self.discriminator}'


class PublicAccount(NamedTuple):
    """The fields of an :class:`.Account` that anyone may see."""

    account_id: str
    username: str
    discriminator: str
    public_flags: int
    avatar: Optional[str]
    bio: str
    bot: bool


class PrivateAccount(NamedTuple):
    """The fields of an :class:`.Account` that its owner may see."""

    account_id: str
    username: str
    discriminator: str
    public_flags: int
    avatar: Optional[str]
    bio: str
    bot: bool
    email: Optional[str]
    verified: bool
    disabled: bool
    flags: str
    locale: str


def to_public(account: Account) -> PublicAccount:
    """Project an :class:`.Account` onto its public view."""
    return PublicAccount(
        account_id=account.account_id,
        username=account.username,
        discriminator=account.discriminator,
        public_flags=account.public_flags,
        avatar=account.avatar,
        bio=account.bio,
        bot=account.bot,
    )


def to_private(account: Account) -> PrivateAccount:
    """Project an :class:`.Account` onto the view shown to its owner."""
    return PrivateAccount(
        *to_public(account),
        email=account.email,
        verified=account.verified,
        disabled=account.disabled,
        flags=str(account.flags),
        locale=account.settings.locale,
    )


class Registration(NamedTuple):
    """A request to create an account, after field-level validation."""

    username: str
    password: str
    consent: bool
    email: Optional[str] = None
    fingerprint: Optional[str] = None
    invite: Optional[str] = None
    date_of_birth: Optional[date] = None
    captcha_key: Optional[str] = None


class RegistrationPolicy(NamedTuple):
    """
    Registration policy, read once from configuration.

    Instances are immutable. Build one at application start with
    :meth:`from_config` and pass it to the code that needs it.
    """

    allow_new_registration: bool = True
    require_invite: bool = False
    email_required: bool = False
    date_of_birth_required: bool = False
    minimum_age: int = 0
    """Minimum age in years. ``0`` disables the check."""

    allow_multiple_accounts: bool = True
    block_proxies: bool = False
    require_captcha: bool = False
    captcha_enabled: bool = False
    captcha_service: Optional[str] = None
    """Captcha provider identifier, e.g. ``hcaptcha``."""

    captcha_sitekey: Optional[str] = None
    auto_join_enabled: bool = False
    auto_join_communities: Tuple[str, ...] = ()
    username_min_length: int = 2
    username_max_length: int = 32

    @property
    def captcha_required(self) -> bool:
        """Whether a solved captcha must accompany a registration."""
        return self.require_captcha and self.captcha_enabled

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> 'RegistrationPolicy':
        """Build a policy from a Flask-style configuration mapping."""
        def _flag(key: str, default: bool) -> bool:
            value = config.get(key, default)
            if isinstance(value, str):
                return value.strip().lower() in ('1', 'true', 'yes', 'on')
            return bool(value)

        def _int(key: str, default: int) -> int:
            return int(config.get(key, default) or 0)

        def _optional(key: str) -> Optional[str]:
            value = config.get(key)
            return str(value) if value else None

        communities = config.get('AUTO_JOIN_COMMUNITIES') or ()
        if isinstance(communities, str):
            communities = communities.replace(',', ' ').split()

        return cls(
            allow_new_registration=_flag('ALLOW_NEW_REGISTRATION', True),
            require_invite=_flag('REQUIRE_INVITE', False),
            email_required=_flag('EMAIL_REQUIRED', False),
            date_of_birth_required=_flag('DATE_OF_BIRTH_REQUIRED', False),
            minimum_age=_int('DATE_OF_BIRTH_MINIMUM', 0),
            allow_multiple_accounts=_flag('ALLOW_MULTIPLE_ACCOUNTS', True),
            block_proxies=_flag('BLOCK_PROXIES', False),
            require_captcha=_flag('REQUIRE_CAPTCHA', False),
            captcha_enabled=_flag('CAPTCHA_ENABLED', False),
            captcha_service=_optional('CAPTCHA_SERVICE'),
            captcha_sitekey=_optional('CAPTCHA_SITEKEY'),
            auto_join_enabled=_flag('AUTO_JOIN_ENABLED', False),
            auto_join_communities=tuple(str(c) for c in communities),
            username_min_length=_int('USERNAME_MIN_LENGTH', 2),
            username_max_length=_int('USERNAME_MAX_LENGTH', 32),
        )


def to_dict(obj: tuple) -> dict:
    """
    Generate a JSON-ready dict representation of a NamedTuple instance.

    Child NamedTuples are cast recursively, datetimes and dates become
    ISO-8601 strings, and bitsets become decimal strings.
    """
    if not hasattr(obj, '_asdict'):  # NamedTuple-generated classes have this.
        return {}
    data = obj._asdict()  # type: ignore

    def _cast(value: Any) -> Any:
        if hasattr(value, '_asdict'):
            return to_dict(value)
        if isinstance(value, (datetime, date)):
            return value.isoformat()
        if isinstance(value, BitField):
            return str(value)
        if isinstance(value, (list, tuple)):
            return [_cast(o) for o in value]
        return value

    return {key: _cast(value) for key, value in data.items()}
