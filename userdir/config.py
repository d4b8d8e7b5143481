"""Flask configuration."""
import os
import secrets

#################### Database ####################
SQLALCHEMY_DATABASE_URI = os.environ.get('SQLALCHEMY_DATABASE_URI',
                                         'sqlite:///:memory:')
SQLALCHEMY_TRACK_MODIFICATIONS = False

CREATE_DB = os.environ.get('CREATE_DB', '0') == '1'
"""Create tables on application start. Useful for testing and dev."""

#################### Session tokens ####################
JWT_SECRET = os.environ.get('JWT_SECRET', secrets.token_urlsafe(16))
"""Secret used to sign session tokens issued after registration."""

#################### Registration policy ####################
ALLOW_NEW_REGISTRATION = os.environ.get('ALLOW_NEW_REGISTRATION', '1')
REQUIRE_INVITE = os.environ.get('REQUIRE_INVITE', '0')

EMAIL_REQUIRED = os.environ.get('EMAIL_REQUIRED', '0')
DATE_OF_BIRTH_REQUIRED = os.environ.get('DATE_OF_BIRTH_REQUIRED', '0')
DATE_OF_BIRTH_MINIMUM = int(os.environ.get('DATE_OF_BIRTH_MINIMUM', '13'))
"""Minimum age, in years. ``0`` disables the check."""

ALLOW_MULTIPLE_ACCOUNTS = os.environ.get('ALLOW_MULTIPLE_ACCOUNTS', '1')
"""If not set, a fingerprint may only be used to register once."""

USERNAME_MIN_LENGTH = int(os.environ.get('USERNAME_MIN_LENGTH', '2'))
USERNAME_MAX_LENGTH = int(os.environ.get('USERNAME_MAX_LENGTH', '32'))

#################### Proxy detection ####################
BLOCK_PROXIES = os.environ.get('BLOCK_PROXIES', '0')
IPDATA_API_KEY = os.environ.get('IPDATA_API_KEY', None)
"""Without a key, no addresses are looked up and no proxies are blocked."""

IPDATA_ENDPOINT = os.environ.get('IPDATA_ENDPOINT', 'https://api.ipdata.co')
PROXY_EXEMPT_ASNS = os.environ.get('PROXY_EXEMPT_ASNS', '')
"""Comma-separated ASNs that are never treated as proxies."""

FORWARDED_FOR_HEADER = os.environ.get('FORWARDED_FOR_HEADER', None)
"""
Header carrying the client address, e.g. ``X-Forwarded-For``.

Only set this when running behind a proxy that overwrites the header.
"""

#################### Captcha ####################
REQUIRE_CAPTCHA = os.environ.get('REQUIRE_CAPTCHA', '0')
CAPTCHA_ENABLED = os.environ.get('CAPTCHA_ENABLED', '0')
CAPTCHA_SERVICE = os.environ.get('CAPTCHA_SERVICE', 'hcaptcha')
CAPTCHA_SITEKEY = os.environ.get('CAPTCHA_SITEKEY', None)

#################### Auto-join ####################
AUTO_JOIN_ENABLED = os.environ.get('AUTO_JOIN_ENABLED', '0')
AUTO_JOIN_COMMUNITIES = os.environ.get('AUTO_JOIN_COMMUNITIES', '')
"""Comma-separated identifiers of communities new accounts join."""

BACKGROUND_WORKERS = int(os.environ.get('BACKGROUND_WORKERS', '2'))
BACKGROUND_QUEUE_SIZE = int(os.environ.get('BACKGROUND_QUEUE_SIZE', '100'))

#################### Logging ####################
LOG_JSON = os.environ.get('LOG_JSON', '1') == '1'
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
