"""Provides the HTTP interface for account registration."""

from typing import Optional

from flask import Blueprint, current_app, jsonify, request, Response

from .controllers import registration

DEFAULT_LOCALE = 'en-US'
LOCALE_MAX_LENGTH = 16
"""Width of the stored locale."""

blueprint = Blueprint('auth', __name__, url_prefix='/auth')


def client_ip() -> Optional[str]:
    """
    Get the address of the client.

    If a forwarded-for header is configured and present, the left-most
    address in it is the client; otherwise the peer address is used.
    """
    header = current_app.config.get('FORWARDED_FOR_HEADER')
    if header:
        forwarded = request.headers.get(header)
        if forwarded:
            return forwarded.split(',')[0].strip()
    return request.remote_addr


def preferred_locale() -> str:
    """Get the best locale from the ``Accept-Language`` header."""
    locale = request.accept_languages.best
    if not locale or locale == '*':
        return DEFAULT_LOCALE
    if locale == 'en' or len(locale) > LOCALE_MAX_LENGTH:
        return DEFAULT_LOCALE
    return locale


@blueprint.route('/register', methods=['POST'])
def register() -> Response:
    """Create a new account, and get a session token for it."""
    extension = current_app.extensions['userdir']
    data, code, headers = registration.register(
        request.get_json(silent=True),
        extension['policy'],
        ip=client_ip(),
        locale=preferred_locale(),
        secret=current_app.config['JWT_SECRET'],
        classifier=extension['classifier'],
        tasks=extension['tasks'],
    )
    return jsonify(data), code, headers
