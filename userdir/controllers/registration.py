"""
Controller for account registration.

Field-level problems (missing, malformed, out of range) are caught by the
:class:`RegistrationForm` and reported all at once. A form that is
well-formed is then handed to :func:`userdir.accounts.register`, which
applies the registration policy and creates the account.
"""

from typing import Any, Dict, List, Optional, Tuple
from http import HTTPStatus as status
import logging

from werkzeug.datastructures import MultiDict
from werkzeug.exceptions import BadRequest, InternalServerError, \
    ServiceUnavailable
from wtforms import BooleanField, DateField, Form, PasswordField, \
    StringField, validators

from .. import accounts, canonical, domain, tokens
from ..domain import FieldError
from ..exceptions import ChallengeRequired, RegistrationError, \
    RegistrationFailed, Unavailable
from ..services.ipdata import OriginClassifier
from ..tasks import BackgroundTasks

logger = logging.getLogger(__name__)

ResponseData = Tuple[dict, int, dict]

INVALID_FORM_BODY = 50035

BASE_TYPE_REQUIRED = 'BASE_TYPE_REQUIRED'
BASE_TYPE_BAD_LENGTH = 'BASE_TYPE_BAD_LENGTH'
BASE_TYPE_INVALID = 'BASE_TYPE_INVALID'
EMAIL_TYPE_INVALID_EMAIL = 'EMAIL_TYPE_INVALID_EMAIL'
BASE_TYPE_STRING = 'BASE_TYPE_STRING'
BASE_TYPE_BOOLEAN = 'BASE_TYPE_BOOLEAN'

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 72
"""bcrypt only looks at the first 72 bytes."""

EMAIL_MIN_LENGTH = 5
EMAIL_MAX_LENGTH = 100

FINGERPRINT_MAX_LENGTH = 255

STRING_FIELDS = ('username', 'password', 'email', 'fingerprint', 'invite',
                 'date_of_birth', 'captcha_key')
BOOLEAN_FIELDS = ('consent',)


def register(params: Any, policy: domain.RegistrationPolicy,
             ip: Optional[str], locale: str, secret: str,
             classifier: Optional[OriginClassifier] = None,
             tasks: Optional[BackgroundTasks] = None) -> ResponseData:
    """
    Handle a registration request.

    Parameters
    ----------
    params : dict
        Decoded JSON body of the request.
    policy : :class:`.domain.RegistrationPolicy`
    ip : str
        Address of the client.
    locale : str
        Preferred locale of the client.
    secret : str
        Used to sign the session token.
    classifier : :class:`.OriginClassifier`
    tasks : :class:`.BackgroundTasks`

    Returns
    -------
    dict
        Response data.
    int
        HTTP status code.
    dict
        Headers to add to the response.

    """
    if not isinstance(params, dict):
        raise BadRequest('Expected a JSON object')

    type_errors = check_types(params)
    form = RegistrationForm(to_formdata(params), policy=policy)
    if not form.validate() or type_errors:
        logger.debug('Registration form not valid')
        errors = form.field_errors()
        errors.update(type_errors)
        return invalid_form_body(errors), status.BAD_REQUEST, {}

    try:
        account = accounts.register(form.to_domain(), policy, ip=ip,
                                    locale=locale, classifier=classifier,
                                    tasks=tasks)
    except ChallengeRequired as e:
        return {'captcha_key': ['captcha-required'],
                'captcha_sitekey': e.sitekey,
                'captcha_service': e.service}, status.BAD_REQUEST, {}
    except RegistrationError as e:
        logger.info('Registration refused: %s', ', '.join(
            f'{field}:{code}' for field in e.fields for code in e.codes(field)
        ))
        return invalid_form_body(e.errors), status.BAD_REQUEST, {}
    except Unavailable as e:
        raise ServiceUnavailable('Please try again later') from e
    except RegistrationFailed as e:
        raise InternalServerError('Registration failed') from e

    return {'token': tokens.encode(account, secret)}, status.OK, {}


def invalid_form_body(errors: Dict[str, List[FieldError]]) -> dict:
    """Render field errors in the body of a 400 response."""
    return {
        'code': INVALID_FORM_BODY,
        'message': 'Invalid Form Body',
        'errors': {
            field: [{'code': e.code, 'message': e.message} for e in errs]
            for field, errs in errors.items()
        }
    }


def check_types(params: Dict[str, Any]) -> Dict[str, List[FieldError]]:
    """
    Check the JSON types of the fields in a registration body.

    WTForms only sees strings, so a value of the wrong type has to be caught
    before the body is flattened. ``null`` is treated as absent.
    """
    errors: Dict[str, List[FieldError]] = {}
    for key, value in params.items():
        if value is None:
            continue
        if key in BOOLEAN_FIELDS and not isinstance(value, bool):
            errors[key] = [FieldError(BASE_TYPE_BOOLEAN,
                                      'Must be either true or false.')]
        elif key in STRING_FIELDS and not isinstance(value, str):
            errors[key] = [FieldError(BASE_TYPE_STRING, 'Must be a string.')]
    return errors


def to_formdata(params: Dict[str, Any]) -> MultiDict:
    """
    Flatten a JSON body into the form data that WTForms expects.

    Only strings and booleans are carried over; anything else is reported
    by :func:`check_types`.
    """
    data = MultiDict()
    for key, value in params.items():
        if isinstance(value, bool):
            data[key] = 'true' if value else 'false'
        elif isinstance(value, str):
            data[key] = value
    return data


class Required:
    """The field must be present and not blank."""

    def __call__(self, form: Form, field: Any) -> None:
        if field.raw_data and str(field.raw_data[0]).strip():
            return
        field.errors[:] = []
        raise validators.StopValidation(
            FieldError(BASE_TYPE_REQUIRED, 'This field is required')
        )


class Length:
    """The length of the field must fall within bounds."""

    def __init__(self, min: int, max: int) -> None:
        self.min = min
        self.max = max

    def __call__(self, form: Form, field: Any) -> None:
        check_length(field.data or '', self.min, self.max)


def check_length(value: str, min: int, max: int) -> None:
    if not min <= len(value) <= max:
        raise validators.ValidationError(FieldError(
            BASE_TYPE_BAD_LENGTH,
            f'Must be between {min} and {max} in length.'
        ))


class RegistrationForm(Form):
    """Account registration form."""

    username = StringField('Username', validators=[Required()])
    password = PasswordField(
        'Password',
        validators=[Required(), Length(PASSWORD_MIN_LENGTH,
                                       PASSWORD_MAX_LENGTH)]
    )
    consent = BooleanField('I agree to the Terms of Service')
    email = StringField(
        'Email address',
        validators=[validators.Optional(),
                    Length(EMAIL_MIN_LENGTH, EMAIL_MAX_LENGTH)]
    )
    fingerprint = StringField(
        'Fingerprint',
        validators=[validators.Optional(), Length(1, FINGERPRINT_MAX_LENGTH)]
    )
    invite = StringField('Invite code', validators=[validators.Optional()])
    date_of_birth = DateField('Date of birth', format='%Y-%m-%d',
                              validators=[validators.Optional()])
    captcha_key = StringField('Captcha', validators=[validators.Optional()])

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        """Grab the registration policy, which sets the username bounds."""
        self.policy = kwargs.pop('policy', None) \
            or domain.RegistrationPolicy()
        super(RegistrationForm, self).__init__(*args, **kwargs)

    def validate_username(self, field: StringField) -> None:
        """Check the length of the username, once sanitized."""
        check_length(canonical.sanitize_username(field.data),
                     self.policy.username_min_length,
                     self.policy.username_max_length)

    def validate_password(self, field: PasswordField) -> None:
        """bcrypt counts bytes, not characters."""
        if len(field.data.encode('utf-8')) > PASSWORD_MAX_LENGTH:
            raise validators.ValidationError(FieldError(
                BASE_TYPE_BAD_LENGTH,
                f'Must be between {PASSWORD_MIN_LENGTH} and'
                f' {PASSWORD_MAX_LENGTH} in length.'
            ))

    def validate_email(self, field: StringField) -> None:
        """Check the address against the e-mail grammar."""
        if not canonical.is_valid_email(field.data):
            raise validators.ValidationError(FieldError(
                EMAIL_TYPE_INVALID_EMAIL, 'Not a well formed email address.'
            ))

    def field_errors(self) -> Dict[str, List[FieldError]]:
        """Get the errors of each field, as :class:`.FieldError`."""
        return {
            name: [e if isinstance(e, FieldError)
                   else FieldError(BASE_TYPE_INVALID, str(e))
                   for e in errors]
            for name, errors in self.errors.items() if errors
        }

    def to_domain(self) -> domain.Registration:
        """Generate a :class:`.Registration` from this form's data."""
        return domain.Registration(
            username=self.username.data,
            password=self.password.data,
            consent=bool(self.consent.data),
            email=self.email.data or None,
            fingerprint=self.fingerprint.data or None,
            invite=self.invite.data or None,
            date_of_birth=self.date_of_birth.data,
            captcha_key=self.captcha_key.data or None,
        )
