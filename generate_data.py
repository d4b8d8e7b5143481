"""Generate synthetic accounts for testing and development purposes."""

import logging
import random

from mimesis import Datetime, Internet, Person
from mimesis.locales import Locale

from userdir import accounts, domain
from userdir.exceptions import RegistrationError
from userdir.factory import create_web_app
from userdir.models import DBAccount, db

LOCALES = list(Locale)
COUNT = 500

logger = logging.getLogger(__name__)


def _get_locale() -> Locale:
    return LOCALES[random.randint(0, len(LOCALES) - 1)]


app = create_web_app({
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///test.db',
    'CREATE_DB': True,
    'DATE_OF_BIRTH_MINIMUM': 0,
})
policy = app.extensions['userdir']['policy']

with app.app_context():
    created = 0
    for i in range(COUNT):
        locale = _get_locale()
        person = Person(locale)
        net = Internet()
        registration = domain.Registration(
            username=person.username()[:32],
            password=person.password(length=12),
            consent=True,
            email=person.email(unique=True),
            fingerprint=f'{random.getrandbits(64)}.{net.ip_v4()}',
            date_of_birth=Datetime(locale).date(start=1950, end=2008),
        )
        try:
            accounts.register(registration, policy, ip=net.ip_v4(),
                              locale=locale.value)
        except RegistrationError as e:
            logger.info('Skipped %s: %s', registration.username, e)
            continue
        created += 1

    # Some accounts are deleted, to exercise reuse of their identity.
    for account_id in random.sample(
            [str(row.account_id) for row in
             db.session.query(DBAccount.account_id)],
            k=created // 50):
        accounts.soft_delete(account_id)

    accounts.create_system_account('System')
    print(f'Created {created} accounts')

app.extensions['userdir']['tasks'].shutdown()
