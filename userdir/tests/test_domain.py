"""Tests for :mod:`userdir.domain`."""

from unittest import TestCase
from datetime import date, datetime

from pytz import UTC

from .. import domain
from ..flags import DEFAULT_RIGHTS, UserFlags


def _account(**kwargs):
    data = dict(account_id='175928847299117063', username='alice',
                discriminator='0421',
                created_at=datetime(2024, 6, 1, 12, tzinfo=UTC),
                settings=domain.Settings(), email='alice@example.com',
                flags=UserFlags('SYSTEM'), rights=DEFAULT_RIGHTS)
    data.update(kwargs)
    return domain.Account(**data)


class TestProjections(TestCase):
    """Tests for :func:`domain.to_public` and :func:`domain.to_private`."""

    def test_public(self):
        """The public view leaves out anything private."""
        public = domain.to_public(_account())
        self.assertEqual(public.username, 'alice')
        self.assertEqual(public.discriminator, '0421')
        self.assertNotIn('email', public._fields)
        self.assertNotIn('rights', public._fields)

    def test_private(self):
        """The owner also sees their e-mail address and settings."""
        private = domain.to_private(_account())
        self.assertEqual(private.email, 'alice@example.com')
        self.assertEqual(private.flags, str(1 << 12))
        self.assertEqual(private.locale, 'en-US')
        self.assertEqual(private[:7], tuple(domain.to_public(_account())))


class TestAccountDefaults(TestCase):
    """Accounts built without optional collections."""

    def test_defaults_not_shared(self):
        first, second = _account(), _account()
        self.assertEqual(first.fingerprints, ())
        self.assertIsNone(first.extended_settings)
        self.assertEqual(first.fingerprints, second.fingerprints)
        self.assertEqual(domain.to_dict(first)['fingerprints'], [])


class TestToDict(TestCase):
    """Tests for :func:`domain.to_dict`."""

    def test_account(self):
        data = domain.to_dict(_account())
        self.assertEqual(data['created_at'], '2024-06-01T12:00:00+00:00')
        self.assertEqual(data['rights'], '874722686401536')
        self.assertEqual(data['settings']['theme'], 'dark')

    def test_registration(self):
        registration = domain.Registration(
            username='alice', password='x' * 8, consent=True,
            date_of_birth=date(2000, 1, 2)
        )
        self.assertEqual(domain.to_dict(registration)['date_of_birth'],
                         '2000-01-02')


class TestRegistrationPolicy(TestCase):
    """Tests for :meth:`domain.RegistrationPolicy.from_config`."""

    def test_defaults(self):
        policy = domain.RegistrationPolicy.from_config({})
        self.assertTrue(policy.allow_new_registration)
        self.assertFalse(policy.captcha_required)
        self.assertEqual(policy.auto_join_communities, ())

    def test_strings(self):
        """Values from the environment arrive as strings."""
        policy = domain.RegistrationPolicy.from_config({
            'ALLOW_NEW_REGISTRATION': '0',
            'REQUIRE_CAPTCHA': 'true',
            'CAPTCHA_ENABLED': '1',
            'DATE_OF_BIRTH_MINIMUM': '13',
            'AUTO_JOIN_COMMUNITIES': 'general, help',
        })
        self.assertFalse(policy.allow_new_registration)
        self.assertTrue(policy.captcha_required)
        self.assertEqual(policy.minimum_age, 13)
        self.assertEqual(policy.auto_join_communities, ('general', 'help'))
