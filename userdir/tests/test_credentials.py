"""Tests for :mod:`userdir.passwords` and :mod:`userdir.tokens`."""

from unittest import TestCase, mock
from datetime import datetime
import string

from hypothesis import given, settings
from hypothesis import strategies as st
from pytz import UTC

from .. import passwords, tokens
from ..tokens import InvalidToken


class TestCheckPassword(TestCase):
    """Tests passwords."""

    def setUp(self):
        self.rounds = mock.patch.object(passwords, 'ROUNDS', 4)
        self.rounds.start()

    def tearDown(self):
        self.rounds.stop()

    @given(st.text(alphabet=string.printable, min_size=8, max_size=72))
    @settings(max_examples=50, deadline=None)
    def test_check_passwords_successful(self, passw):
        encrypted = passwords.hash_password(passw)
        self.assertTrue(passwords.check_password(passw, encrypted),
                        f"should work for password '{passw}'")

    def test_wrong_password(self):
        encrypted = passwords.hash_password('correct horse')
        self.assertFalse(passwords.check_password('battery staple',
                                                  encrypted))

    def test_not_a_hash(self):
        self.assertFalse(passwords.check_password('anything', 'plaintext'))

    def test_cost_factor(self):
        """The cost factor is stored in the hash."""
        self.rounds.stop()
        try:
            self.assertTrue(
                passwords.hash_password('hunter2hunter2').startswith('$2b$12$')
            )
        finally:
            self.rounds.start()


class TestTokens(TestCase):
    """Tests for :mod:`userdir.tokens`."""

    def setUp(self):
        self.account = mock.MagicMock(account_id='175928847299117063')

    def test_round_trip(self):
        issued = datetime(2024, 6, 1, 12, tzinfo=UTC)
        token = tokens.encode(self.account, 'foosecret', issued_at=issued)
        claims = tokens.decode(token, 'foosecret')
        self.assertEqual(claims['id'], '175928847299117063')
        self.assertEqual(claims['iat'], int(issued.timestamp()))

    def test_wrong_secret(self):
        token = tokens.encode(self.account, 'foosecret')
        with self.assertRaises(InvalidToken):
            tokens.decode(token, 'othersecret')

    def test_garbage(self):
        with self.assertRaises(InvalidToken):
            tokens.decode('not.a.token', 'foosecret')
