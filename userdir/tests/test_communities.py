"""Tests for :mod:`userdir.communities`."""

from unittest import TestCase, mock

from flask import current_app

from .. import accounts, communities, domain
from ..models import DBMembership
from .util import temporary_db


class TestAutoJoin(TestCase):
    """Tests for :func:`communities.auto_join`."""

    def test_joins_each_community(self):
        with temporary_db() as session:
            account = accounts.create_account('alice', '0042')
            joined = communities.auto_join(account.account_id,
                                           ['general', 'help'])
            self.assertEqual(joined, ['general', 'help'])
            self.assertEqual(session.query(DBMembership).count(), 2)

    def test_failure_does_not_stop_others(self):
        """A community that cannot be joined is skipped."""
        with temporary_db() as session:
            account = accounts.create_account('alice', '0042')
            communities.add_member(account.account_id, 'general')

            with self.assertLogs('userdir.communities', level='ERROR'):
                joined = communities.auto_join(account.account_id,
                                               ['general', 'help'])
            self.assertEqual(joined, ['help'])
            self.assertEqual(session.query(DBMembership).count(), 2)


class TestScheduleAutoJoin(TestCase):
    """Tests for :func:`communities.schedule_auto_join`."""

    def setUp(self):
        self.account = mock.MagicMock(account_id='1234')
        self.policy = domain.RegistrationPolicy(
            auto_join_enabled=True,
            auto_join_communities=('general', 'help')
        )

    def test_submitted(self):
        """Joining happens in the background, in an application context."""
        tasks = mock.MagicMock()
        with temporary_db():
            app = current_app._get_current_object()
            communities.schedule_auto_join(app, self.account, self.policy,
                                           tasks)
        tasks.submit.assert_called_once_with(
            'autojoin:1234', communities._auto_join_in_context, app, '1234',
            ['general', 'help']
        )

    def test_disabled(self):
        tasks = mock.MagicMock()
        policy = self.policy._replace(auto_join_enabled=False)
        communities.schedule_auto_join(mock.MagicMock(), self.account, policy,
                                       tasks)
        self.assertFalse(tasks.submit.called)

    def test_no_executor(self):
        """Without an executor, nothing is scheduled."""
        with self.assertLogs('userdir.communities', level='WARNING'):
            communities.schedule_auto_join(mock.MagicMock(), self.account,
                                           self.policy, None)
