"""Automatic community membership for new accounts."""

from typing import Iterable, List, Optional
import logging

from flask import Flask

from . import domain, util
from .models import DBMembership
from .tasks import BackgroundTasks

logger = logging.getLogger(__name__)


def add_member(account_id: str, community_id: str) -> None:
    """Add an account to a community."""
    with util.transaction() as session:
        session.add(DBMembership(account_id=int(account_id),
                                 community_id=community_id,
                                 joined_at=util.to_db(util.now())))


def auto_join(account_id: str, community_ids: Iterable[str]) -> List[str]:
    """
    Add an account to each of the default communities.

    A failure to join one community is logged, and does not prevent joining
    the others.

    Returns
    -------
    list
        Communities that were joined.

    """
    joined = []
    for community_id in community_ids:
        try:
            add_member(account_id, community_id)
        except Exception as e:
            logger.error('[autojoin] %s could not join %s: %s', account_id,
                         community_id, e)
            continue
        joined.append(community_id)
    return joined


def _auto_join_in_context(app: Flask, account_id: str,
                          community_ids: List[str]) -> None:
    with app.app_context():
        auto_join(account_id, community_ids)


def schedule_auto_join(app: Flask, account: domain.Account,
                       policy: domain.RegistrationPolicy,
                       tasks: Optional[BackgroundTasks]) -> None:
    """Join the default communities in the background, if enabled."""
    if not policy.auto_join_enabled or not policy.auto_join_communities:
        return
    if tasks is None:
        logger.warning('No background executor; not auto-joining %s',
                       account.account_id)
        return
    tasks.submit(f'autojoin:{account.account_id}', _auto_join_in_context,
                 app, account.account_id, list(policy.auto_join_communities))
