"""
Sponsorship reconciliation.

Mirrors a user's GitHub Sponsors status into the local Sponsor table and
announces transitions as domain events.
"""

from enum import Enum

from sqlalchemy.orm import Session

from core.api.github_api import BadCredentialsError, is_sponsoring
from core.events import EventBus, UserStartedSponsoring, UserStoppedSponsoring
from core.logging import get_logger
from core.models import User
from core.models.base import utcnow
from core.repositories import SponsorRepository, UserRepository

logger = get_logger("service.sponsor")


class SyncResult(str, Enum):
    STARTED = "started"
    STOPPED = "stopped"
    UNCHANGED = "unchanged"


def is_github_sponsor(session: Session, user: User) -> bool:
    """
    Ask GitHub whether the user sponsors the configured account.

    A revoked or expired token counts as "not a sponsor". Any other API
    failure propagates so the job can be retried.
    """
    token = UserRepository(session).get_decrypted_token(user)
    if not token:
        logger.info("sponsor_check_skipped", user_id=user.id, reason="no_access_token")
        return False

    try:
        return is_sponsoring(token, user.github_api_login)
    except BadCredentialsError:
        logger.info("sponsor_check_bad_credentials", user_id=user.id)
        return False


def synchronize_sponsor_status(session: Session, user: User, event_bus: EventBus) -> SyncResult:
    """
    Reconcile the user's local sponsor record with GitHub.

    - sponsoring on GitHub, no local record or an expired one: (re)activate it,
      link it to the user, publish UserStartedSponsoring
    - not sponsoring but a local record exists: expire it now (an already
      expired record is re-stamped), publish UserStoppedSponsoring
    - anything else: no change

    Events are published after the changes are flushed. The caller owns the
    transaction; pass a BufferedEventBus to announce them only once it
    commits.
    """
    github_sponsor = is_github_sponsor(session, user)

    sponsors = SponsorRepository(session)
    sponsor, exists = sponsors.first_or_new(github_api_id=user.github_api_id)

    if github_sponsor and (not exists or sponsor.has_expired):
        sponsor.expires_at = None
        sponsors.save(sponsor)

        user.sponsor_id = sponsor.id
        UserRepository(session).save(user)

        logger.info("sponsor_started", user_id=user.id, sponsor_id=sponsor.id, renewed=exists)
        event_bus.publish(UserStartedSponsoring(user_id=user.id, sponsor_id=sponsor.id))
        return SyncResult.STARTED

    if exists and not github_sponsor:
        sponsor.expires_at = utcnow()
        sponsors.save(sponsor)

        logger.info("sponsor_stopped", user_id=user.id, sponsor_id=sponsor.id)
        event_bus.publish(UserStoppedSponsoring(user_id=user.id, sponsor_id=sponsor.id))
        return SyncResult.STOPPED

    logger.debug("sponsor_unchanged", user_id=user.id, github_sponsor=github_sponsor, exists=exists)
    return SyncResult.UNCHANGED
