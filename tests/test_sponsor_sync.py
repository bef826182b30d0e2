"""
Tests for sponsorship synchronization.

Covers the reconciliation rules in core.services.sponsor_service and the
Celery tasks that drive them.
"""

from datetime import timedelta

import pytest
from sqlalchemy.orm import Session

from core.api.github_api import BadCredentialsError, GitHubAPIError
from core.events import UserStartedSponsoring, UserStoppedSponsoring
from core.models import Sponsor, User
from core.models.base import as_utc, utcnow
from core.services import SyncResult, is_github_sponsor, synchronize_sponsor_status
from core.services import sponsor_service
from workers.tasks import sponsor_tasks


@pytest.fixture
def github_sponsorship(monkeypatch):
    """Control what GitHub answers; records the (token, login) pairs asked about."""
    state = {"sponsoring": False, "error": None, "calls": []}

    def fake_is_sponsoring(access_token, sponsor_login, sponsorable_login=None):  # noqa: ARG001
        state["calls"].append((access_token, sponsor_login))
        if state["error"] is not None:
            raise state["error"]
        return state["sponsoring"]

    monkeypatch.setattr(sponsor_service, "is_sponsoring", fake_is_sponsoring)
    return state


def _sync(session, user_id, event_bus):
    user = session.get(User, user_id)
    result = synchronize_sponsor_status(session, user, event_bus)
    session.commit()
    return result, user


class TestIsGithubSponsor:
    def test_asks_github_with_the_users_token(self, test_session, make_user, github_sponsorship, github_identity):
        user = test_session.get(User, make_user().id)
        github_sponsorship["sponsoring"] = True

        assert is_github_sponsor(test_session, user) is True
        assert github_sponsorship["calls"] == [(github_identity["token"], github_identity["login"])]

    def test_users_without_a_token_are_not_sponsors(self, test_session, make_user, github_sponsorship):
        user = test_session.get(User, make_user(github_api_access_token=None).id)
        github_sponsorship["sponsoring"] = True

        assert is_github_sponsor(test_session, user) is False
        assert github_sponsorship["calls"] == []

    def test_bad_credentials_count_as_not_sponsoring(self, test_session, make_user, github_sponsorship):
        user = test_session.get(User, make_user().id)
        github_sponsorship["error"] = BadCredentialsError("Bad credentials", status_code=401)

        assert is_github_sponsor(test_session, user) is False

    def test_other_api_failures_propagate(self, test_session, make_user, github_sponsorship):
        user = test_session.get(User, make_user().id)
        github_sponsorship["error"] = GitHubAPIError("Server Error", status_code=502)

        with pytest.raises(GitHubAPIError):
            is_github_sponsor(test_session, user)


class TestSynchronizeSponsorStatus:
    def test_new_sponsor_is_recorded_and_linked(self, test_session, make_user, github_sponsorship, event_bus):
        user_id = make_user().id
        github_sponsorship["sponsoring"] = True

        result, user = _sync(test_session, user_id, event_bus)

        assert result is SyncResult.STARTED
        sponsor = test_session.query(Sponsor).one()
        assert sponsor.github_api_id == user.github_api_id
        assert sponsor.expires_at is None
        assert user.sponsor_id == sponsor.id

        events = event_bus.of_type(UserStartedSponsoring)
        assert len(events) == 1
        assert events[0].user_id == user_id
        assert events[0].sponsor_id == sponsor.id
        assert event_bus.of_type(UserStoppedSponsoring) == []

    def test_expired_sponsor_is_renewed(self, test_session, make_user, github_sponsorship, event_bus):
        user_id = make_user(with_sponsor=True, sponsor_expires_at=utcnow() - timedelta(days=3)).id
        github_sponsorship["sponsoring"] = True

        result, user = _sync(test_session, user_id, event_bus)

        assert result is SyncResult.STARTED
        assert test_session.query(Sponsor).count() == 1
        sponsor = test_session.query(Sponsor).one()
        assert sponsor.expires_at is None
        assert sponsor.is_active
        assert user.sponsor_id == sponsor.id
        assert len(event_bus.of_type(UserStartedSponsoring)) == 1

    def test_active_sponsor_that_keeps_sponsoring_is_unchanged(
        self, test_session, make_user, github_sponsorship, event_bus
    ):
        user_id = make_user(with_sponsor=True).id
        github_sponsorship["sponsoring"] = True

        result, _ = _sync(test_session, user_id, event_bus)

        assert result is SyncResult.UNCHANGED
        assert test_session.query(Sponsor).one().expires_at is None
        assert event_bus.published == []

    def test_sponsor_with_future_expiry_that_keeps_sponsoring_is_unchanged(
        self, test_session, make_user, github_sponsorship, event_bus
    ):
        expires_at = utcnow() + timedelta(days=10)
        user_id = make_user(with_sponsor=True, sponsor_expires_at=expires_at).id
        github_sponsorship["sponsoring"] = True

        result, _ = _sync(test_session, user_id, event_bus)

        assert result is SyncResult.UNCHANGED
        assert event_bus.published == []

    def test_active_sponsor_that_stopped_is_expired(self, test_session, make_user, github_sponsorship, event_bus):
        user_id = make_user(with_sponsor=True).id
        github_sponsorship["sponsoring"] = False
        before = utcnow()

        result, user = _sync(test_session, user_id, event_bus)

        assert result is SyncResult.STOPPED
        sponsor = test_session.query(Sponsor).one()
        assert sponsor.has_expired
        assert before <= as_utc(sponsor.expires_at) <= utcnow()
        # The link is kept so a renewal reuses the record
        assert user.sponsor_id == sponsor.id

        events = event_bus.of_type(UserStoppedSponsoring)
        assert len(events) == 1
        assert events[0].user_id == user_id
        assert events[0].sponsor_id == sponsor.id

    def test_already_expired_sponsor_is_stopped_again(
        self, test_session, make_user, github_sponsorship, event_bus
    ):
        expired_at = utcnow() - timedelta(days=3)
        user_id = make_user(with_sponsor=True, sponsor_expires_at=expired_at).id
        github_sponsorship["sponsoring"] = False
        before = utcnow()

        result, _ = _sync(test_session, user_id, event_bus)

        assert result is SyncResult.STOPPED
        sponsor = test_session.query(Sponsor).one()
        assert before <= as_utc(sponsor.expires_at) <= utcnow()

        events = event_bus.of_type(UserStoppedSponsoring)
        assert len(events) == 1
        assert events[0].user_id == user_id
        assert events[0].sponsor_id == sponsor.id
        assert event_bus.of_type(UserStartedSponsoring) == []

    def test_non_sponsor_without_record_creates_nothing(
        self, test_session, make_user, github_sponsorship, event_bus
    ):
        user_id = make_user().id
        github_sponsorship["sponsoring"] = False

        result, user = _sync(test_session, user_id, event_bus)

        assert result is SyncResult.UNCHANGED
        assert test_session.query(Sponsor).count() == 0
        assert user.sponsor_id is None
        assert event_bus.published == []

    def test_revoked_token_stops_an_active_sponsorship(
        self, test_session, make_user, github_sponsorship, event_bus
    ):
        user_id = make_user(with_sponsor=True).id
        github_sponsorship["error"] = BadCredentialsError("Bad credentials", status_code=401)

        result, _ = _sync(test_session, user_id, event_bus)

        assert result is SyncResult.STOPPED
        assert len(event_bus.of_type(UserStoppedSponsoring)) == 1

    def test_api_failure_changes_nothing(self, test_session, make_user, github_sponsorship, event_bus):
        user_id = make_user(with_sponsor=True).id
        github_sponsorship["error"] = GitHubAPIError("Server Error", status_code=502)
        user = test_session.get(User, user_id)

        with pytest.raises(GitHubAPIError):
            synchronize_sponsor_status(test_session, user, event_bus)

        assert test_session.query(Sponsor).one().expires_at is None
        assert event_bus.published == []

    def test_sync_is_idempotent(self, test_session, make_user, github_sponsorship, event_bus):
        user_id = make_user().id
        github_sponsorship["sponsoring"] = True

        first, _ = _sync(test_session, user_id, event_bus)
        second, _ = _sync(test_session, user_id, event_bus)

        assert first is SyncResult.STARTED
        assert second is SyncResult.UNCHANGED
        assert test_session.query(Sponsor).count() == 1
        assert len(event_bus.published) == 1


class TestSponsorTasks:
    @pytest.fixture(autouse=True)
    def _task_event_bus(self, monkeypatch, event_bus):
        monkeypatch.setattr(sponsor_tasks, "get_event_bus", lambda: event_bus)

    def test_task_synchronizes_and_commits(self, test_db, make_user, github_sponsorship, event_bus):
        _, TestingSessionLocal, _ = test_db
        user_id = make_user().id
        github_sponsorship["sponsoring"] = True

        result = sponsor_tasks.synchronize_sponsor_status_task(user_id)

        assert result == {"user_id": user_id, "status": "started"}
        session = TestingSessionLocal()
        try:
            user = session.get(User, user_id)
            assert user.sponsor_id is not None
            assert session.query(Sponsor).count() == 1
        finally:
            session.close()
        assert len(event_bus.of_type(UserStartedSponsoring)) == 1

    def test_task_reports_missing_users(self, test_db, github_sponsorship):
        result = sponsor_tasks.synchronize_sponsor_status_task(4242)

        assert result == {"user_id": 4242, "status": "user_not_found"}
        assert github_sponsorship["calls"] == []

    def test_task_surfaces_api_failures_for_retry(self, test_db, make_user, github_sponsorship, event_bus):
        user_id = make_user(with_sponsor=True).id
        github_sponsorship["error"] = GitHubAPIError("Server Error", status_code=502)

        # Called directly (outside a worker) Celery's retry re-raises the cause
        with pytest.raises(GitHubAPIError):
            sponsor_tasks.synchronize_sponsor_status_task(user_id)

        assert event_bus.published == []

    def test_task_publishes_nothing_when_the_commit_fails(
        self, monkeypatch, test_db, make_user, github_sponsorship, event_bus
    ):
        _, TestingSessionLocal, _ = test_db
        user_id = make_user().id
        github_sponsorship["sponsoring"] = True

        def failing_commit(session):
            raise RuntimeError("database is locked")

        monkeypatch.setattr(Session, "commit", failing_commit)

        with pytest.raises(RuntimeError, match="database is locked"):
            sponsor_tasks.synchronize_sponsor_status_task(user_id)

        assert event_bus.published == []
        session = TestingSessionLocal()
        try:
            assert session.query(Sponsor).count() == 0
            assert session.get(User, user_id).sponsor_id is None
        finally:
            session.close()

    def test_synchronize_all_queues_users_with_credentials(self, monkeypatch, test_db, make_user):
        first = make_user(github_api_id=1, github_api_login="first").id
        second = make_user(github_api_id=2, github_api_login="second").id
        make_user(github_api_id=3, github_api_login="no-token", github_api_access_token=None)
        queued = []

        monkeypatch.setattr(sponsor_tasks.synchronize_sponsor_status_task, "delay", queued.append)

        result = sponsor_tasks.synchronize_all_sponsors_task()

        assert result == {"queued": 2}
        assert queued == [first, second]
