"""
Account pages for signed-in users.

Security:
- /account is a page route: guests are sent through the GitHub login and
  brought back here afterwards
- The sync endpoint is an API route and answers 401 to guests
"""

from fastapi import APIRouter, Depends, status

from core.logging import get_logger

from ..auth.dependencies import get_current_user, require_browser_user
from ..models import User
from ..schemas import AccountResponse, SyncQueuedResponse

logger = get_logger("account")

router = APIRouter(prefix="/account", tags=["account"])


@router.get("", response_model=AccountResponse)
def show_account(user: User = Depends(require_browser_user)) -> User:
    """The signed-in user with their sponsorship state."""
    return user


@router.post(
    "/sponsorship/sync",
    response_model=SyncQueuedResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
def sync_sponsorship(user: User = Depends(get_current_user)) -> SyncQueuedResponse:
    """Queue a sponsorship re-check, e.g. right after sponsoring on GitHub."""
    from workers.tasks.sponsor_tasks import synchronize_sponsor_status_task

    result = synchronize_sponsor_status_task.delay(user.id)
    logger.info("sponsor_sync_requested", user_id=user.id, task_id=result.id)
    return SyncQueuedResponse(task_id=result.id)
