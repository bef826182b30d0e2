"""
Pydantic schemas for request and response validation.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class SponsorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    github_api_id: int
    expires_at: datetime | None = None
    is_active: bool


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    github_api_id: int
    github_api_login: str
    name: str | None = None
    email: str | None = None
    avatar_url: str | None = None
    is_sponsor: bool = False


class AccountResponse(UserResponse):
    sponsor: SponsorResponse | None = None


class SyncQueuedResponse(BaseModel):
    status: str = "queued"
    task_id: str | None = None
