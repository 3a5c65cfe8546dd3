"""Request models for the HTTP API."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class MarkUnsubscribedRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    # Required-field checks happen in ActionRecorder so missing values yield
    # the same error everywhere.
    email_id: Optional[str] = None
    unsubscribe_url: Optional[str] = None
    should_archive: bool = False


class CurrentUserResponse(BaseModel):
    id: str
    email: Optional[str] = None


class LogoutResponse(BaseModel):
    message: str = Field(default="Logged out successfully")


class HealthResponse(BaseModel):
    status: str = "ok"
