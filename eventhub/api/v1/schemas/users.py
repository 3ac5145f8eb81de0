from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from eventhub.models.user import SpeakerStatus, UserRole


class SchemaBase(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra="ignore")


class UserOut(SchemaBase):
    id: UUID
    username: str
    email: str
    role: UserRole
    speaker_status: SpeakerStatus
    speaker_bio: str | None = None
    speaker_topics: list[str] | None = None
    speaker_image: str | None = None
    speaker_request_date: datetime | None = None
    speaker_approval_date: datetime | None = None
    created_at: datetime


class UserSummaryOut(SchemaBase):
    id: UUID
    username: str
    email: str
    role: UserRole


class PublicProfileOut(SchemaBase):
    id: UUID
    username: str
    speaker_status: SpeakerStatus
    speaker_bio: str | None = None
    speaker_topics: list[str] | None = None
    speaker_image: str | None = None


class UserUpdate(SchemaBase):
    username: str | None = Field(default=None, min_length=1, max_length=100)
    email: EmailStr | None = None
