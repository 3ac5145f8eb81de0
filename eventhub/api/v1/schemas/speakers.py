from __future__ import annotations

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from eventhub.models.speaker_invitation import InvitationStatus
from eventhub.models.user import SpeakerStatus


class SchemaBase(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra="ignore")


class SpeakerRequestIn(SchemaBase):
    bio: str = Field(min_length=1, max_length=5000)
    topics: list[str] = Field(min_length=1)
    image: str | None = Field(default=None, max_length=500)

    @field_validator("topics")
    @classmethod
    def _clean_topics(cls, value: list[str]) -> list[str]:
        cleaned = [topic.strip() for topic in value if topic and topic.strip()]
        if not cleaned:
            raise ValueError("at least one topic is required")
        return cleaned


class SpeakerOut(SchemaBase):
    id: UUID
    username: str
    email: str
    speaker_status: SpeakerStatus
    speaker_bio: str | None = None
    speaker_topics: list[str] | None = None
    speaker_image: str | None = None
    speaker_request_date: datetime | None = None
    speaker_approval_date: datetime | None = None


class InvitationCreate(SchemaBase):
    speaker_id: UUID
    message: str | None = Field(default=None, max_length=2000)


class InvitationAction(str, Enum):
    ACCEPTED = "accepted"
    DECLINED = "declined"


class InvitationRespondIn(SchemaBase):
    action: str


class InvitationOut(SchemaBase):
    id: UUID
    event_id: UUID
    speaker_id: UUID
    organizer_id: UUID
    status: InvitationStatus
    invitation_date: datetime
    response_date: datetime | None = None
    message: str | None = None
    event_title: str | None = None
    speaker_name: str | None = None
    organizer_name: str | None = None

    @classmethod
    def from_invitation(cls, invitation) -> InvitationOut:
        return cls(
            id=invitation.id,
            event_id=invitation.event_id,
            speaker_id=invitation.speaker_id,
            organizer_id=invitation.organizer_id,
            status=invitation.status,
            invitation_date=invitation.invitation_date,
            response_date=invitation.response_date,
            message=invitation.message,
            event_title=invitation.event.title if invitation.event else None,
            speaker_name=invitation.speaker.username if invitation.speaker else None,
            organizer_name=invitation.organizer.username if invitation.organizer else None,
        )
