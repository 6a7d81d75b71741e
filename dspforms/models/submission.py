"""Submission record models."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Column, DateTime, ForeignKey, String
from sqlmodel import Field, SQLModel

from .form import new_id, utcnow


class SubmissionStatus(str, Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class Submission(SQLModel, table=True):
    __tablename__ = "submissions"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    form_id: str = Field(
        sa_column=Column(
            String(36),
            ForeignKey("forms.id", ondelete="CASCADE"),
            index=True,
            nullable=False,
        )
    )
    user_id: Optional[str] = Field(default=None, max_length=64, index=True)
    submitter_name: Optional[str] = Field(default=None, max_length=255)
    submitter_email: Optional[str] = Field(default=None, max_length=255)
    # field id -> str | bool
    data: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    status: str = Field(
        default=SubmissionStatus.PENDING.value,
        max_length=16,
        index=True,
        description="pending|reviewed|approved|rejected",
    )
    submitted_at: datetime = Field(
        default_factory=utcnow, index=True, nullable=False, sa_type=DateTime(timezone=True)
    )


__all__ = ["Submission", "SubmissionStatus"]
