# slotbook/db/models.py

import uuid

from sqlalchemy import Boolean, Column, DateTime, String, Text, UniqueConstraint
from sqlalchemy.sql import func

from slotbook.db.session import Base


class InterviewModel(Base):
    __tablename__ = "interviews"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    organization_id = Column(String, nullable=False, index=True)
    job_id = Column(String, nullable=True)
    pool_id = Column(String, nullable=True)
    candidate_name = Column(String, nullable=False)
    candidate_email = Column(String, nullable=False)
    candidate_phone = Column(String, nullable=True)
    interviewer_user_id = Column(String, nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    start_time = Column(DateTime(timezone=True), nullable=False)  # stored in UTC
    end_time = Column(DateTime(timezone=True), nullable=False)
    timezone = Column(String, default="Africa/Johannesburg")
    provider = Column(String, nullable=False)  # google, memory
    provider_event_id = Column(String, nullable=True)
    meeting_join_url = Column(String, nullable=True)
    location = Column(String, nullable=True)
    status = Column(String, default="scheduled", index=True)  # scheduled, rescheduled, cancelled
    reminder_sent = Column(Boolean, default=False)
    feedback = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<Interview {self.id} - {self.status} @ {self.start_time}>"


class ConnectedAccountModel(Base):
    __tablename__ = "connected_accounts"
    __table_args__ = (UniqueConstraint("user_id", "provider", name="uq_connected_account_user_provider"),)

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, index=True)
    provider = Column(String, nullable=False)
    email = Column(String, nullable=False)
