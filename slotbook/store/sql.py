import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy.orm import sessionmaker

from slotbook.base.models import ConnectedAccount, Interview, InterviewStatus
from slotbook.db.models import ConnectedAccountModel, InterviewModel
from slotbook.db.session import SessionLocal
from slotbook.store.base import InterviewStore

logger = logging.getLogger("booking.sql_store")


def _to_row_values(fields: Dict[str, Any]) -> Dict[str, Any]:
    values = {}
    for key, value in fields.items():
        if isinstance(value, datetime):
            value = value.astimezone(timezone.utc)
        elif isinstance(value, InterviewStatus):
            value = value.value
        values[key] = value
    return values


class SqlAlchemyInterviewStore(InterviewStore):
    """
    SQLAlchemy-backed store. Sessions are synchronous, so each call runs
    in a worker thread with its own short-lived session.
    """

    def __init__(self, session_factory: sessionmaker = SessionLocal):
        self.session_factory = session_factory

    def connect_account(self, user_id: str, email: str, provider: str = "google") -> ConnectedAccount:
        with self.session_factory() as db:
            row = db.query(ConnectedAccountModel).filter_by(user_id=user_id, provider=provider).first()
            if row is None:
                row = ConnectedAccountModel(user_id=user_id, provider=provider, email=email)
                db.add(row)
            else:
                row.email = email
            db.commit()
            return ConnectedAccount.model_validate(row)

    async def get_connected_account(self, user_id: str, provider: str) -> Optional[ConnectedAccount]:
        return await asyncio.to_thread(self._get_connected_account, user_id, provider)

    def _get_connected_account(self, user_id: str, provider: str) -> Optional[ConnectedAccount]:
        with self.session_factory() as db:
            row = db.query(ConnectedAccountModel).filter_by(user_id=user_id, provider=provider).first()
            return ConnectedAccount.model_validate(row) if row else None

    async def create_interview(self, fields: Dict[str, Any]) -> Interview:
        return await asyncio.to_thread(self._create_interview, fields)

    def _create_interview(self, fields: Dict[str, Any]) -> Interview:
        with self.session_factory() as db:
            row = InterviewModel(**_to_row_values(fields))
            db.add(row)
            db.commit()
            db.refresh(row)
            logger.info(f"[Store] Interview {row.id} created")
            return Interview.model_validate(row)

    async def get_interview(self, interview_id: str) -> Optional[Interview]:
        return await asyncio.to_thread(self._get_interview, interview_id)

    def _get_interview(self, interview_id: str) -> Optional[Interview]:
        with self.session_factory() as db:
            row = db.get(InterviewModel, interview_id)
            return Interview.model_validate(row) if row else None

    async def update_interview(self, interview_id: str, fields: Dict[str, Any]) -> Optional[Interview]:
        return await asyncio.to_thread(self._update_interview, interview_id, fields)

    def _update_interview(self, interview_id: str, fields: Dict[str, Any]) -> Optional[Interview]:
        with self.session_factory() as db:
            row = db.get(InterviewModel, interview_id)
            if row is None:
                return None
            for key, value in _to_row_values(fields).items():
                setattr(row, key, value)
            db.commit()
            db.refresh(row)
            return Interview.model_validate(row)
