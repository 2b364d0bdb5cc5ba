import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from slotbook.base.models import ConnectedAccount, Interview
from slotbook.store.base import InterviewStore


class InMemoryInterviewStore(InterviewStore):
    def __init__(self):
        self.accounts: Dict[Tuple[str, str], ConnectedAccount] = {}
        self.interviews: Dict[str, Interview] = {}

    def connect_account(self, user_id: str, email: str, provider: str = "google") -> ConnectedAccount:
        account = ConnectedAccount(user_id=user_id, provider=provider, email=email)
        self.accounts[(user_id, provider)] = account
        return account

    async def get_connected_account(self, user_id: str, provider: str) -> Optional[ConnectedAccount]:
        return self.accounts.get((user_id, provider))

    async def create_interview(self, fields: Dict[str, Any]) -> Interview:
        now = datetime.now(timezone.utc)
        interview = Interview(id=str(uuid.uuid4()), created_at=now, updated_at=now, **fields)
        self.interviews[interview.id] = interview
        return interview.model_copy()

    async def get_interview(self, interview_id: str) -> Optional[Interview]:
        interview = self.interviews.get(interview_id)
        return interview.model_copy() if interview else None

    async def update_interview(self, interview_id: str, fields: Dict[str, Any]) -> Optional[Interview]:
        interview = self.interviews.get(interview_id)
        if interview is None:
            return None
        updated = interview.model_copy(update={**fields, "updated_at": datetime.now(timezone.utc)})
        self.interviews[interview_id] = updated
        return updated.model_copy()
