from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from slotbook.base.models import ConnectedAccount, Interview


class InterviewStore(ABC):
    """
    Persistence boundary for interviews and connected calendar accounts.

    Interviews are never deleted; cancellation is a status update.
    """

    @abstractmethod
    async def get_connected_account(self, user_id: str, provider: str) -> Optional[ConnectedAccount]:
        ...

    @abstractmethod
    async def create_interview(self, fields: Dict[str, Any]) -> Interview:
        ...

    @abstractmethod
    async def get_interview(self, interview_id: str) -> Optional[Interview]:
        ...

    @abstractmethod
    async def update_interview(self, interview_id: str, fields: Dict[str, Any]) -> Optional[Interview]:
        """Apply a partial update and return the stored interview."""
