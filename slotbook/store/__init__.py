from .base import InterviewStore
from .memory import InMemoryInterviewStore
from .sql import SqlAlchemyInterviewStore

__all__ = ["InterviewStore", "InMemoryInterviewStore", "SqlAlchemyInterviewStore"]
