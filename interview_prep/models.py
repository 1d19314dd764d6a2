# interview_prep/models.py
from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean
import datetime

from interview_prep.db import Base


class PracticeSession(Base):
    __tablename__ = "practice_sessions"

    id = Column(String(64), primary_key=True, index=True)
    user_id = Column(String(128), index=True, nullable=False)
    role = Column(String(256), nullable=False)
    experience = Column(String(128), nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None))
    questions_json = Column(Text, nullable=True)
    timer_seconds = Column(Integer, default=0)
    timer_running = Column(Boolean, default=False)
