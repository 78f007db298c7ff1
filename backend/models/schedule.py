# models/schedule.py
from sqlalchemy import Column, Integer, BigInteger, String, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime

from models.base import Base

class Schedule(Base):
    __tablename__ = "schedules"
    schedule_id = Column(String(36), primary_key=True)  # uuid4 문자열
    schedule_name = Column(String(255), nullable=False)
    memo = Column(Text, nullable=False, default="")
    created_by = Column(BigInteger, ForeignKey("users.user_id"), nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("User")

class Candidate(Base):
    __tablename__ = "candidates"
    candidate_id = Column(Integer, primary_key=True, autoincrement=True)
    candidate_name = Column(String(255), nullable=False)
    schedule_id = Column(String(36), ForeignKey("schedules.schedule_id"), nullable=False, index=True)
