# models/availability.py
from sqlalchemy import Column, Integer, BigInteger, String, ForeignKey

from models.base import Base

# 출결 값
ABSENT = 0
MAYBE = 1
PRESENT = 2

class Availability(Base):
    __tablename__ = "availabilities"
    # (일정, 사용자, 후보) 당 한 행만 존재
    schedule_id = Column(String(36), ForeignKey("schedules.schedule_id"), primary_key=True)
    user_id = Column(BigInteger, ForeignKey("users.user_id"), primary_key=True)
    candidate_id = Column(Integer, ForeignKey("candidates.candidate_id"), primary_key=True)
    availability = Column(Integer, nullable=False, default=ABSENT)
