# models/comment.py
from sqlalchemy import Column, BigInteger, String, ForeignKey

from models.base import Base

class Comment(Base):
    __tablename__ = "comments"
    # (일정, 사용자) 당 코멘트 하나
    schedule_id = Column(String(36), ForeignKey("schedules.schedule_id"), primary_key=True)
    user_id = Column(BigInteger, ForeignKey("users.user_id"), primary_key=True)
    comment = Column(String(255), nullable=False)
