# models/user.py
from sqlalchemy import Column, BigInteger, String

from models.base import Base

class User(Base):
    __tablename__ = "users"
    # OAuth 제공자(GitHub)의 숫자 계정 ID를 그대로 사용
    user_id = Column(BigInteger, primary_key=True, autoincrement=False)
    username = Column(String(255), nullable=False)
