# models 패키지: 테이블 전체를 Base.metadata에 등록하기 위해 모든 모델을 import 함
from models.base import Base
from models.user import User
from models.schedule import Schedule, Candidate
from models.availability import Availability, ABSENT, MAYBE, PRESENT
from models.comment import Comment

__all__ = [
    "Base",
    "User",
    "Schedule",
    "Candidate",
    "Availability",
    "Comment",
    "ABSENT",
    "MAYBE",
    "PRESENT",
]
