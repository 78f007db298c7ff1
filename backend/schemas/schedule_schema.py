# schemas/schedule_schema.py
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional, List, Dict
from datetime import datetime

# 요청/응답 JSON은 camelCase(scheduleName 등), 파이썬 쪽은 snake_case
_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

NAME_MAX_LENGTH = 255
COMMENT_MAX_LENGTH = 255

class ScheduleCreate(BaseModel):
    model_config = _CAMEL

    # 이름 길이는 검증하지 않고 서비스에서 255자로 자른다
    schedule_name: str = ""
    memo: str = ""
    candidates: str = ""

class AvailabilityIn(BaseModel):
    availability: int = Field(ge=0, le=2)

class AvailabilityOut(BaseModel):
    status: str = "OK"
    availability: int

class CommentIn(BaseModel):
    comment: str = Field(min_length=1, max_length=COMMENT_MAX_LENGTH)

class CommentOut(BaseModel):
    status: str = "OK"
    comment: str

class UserOut(BaseModel):
    model_config = _CAMEL

    user_id: int
    username: str

class ScheduleOut(BaseModel):
    model_config = _CAMEL

    schedule_id: str
    schedule_name: str
    memo: str
    created_by: int
    updated_at: datetime
    user: Optional[UserOut] = None

class CandidateOut(BaseModel):
    model_config = _CAMEL

    candidate_id: int
    candidate_name: str

class ViewUserOut(UserOut):
    is_self: bool = False

class AvailabilityCell(BaseModel):
    model_config = _CAMEL

    user_id: int
    candidate_id: int
    availability: int
    label: str

class ScheduleViewOut(BaseModel):
    """
    /schedules/{scheduleId} 응답 스키마 (사용자 x 후보 출결 표 + 코멘트)
    """
    model_config = _CAMEL

    user: UserOut
    schedule: ScheduleOut
    candidates: List[CandidateOut]
    users: List[ViewUserOut]
    # 사용자 순 -> 후보 순으로 빈 칸 없이 나열
    availabilities: List[AvailabilityCell]
    comments: Dict[str, str]
