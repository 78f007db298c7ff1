# services/schedule_service.py
import logging
import uuid
from sqlalchemy.orm import Session, joinedload
from sqlalchemy.exc import SQLAlchemyError
from typing import List, Optional, Tuple, Dict, Any
from datetime import datetime

from models import Schedule, Candidate, Availability, Comment, User, ABSENT
from schemas.schedule_schema import ScheduleCreate, NAME_MAX_LENGTH

logger = logging.getLogger(__name__)

UNTITLED = "(제목 없음)"


class ScheduleNotFound(LookupError):
    pass


class CandidateNotFound(LookupError):
    pass


class UserNotFound(LookupError):
    pass


def normalize_name(name: Optional[str]) -> str:
    return (name or "")[:NAME_MAX_LENGTH] or UNTITLED

def parse_candidates(text: Optional[str]) -> List[str]:
    """
    줄바꿈으로 구분된 후보 입력을 후보 이름 목록으로 바꾼다.
    각 줄은 앞뒤 공백(\\r 포함)을 제거하고, 빈 줄은 버린다. 순서는 유지.
    255자를 넘는 줄은 일정 이름과 같이 잘라낸다.

    :param text: 후보 입력 텍스트
    :type text: Optional[str]
    :return: 후보 이름 목록
    :rtype: List[str]
    """

    return [s.strip()[:NAME_MAX_LENGTH] for s in (text or "").split("\n") if s.strip()]

def create_schedule(db: Session, organizer_id: int, payload: ScheduleCreate) -> Schedule:
    """
    일정 1건과 후보 N건을 하나의 트랜잭션으로 저장한다.
    일정 ID는 URL을 추측할 수 없도록 uuid4를 사용함.

    :param organizer_id: 작성자 user_id
    :type organizer_id: int
    :param payload: scheduleName/memo/candidates
    :type payload: ScheduleCreate
    :return: 저장된 일정
    :rtype: Schedule
    :raises SQLAlchemyError: 저장 실패 시(롤백 후 다시 던짐)
    """

    schedule = Schedule(
        schedule_id=str(uuid.uuid4()),
        schedule_name=normalize_name(payload.schedule_name),
        memo=payload.memo or "",
        created_by=int(organizer_id),
        updated_at=datetime.utcnow(),
    )
    names = parse_candidates(payload.candidates)
    try:
        db.add(schedule)
        # 후보 insert 전에 일정 행이 먼저 들어가야 함(FK)
        db.flush()
        db.add_all([Candidate(candidate_name=n, schedule_id=schedule.schedule_id) for n in names])
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("[Schedule:create] failed | organizer=%s", organizer_id)
        raise
    db.refresh(schedule)
    logger.info("[Schedule:create] id=%s | candidates=%d", schedule.schedule_id, len(names))
    return schedule

def get_schedule(db: Session, schedule_id: str) -> Optional[Schedule]:
    # 작성자(user)까지 함께 로드
    return (
        db.query(Schedule)
        .options(joinedload(Schedule.user))
        .filter(Schedule.schedule_id == schedule_id)
        .first()
    )

def list_candidates(db: Session, schedule_id: str) -> List[Candidate]:
    return (
        db.query(Candidate)
        .filter(Candidate.schedule_id == schedule_id)
        .order_by(Candidate.candidate_id.asc())
        .all()
    )

def get_candidate(db: Session, schedule_id: str, candidate_id: int) -> Candidate:
    c = db.query(Candidate).filter(
        Candidate.candidate_id == candidate_id,
        Candidate.schedule_id == schedule_id,
    ).first()
    if not c:
        raise CandidateNotFound(candidate_id)
    return c

def get_user(db: Session, user_id: int) -> User:
    u = db.query(User).filter(User.user_id == user_id).first()
    if not u:
        raise UserNotFound(user_id)
    return u

def list_by_creator(db: Session, user_id: int) -> List[Schedule]:
    return (
        db.query(Schedule)
        .filter(Schedule.created_by == user_id)
        .order_by(Schedule.updated_at.desc())
        .all()
    )

def build_schedule_view(db: Session, schedule_id: str, viewer: Dict[str, Any]) -> Dict[str, Any]:
    """
    일정 화면에 필요한 데이터를 모은다.

    1. 일정(+작성자) 조회, 없으면 ScheduleNotFound
    2. 후보 목록(candidate_id 오름차순 = 표의 열 순서)
    3. 출결 행 + 투표한 사용자
    4. 사용자 목록: 조회자(is_self=True) 먼저, 이어서 출결 행에 등장한 사용자(중복 없음)
    5. (user_id, candidate_id) -> 출결 값 맵
    6. 사용자 x 후보 중 값이 없는 칸은 0(결석)으로 채움. 반드시 5 이후에 수행
    7. user_id -> 코멘트 맵

    :param schedule_id: 일정 ID
    :type schedule_id: str
    :param viewer: 로그인 사용자 {"id", "username"}
    :type viewer: Dict[str, Any]
    :return: {schedule, candidates, users, availability_map, comment_map}
    :rtype: Dict[str, Any]
    :raises ScheduleNotFound: 일정이 없을 때
    """

    schedule = get_schedule(db, schedule_id)
    if not schedule:
        raise ScheduleNotFound(schedule_id)

    candidates = list_candidates(db, schedule_id)
    rows = (
        db.query(Availability, User)
        # users 행이 없는 투표도 빠뜨리지 않도록 outer join
        .outerjoin(User, User.user_id == Availability.user_id)
        .filter(Availability.schedule_id == schedule_id)
        .order_by(Availability.candidate_id.asc())
        .all()
    )

    viewer_id = int(viewer["id"])
    users: Dict[int, Dict[str, Any]] = {
        viewer_id: {"user_id": viewer_id, "username": viewer.get("username", ""), "is_self": True}
    }
    availability_map: Dict[Tuple[int, int], int] = {}
    for a, u in rows:
        if a.user_id not in users:
            users[a.user_id] = {
                "user_id": a.user_id,
                "username": u.username if u else "",
                "is_self": a.user_id == viewer_id,
            }
        availability_map[(a.user_id, a.candidate_id)] = a.availability

    for uid in users:
        for c in candidates:
            availability_map.setdefault((uid, c.candidate_id), ABSENT)

    comment_map: Dict[int, str] = {}
    for cm in db.query(Comment).filter(Comment.schedule_id == schedule_id).all():
        comment_map[cm.user_id] = cm.comment

    return {
        "schedule": schedule,
        "candidates": candidates,
        "users": list(users.values()),
        "availability_map": availability_map,
        "comment_map": comment_map,
    }
