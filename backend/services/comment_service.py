# services/comment_service.py
import logging
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import Dict, Any

from database import upsert
from models import Comment
from services.schedule_service import get_schedule, get_user, ScheduleNotFound

logger = logging.getLogger(__name__)


def set_comment(db: Session, schedule_id: str, user_id: int, comment: str) -> Dict[str, Any]:
    """
    (일정, 사용자)의 코멘트를 저장한다. 사용자당 한 건, 다시 쓰면 덮어씀.
    빈 문자열/255자 초과는 요청 스키마 단계에서 400으로 거절됨.

    :raises ScheduleNotFound: 일정이 없을 때
    :raises UserNotFound: 세션 사용자의 users 행이 없을 때
    :return: {"status": "OK", "comment": 코멘트}
    :rtype: Dict[str, Any]
    """

    if not get_schedule(db, schedule_id):
        raise ScheduleNotFound(schedule_id)
    get_user(db, user_id)
    try:
        upsert(
            db,
            Comment,
            {"schedule_id": schedule_id, "user_id": int(user_id), "comment": comment},
            keys=["schedule_id", "user_id"],
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("[Comment:set] failed | schedule=%s user=%s", schedule_id, user_id)
        raise
    return {"status": "OK", "comment": comment}
