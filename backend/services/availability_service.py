# services/availability_service.py
import logging
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import Dict, Any

from database import upsert
from models import Availability
from services.schedule_service import get_candidate, get_user

logger = logging.getLogger(__name__)


def set_availability(
    db: Session,
    schedule_id: str,
    user_id: int,
    candidate_id: int,
    availability: int,
) -> Dict[str, Any]:
    """
    (일정, 사용자, 후보)의 출결을 저장한다. 이미 있으면 덮어씀.
    값의 범위(0/1/2)는 요청 스키마에서 검증됨.

    :raises CandidateNotFound: 후보가 해당 일정에 속하지 않을 때
    :raises UserNotFound: 세션 사용자의 users 행이 없을 때
    :return: {"status": "OK", "availability": 값}
    :rtype: Dict[str, Any]
    """

    get_candidate(db, schedule_id, candidate_id)
    get_user(db, user_id)
    try:
        upsert(
            db,
            Availability,
            {
                "schedule_id": schedule_id,
                "user_id": int(user_id),
                "candidate_id": int(candidate_id),
                "availability": int(availability),
            },
            keys=["schedule_id", "user_id", "candidate_id"],
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("[Availability:set] failed | schedule=%s user=%s candidate=%s",
                         schedule_id, user_id, candidate_id)
        raise

    logger.debug("[Availability:set] schedule=%s user=%s candidate=%s -> %s",
                 schedule_id, user_id, candidate_id, availability)
    return {"status": "OK", "availability": int(availability)}
