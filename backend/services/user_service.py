# services/user_service.py
import logging
from sqlalchemy.orm import Session

from database import upsert
from models import User

logger = logging.getLogger(__name__)


def upsert_user(db: Session, user_id: int, username: str) -> None:
    # 로그인할 때마다 호출: 계정 ID 기준으로 한 행, 사용자명은 최신값으로 갱신
    upsert(db, User, {"user_id": int(user_id), "username": username}, keys=["user_id"])
    db.commit()
    logger.info("[User:upsert] id=%s username=%s", user_id, username)
