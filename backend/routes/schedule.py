# 일정(스케줄) 관련 라우터. 일정 생성/조회와 출결/코멘트 저장을 처리함.
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from database import get_db
from routes.auth import get_current_user
from routes.schedule_render import _pack_view, AVAILABILITY_LABELS
from schemas.schedule_schema import (
    AvailabilityIn,
    AvailabilityOut,
    CommentIn,
    CommentOut,
    ScheduleCreate,
    ScheduleViewOut,
    NAME_MAX_LENGTH,
    COMMENT_MAX_LENGTH,
)
from services import schedule_service
from services.schedule_service import ScheduleNotFound, CandidateNotFound, UserNotFound
from services.availability_service import set_availability
from services.comment_service import set_comment

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/schedules", tags=["schedules"])

SCHEDULE_NOT_FOUND = "지정된 일정을 찾을 수 없습니다."
STALE_LOGIN = "로그인 정보가 유효하지 않습니다. 다시 로그인해 주세요."


# 헬퍼
def _must_be_self(user: Dict[str, Any], user_id: int):
    """
    경로의 userId가 로그인 사용자와 같은지 확인함. 다른 사람의 출결/코멘트는 쓸 수 없음.

    :raises HTTPException: 다르면 403
    """
    if int(user["id"]) != user_id:
        raise HTTPException(status_code=403, detail="다른 사용자의 응답은 변경할 수 없습니다.")


def _stale_login(request: Request):
    """
    세션에는 있지만 users 행이 없는 사용자(DB 초기화 등). 세션을 지우고 401.

    :raises HTTPException: 항상 401
    """
    request.session.pop("user", None)
    raise HTTPException(status_code=401, detail=STALE_LOGIN)


@router.get("/new")
def new_schedule_form(user: Dict[str, Any] = Depends(get_current_user)):
    """
    일정 작성 폼에 필요한 정보(로그인 사용자/입력 제한/출결 표시 문자)를 반환함.
    """
    return {
        "user": user,
        "limits": {"scheduleName": NAME_MAX_LENGTH, "comment": COMMENT_MAX_LENGTH},
        "labels": {str(k): v for k, v in AVAILABILITY_LABELS.items()},
    }


@router.post("")
def create_schedule(
    body: ScheduleCreate,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    일정 생성 후 일정 페이지로 302 리다이렉트

    :param body: scheduleName/memo/candidates(줄바꿈 구분)
    :type body: ScheduleCreate
    """
    schedule = schedule_service.create_schedule(db, user["id"], body)
    return RedirectResponse(f"/schedules/{schedule.schedule_id}", status_code=302)


@router.get("/{schedule_id}", response_model=ScheduleViewOut)
def show_schedule(
    schedule_id: str,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    일정 + 후보 + 사용자별 출결 표 + 코멘트

    :raises HTTPException: 일정이 없으면 404
    """
    try:
        view = schedule_service.build_schedule_view(db, schedule_id, user)
    except ScheduleNotFound:
        raise HTTPException(status_code=404, detail=SCHEDULE_NOT_FOUND)
    return _pack_view(user, view)


@router.post("/{schedule_id}/users/{user_id}/candidates/{candidate_id}", response_model=AvailabilityOut)
def update_availability(
    schedule_id: str,
    user_id: int,
    candidate_id: int,
    request: Request,
    body: AvailabilityIn,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    _must_be_self(user, user_id)
    try:
        return set_availability(db, schedule_id, user_id, candidate_id, body.availability)
    except CandidateNotFound:
        raise HTTPException(status_code=404, detail="지정된 후보를 찾을 수 없습니다.")
    except UserNotFound:
        _stale_login(request)


@router.post("/{schedule_id}/users/{user_id}/comments", response_model=CommentOut)
def update_comment(
    schedule_id: str,
    user_id: int,
    request: Request,
    body: CommentIn,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    _must_be_self(user, user_id)
    try:
        return set_comment(db, schedule_id, user_id, body.comment)
    except ScheduleNotFound:
        raise HTTPException(status_code=404, detail=SCHEDULE_NOT_FOUND)
    except UserNotFound:
        _stale_login(request)
