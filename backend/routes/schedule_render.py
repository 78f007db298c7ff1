# routes/schedule_render.py
# 렌더/ 서식

from typing import Any, Dict

from models import ABSENT, MAYBE, PRESENT
from schemas.schedule_schema import (
    AvailabilityCell,
    CandidateOut,
    ScheduleOut,
    ScheduleViewOut,
    UserOut,
    ViewUserOut,
)

# 출결 버튼 표시 문자 (클라이언트는 0 -> 1 -> 2 -> 0 순으로 토글)
AVAILABILITY_LABELS = {
    ABSENT: "欠",
    MAYBE: "？",
    PRESENT: "出",
}


def _pack_view(viewer: Dict[str, Any], view: Dict[str, Any]) -> ScheduleViewOut:
    """
    build_schedule_view 결과를 응답 스키마로 패킹한다.
    출결 표는 사용자 순 -> 후보 순으로 한 칸씩 펼친다.

    :param viewer: 로그인 사용자 {"id", "username"}
    :type viewer: dict
    :param view: {schedule, candidates, users, availability_map, comment_map}
    :type view: dict
    :return: 응답 모델
    :rtype: ScheduleViewOut
    """

    schedule = view["schedule"]
    amap = view["availability_map"]
    cells = []
    for u in view["users"]:
        for c in view["candidates"]:
            value = amap[(u["user_id"], c.candidate_id)]
            cells.append(AvailabilityCell(
                user_id=u["user_id"],
                candidate_id=c.candidate_id,
                availability=value,
                label=AVAILABILITY_LABELS.get(value, str(value)),
            ))

    return ScheduleViewOut(
        user=UserOut(user_id=viewer["id"], username=viewer["username"]),
        schedule=ScheduleOut.model_validate(schedule),
        candidates=[CandidateOut.model_validate(c) for c in view["candidates"]],
        users=[ViewUserOut(**u) for u in view["users"]],
        availabilities=cells,
        comments={str(uid): comment for uid, comment in view["comment_map"].items()},
    )
