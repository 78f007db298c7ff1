from main import app
from models import Availability, Candidate, Comment
from routes.auth import get_current_user


def _candidate_ids(db, schedule_id):
    return [
        c.candidate_id
        for c in db.query(Candidate)
        .filter(Candidate.schedule_id == schedule_id)
        .order_by(Candidate.candidate_id.asc())
        .all()
    ]


def test_new_schedule_form(client):
    res = client.get("/schedules/new")
    assert res.status_code == 200
    body = res.json()
    assert body["user"] == {"id": 0, "username": "testuser"}
    assert body["limits"]["scheduleName"] == 255
    assert body["labels"] == {"0": "欠", "1": "？", "2": "出"}


def test_create_and_show_schedule(client, make_schedule):
    schedule_id = make_schedule(
        name="テスト予定1",
        memo="テストメモ1\r\nテストメモ2",
        candidates="テスト候補1\r\nテスト候補2\r\nテスト候補3",
    )

    res = client.get(f"/schedules/{schedule_id}")
    assert res.status_code == 200
    body = res.json()
    assert body["schedule"]["scheduleName"] == "テスト予定1"
    assert body["schedule"]["memo"] == "テストメモ1\r\nテストメモ2"
    assert body["schedule"]["user"] == {"userId": 0, "username": "testuser"}
    assert [c["candidateName"] for c in body["candidates"]] == ["テスト候補1", "テスト候補2", "テスト候補3"]
    assert body["users"] == [{"userId": 0, "username": "testuser", "isSelf": True}]
    assert [a["availability"] for a in body["availabilities"]] == [0, 0, 0]
    assert body["comments"] == {}


def test_show_unknown_schedule_is_404(client):
    res = client.get("/schedules/00000000-0000-0000-0000-000000000000")
    assert res.status_code == 404


def test_update_availability(client, db, make_schedule):
    schedule_id = make_schedule(candidates="テスト出欠更新候補1")
    (candidate_id,) = _candidate_ids(db, schedule_id)

    res = client.post(
        f"/schedules/{schedule_id}/users/0/candidates/{candidate_id}",
        json={"availability": 2},
    )
    assert res.status_code == 200
    assert res.json() == {"status": "OK", "availability": 2}

    rows = db.query(Availability).filter(Availability.schedule_id == schedule_id).all()
    assert len(rows) == 1
    assert rows[0].availability == 2


def test_availability_shows_in_view_with_default(client, db, make_schedule):
    schedule_id = make_schedule(name="T1", candidates="X1\nX2")
    x1, x2 = _candidate_ids(db, schedule_id)

    client.post(f"/schedules/{schedule_id}/users/0/candidates/{x1}", json={"availability": 2})

    body = client.get(f"/schedules/{schedule_id}").json()
    cells = {(a["userId"], a["candidateId"]): a for a in body["availabilities"]}
    assert cells[(0, x1)]["availability"] == 2
    assert cells[(0, x1)]["label"] == "出"
    assert cells[(0, x2)]["availability"] == 0
    assert cells[(0, x2)]["label"] == "欠"


def test_availability_out_of_range_is_400(client, db, make_schedule):
    schedule_id = make_schedule()
    x1, _ = _candidate_ids(db, schedule_id)

    for value in (3, -1, "present"):
        res = client.post(f"/schedules/{schedule_id}/users/0/candidates/{x1}", json={"availability": value})
        assert res.status_code == 400

    assert db.query(Availability).count() == 0


def test_availability_for_unknown_candidate_is_404(client, make_schedule):
    schedule_id = make_schedule()
    res = client.post(f"/schedules/{schedule_id}/users/0/candidates/99999", json={"availability": 1})
    assert res.status_code == 404


def test_cannot_write_for_other_user(client, db, make_schedule):
    schedule_id = make_schedule()
    x1, _ = _candidate_ids(db, schedule_id)

    res = client.post(f"/schedules/{schedule_id}/users/1/candidates/{x1}", json={"availability": 1})
    assert res.status_code == 403
    res = client.post(f"/schedules/{schedule_id}/users/1/comments", json={"comment": "hi"})
    assert res.status_code == 403


def test_update_comment_twice_keeps_last(client, db, make_schedule):
    schedule_id = make_schedule()

    res = client.post(f"/schedules/{schedule_id}/users/0/comments", json={"comment": "hello"})
    assert res.json() == {"status": "OK", "comment": "hello"}
    res = client.post(f"/schedules/{schedule_id}/users/0/comments", json={"comment": "world"})
    assert res.json() == {"status": "OK", "comment": "world"}

    rows = db.query(Comment).filter(Comment.schedule_id == schedule_id).all()
    assert [r.comment for r in rows] == ["world"]
    assert client.get(f"/schedules/{schedule_id}").json()["comments"] == {"0": "world"}


def test_comment_validation(client, make_schedule):
    schedule_id = make_schedule()
    url = f"/schedules/{schedule_id}/users/0/comments"

    assert client.post(url, json={"comment": ""}).status_code == 400
    assert client.post(url, json={"comment": "a" * 256}).status_code == 400
    assert client.post(url, json={"comment": "a" * 255}).status_code == 200


def test_comment_for_unknown_schedule_is_404(client):
    res = client.post("/schedules/no-such-schedule/users/0/comments", json={"comment": "hi"})
    assert res.status_code == 404


def test_index_lists_own_schedules(client, make_schedule):
    schedule_id = make_schedule(name="mine")
    body = client.get("/").json()
    assert body["user"]["username"] == "testuser"
    assert [s["scheduleId"] for s in body["schedules"]] == [schedule_id]


def test_create_schedule_truncates_long_candidate_lines(client, db, make_schedule):
    schedule_id = make_schedule(candidates="x" * 300)
    body = client.get(f"/schedules/{schedule_id}").json()
    assert [c["candidateName"] for c in body["candidates"]] == ["x" * 255]


def test_writes_from_user_without_user_row_are_rejected(client, db, make_schedule):
    schedule_id = make_schedule()
    x1, _ = _candidate_ids(db, schedule_id)
    # 세션은 유효하지만 users 행이 없는 사용자(DB 초기화 후 남은 쿠키 등)
    app.dependency_overrides[get_current_user] = lambda: {"id": 7, "username": "ghost"}

    res = client.post(f"/schedules/{schedule_id}/users/7/candidates/{x1}", json={"availability": 2})
    assert res.status_code == 401
    res = client.post(f"/schedules/{schedule_id}/users/7/comments", json={"comment": "hi"})
    assert res.status_code == 401

    assert db.query(Availability).count() == 0
    assert db.query(Comment).count() == 0
