import os
from collections.abc import Generator

# 앱 import 전에 설정: 테스트 중 app.db 파일이 생기지 않도록 메모리 DB 사용
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SESSION_SECRET", "test-session-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from database import get_db, init_db, make_engine
from main import app
from models import Base
from routes.auth import get_current_user, optional_user
from services.user_service import upsert_user

TEST_USER = {"id": 0, "username": "testuser"}


@pytest.fixture()
def engine():
    engine = make_engine("sqlite://")
    init_db(engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def db(engine) -> Generator[Session, None, None]:
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    upsert_user(session, TEST_USER["id"], TEST_USER["username"])
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def anon_client(engine) -> Generator[TestClient, None, None]:
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app, follow_redirects=False) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def client(anon_client, db) -> TestClient:
    # 로그인 스텁: 세션 대신 고정 사용자를 돌려줌
    app.dependency_overrides[get_current_user] = lambda: dict(TEST_USER)
    app.dependency_overrides[optional_user] = lambda: dict(TEST_USER)
    return anon_client


@pytest.fixture()
def make_schedule(client):
    def _make(name="T1", memo="", candidates="X1\nX2") -> str:
        res = client.post(
            "/schedules",
            json={"scheduleName": name, "memo": memo, "candidates": candidates},
        )
        assert res.status_code == 302
        return res.headers["location"].split("/schedules/")[1]
    return _make
