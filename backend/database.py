# database.py
import os
from typing import Any, Dict, List

from dotenv import load_dotenv
from sqlalchemy import create_engine, event
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from models import Base

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./app.db")


def make_engine(url: str):
    """
    DB URL에 맞는 엔진을 만든다. (sqlite 메모리 DB는 커넥션을 하나로 고정)

    :param url: SQLAlchemy DB URL
    :type url: str
    :return: Engine
    """

    if url.startswith("sqlite"):
        kwargs: Dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, **kwargs)

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            # sqlite는 커넥션마다 FK 검사를 켜야 함
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine
    return create_engine(url, pool_pre_ping=True)


engine = make_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def init_db(bind=None):
    Base.metadata.create_all(bind=bind or engine)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def upsert(db: Session, model, values: Dict[str, Any], keys: List[str]) -> None:
    """
    키 컬럼 기준 insert-or-update. 동시 요청의 충돌 처리는 DB의 upsert에 맡긴다.
    sqlite/postgresql은 ON CONFLICT DO UPDATE, 그 외 방언은 Session.merge로 처리함.
    commit은 호출한 쪽에서 한다.

    :param model: 매핑된 모델 클래스
    :param values: {컬럼명: 값} (키 컬럼 포함)
    :type values: Dict[str, Any]
    :param keys: 충돌 판정에 쓰는 키(PK) 컬럼명 목록
    :type keys: List[str]
    """

    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        insert = pg_insert
    elif dialect == "sqlite":
        insert = sqlite_insert
    else:
        db.merge(model(**values))
        return

    stmt = insert(model).values(**values)
    changes = {k: v for k, v in values.items() if k not in keys}
    if changes:
        stmt = stmt.on_conflict_do_update(index_elements=keys, set_=changes)
    else:
        stmt = stmt.on_conflict_do_nothing(index_elements=keys)
    db.execute(stmt)
