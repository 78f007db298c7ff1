import os
import logging
import secrets
from contextlib import asynccontextmanager
from urllib.parse import quote

from dotenv import load_dotenv
from fastapi import FastAPI, Depends, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.orm import Session
from starlette.middleware.sessions import SessionMiddleware

from database import get_db, init_db
from routes.auth import router as auth_router, LoginRequired, optional_user
from routes.schedule import router as schedule_router
from schemas.schedule_schema import ScheduleOut
from services.schedule_service import list_by_creator

load_dotenv()
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
logger = logging.getLogger(__name__)

WEB_ORIGIN = os.getenv("WEB_ORIGIN", "")
# 설정되지 않으면 프로세스마다 새로 생성(재시작 시 세션 무효화)
SESSION_SECRET = os.getenv("SESSION_SECRET") or secrets.token_urlsafe(32)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o for o in ["http://localhost:5173", WEB_ORIGIN] if o],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(SessionMiddleware, secret_key=SESSION_SECRET, same_site="lax")

app.include_router(auth_router)
app.include_router(schedule_router)


@app.exception_handler(LoginRequired)
async def login_required_handler(request: Request, exc: LoginRequired):
    return RedirectResponse(f"/login?from={quote(exc.path)}", status_code=302)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    # 입력 오류는 422 대신 400으로 응답
    logger.info("[Validation] %s %s | %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


@app.get("/")
def index(user=Depends(optional_user), db: Session = Depends(get_db)):
    """
    로그인 사용자가 만든 일정 목록(최근 갱신 순)
    """
    if not user:
        return {"user": None, "schedules": []}
    schedules = list_by_creator(db, int(user["id"]))
    return {
        "user": user,
        "schedules": [ScheduleOut.model_validate(s).model_dump(by_alias=True) for s in schedules],
    }


@app.get("/health")
def health():
    return {"ok": True}
