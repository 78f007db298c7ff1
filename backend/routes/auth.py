# GitHub OAuth 로그인 + 세션 유틸
# -/auth/github: GitHub 인가 페이지로 리다이렉트(state를 세션에 저장)
# -/auth/github/callback: code 교환 -> 프로필 조회 -> users upsert -> 세션 저장
# -/login: 로그인 상태/로그인 URL 조회
# -/logout: 세션 삭제

# 로그인 정보는 서명된 세션 쿠키(SessionMiddleware)에 저장하므로 프로세스 내 저장소는 두지 않음
# request.session["user"] = {"id": 123456, "username": "octocat"}
import os, secrets, logging, requests
from typing import Any, Dict, Optional
from urllib.parse import urlencode, urlsplit
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session
from dotenv import load_dotenv

from database import get_db
from services.user_service import upsert_user

logger = logging.getLogger(__name__)
router = APIRouter(tags=["auth"])

load_dotenv()

GITHUB_CLIENT_ID = os.getenv("GITHUB_CLIENT_ID", "")
GITHUB_CLIENT_SECRET = os.getenv("GITHUB_CLIENT_SECRET", "")
GITHUB_CALLBACK_URL = os.getenv("GITHUB_CALLBACK_URL", "http://localhost:8000/auth/github/callback")

# GitHub OAuth 관련 엔드포인트
OAUTH_AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
OAUTH_TOKEN_URL = "https://github.com/login/oauth/access_token"
USER_API_URL = "https://api.github.com/user"

logger.info(
    "[GitHubOAuth] CLIENT_ID=%s****** (loaded=%s)",
    GITHUB_CLIENT_ID[:6],
    bool(GITHUB_CLIENT_ID)
)


class LoginRequired(Exception):
    """
    로그인되지 않은 요청. main.py의 핸들러가 /login?from=<path> 로 리다이렉트함.
    """

    def __init__(self, path: str):
        super().__init__(path)
        self.path = path


# 의존성
def get_current_user(request: Request) -> Dict[str, Any]:
    """
    세션에서 로그인 사용자를 꺼낸다. 없으면 LoginRequired.

    :return: {"id": int, "username": str}
    :rtype: Dict[str, Any]
    :raises LoginRequired: 세션에 사용자가 없을 때
    """

    user = request.session.get("user")
    if not user:
        path = request.url.path
        if request.url.query:
            path = f"{path}?{request.url.query}"
        raise LoginRequired(path)
    return user


def optional_user(request: Request) -> Optional[Dict[str, Any]]:
    return request.session.get("user")


def _safe_from(path: Optional[str]) -> str:
    # 외부 URL로의 오픈 리다이렉트 방지: 같은 사이트의 절대경로만 허용
    # 브라우저는 "/\\host" 도 "//host" 처럼 해석하므로 역슬래시도 거절
    if not path or not path.startswith("/") or "\\" in path:
        return "/"
    parts = urlsplit(path)
    if parts.scheme or parts.netloc:
        return "/"
    return path


# 내부 유틸 함수
def _exchange_code(code: str, state: str) -> Dict[str, Any]:
    """
    OAuth 인가 코드를 액세스 토큰으로 교환한다.

    :param code: GitHub가 콜백으로 넘겨준 'authorization code'
    :type code: str
    :param state: 인가 요청 때 보낸 state
    :type state: str
    :return: 토큰 페이로드(JSON) - access_token, scope, token_type
    :rtype: Dict[str, Any]
    :raises HTTPException: 400 - 교환 실패 / 500 - 환경변수 누락
    """

    if not GITHUB_CLIENT_ID or not GITHUB_CLIENT_SECRET:
        raise HTTPException(500, "GITHUB_CLIENT_ID/GITHUB_CLIENT_SECRET not set")

    r = requests.post(
        OAUTH_TOKEN_URL,
        data={
            "code": code,
            "client_id": GITHUB_CLIENT_ID,
            "client_secret": GITHUB_CLIENT_SECRET,
            "redirect_uri": GITHUB_CALLBACK_URL,
            "state": state,
        },
        headers={"Accept": "application/json"},
        timeout=20,
    )

    # GitHub는 실패해도 200 + {"error": ...} 를 줄 수 있음
    data = r.json() if r.ok else {}
    if r.status_code != 200 or "access_token" not in data:
        logger.error(
            "[GitHubOAuth] Token exchange failed %s | client_id=%s****** | body=%s",
            r.status_code,
            GITHUB_CLIENT_ID[:6],
            r.text
        )
        raise HTTPException(400, "token exchange failed")
    return data


def _userinfo(access_token: str) -> Dict[str, Any]:
    """
    GitHub 사용자 프로필을 조회한다.

    :param access_token: 유효한 액세스 토큰
    :type access_token: str
    :return: 사용자 프로필 딕셔너리(실패 시 빈 dict)
    :rtype: Dict[str, Any]
    """

    r = requests.get(
        USER_API_URL,
        headers={
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/vnd.github+json",
        },
        timeout=15,
    )
    return r.json() if r.ok else {}


# REST 엔드포인트
@router.get("/login")
def login(request: Request, from_: Optional[str] = Query(None, alias="from")):
    """
    로그인 상태와 로그인 시작 URL을 반환한다.
    from 이 주어지면 로그인 후 돌아갈 경로로 세션에 기억해 둠.
    """

    if from_:
        request.session["login_from"] = _safe_from(from_)
    return {"user": request.session.get("user"), "loginUrl": "/auth/github"}


@router.get("/logout")
def logout(request: Request):
    request.session.clear()
    return RedirectResponse("/", status_code=302)


@router.get("/auth/github")
def github_authorize(request: Request):
    """
    GitHub 인가 페이지로 보낸다. CSRF 방지용 state는 세션에 저장.
    """

    state = secrets.token_urlsafe(16)
    request.session["oauth_state"] = state
    query = urlencode({
        "client_id": GITHUB_CLIENT_ID,
        "redirect_uri": GITHUB_CALLBACK_URL,
        "scope": "user:email",
        "state": state,
    })
    return RedirectResponse(f"{OAUTH_AUTHORIZE_URL}?{query}", status_code=302)


@router.get("/auth/github/callback")
def github_callback(
    request: Request,
    code: str = Query(...),
    state: str = Query(...),
    db: Session = Depends(get_db),
):
    """
    콜백: state 확인 -> 코드 교환 -> 프로필 조회 -> users upsert -> 세션 저장

    :raises HTTPException: 400 - state 불일치/교환 실패/프로필 조회 실패
    :return: 로그인 전에 보던 경로(없으면 /)로 302
    """

    expected = request.session.pop("oauth_state", None)
    if not expected or not secrets.compare_digest(expected, state):
        logger.warning("[GitHubOAuth:callback] state mismatch")
        raise HTTPException(400, "invalid state")

    data = _exchange_code(code, state)
    profile = _userinfo(data["access_token"])
    if not profile.get("id") or not profile.get("login"):
        raise HTTPException(400, "profile lookup failed")

    user_id, username = int(profile["id"]), profile["login"]
    upsert_user(db, user_id, username)
    request.session["user"] = {"id": user_id, "username": username}

    logger.info("[GitHubOAuth:callback] login id=%s username=%s", user_id, username)
    return RedirectResponse(request.session.pop("login_from", "/"), status_code=302)
