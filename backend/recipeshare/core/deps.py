# 공용 의존성/헬퍼 (앱 설정, 인증 쿠키 발급/삭제, 현재 계정 추출)
from typing import Optional

from fastapi import Request, Response

from recipeshare.core.config import Settings
from recipeshare.core.errors import AuthenticationError
from recipeshare.services.accounts import verify_access

COOKIE = "token"

def get_settings(request: Request) -> Settings:
    # create_app()에서 주입된 설정
    return request.app.state.settings

def set_token_cookie(response: Response, token: str, cfg: Settings) -> None:
    # HttpOnly + SameSite=Lax, Secure는 배포 환경 기준
    response.set_cookie(
        COOKIE, token,
        max_age=cfg.COOKIE_MAX_AGE,
        httponly=True,
        secure=cfg.cookie_secure,
        samesite="lax",
        path="/",
    )

def clear_token_cookie(response: Response, cfg: Settings) -> None:
    response.delete_cookie(
        COOKIE, path="/", httponly=True, secure=cfg.cookie_secure, samesite="lax",
    )

def get_presented_token(request: Request) -> Optional[str]:
    # Authorization: Bearer 우선, 없으면 쿠키
    auth = request.headers.get("Authorization") or ""
    scheme, _, value = auth.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return request.cookies.get(COOKIE) or None

def require_token(request: Request) -> str:
    token = get_presented_token(request)
    if not token:
        raise AuthenticationError("No token found, authorization denied")
    return token

def current_account_id(request: Request) -> str:
    # 보호된 라우트용: 검증된 계정 id
    return verify_access(require_token(request), get_settings(request))
