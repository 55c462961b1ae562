# app/api/routes_auth.py
# 가입/로그인/토큰 갱신/로그아웃
#
# 두 가지 갱신 흐름을 모두 제공한다.
#   - 쿠키 흐름: POST /auth/refresh        (유효한 access 토큰 → 새 access 토큰 + 쿠키 재설정)
#   - 토큰 흐름: POST /auth/refresh-token  (refresh 토큰 회전 → 새 access + 새 refresh)
#
# 라우터는 앱마다 build_router(limiter, cfg)로 만든다 (요청 제한/설정이 앱 단위).

from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from slowapi import Limiter

from recipeshare.core.config import Settings
from recipeshare.core.deps import clear_token_cookie, require_token, set_token_cookie
from recipeshare.core.ratelimit import LOGIN_MSG, REGISTER_MSG
from recipeshare.db.init import get_db
from recipeshare.models.schemas import LoginIn, LogoutIn, RefreshTokenIn, RegisterIn
from recipeshare.services import accounts


def build_router(limiter: Limiter, cfg: Settings) -> APIRouter:
    router = APIRouter(prefix="/auth", tags=["auth"])

    @router.post("/register")
    @limiter.limit(cfg.RATE_LIMIT_REGISTER, error_message=REGISTER_MSG)
    async def register(request: Request, payload: RegisterIn, db=Depends(get_db)):
        token = await accounts.register(db, payload.name, payload.email, payload.password, cfg)
        return {"token": token}

    @router.post("/login")
    @limiter.limit(cfg.RATE_LIMIT_LOGIN, error_message=LOGIN_MSG)
    async def login(request: Request, response: Response, payload: LoginIn, db=Depends(get_db)):
        out = await accounts.login(db, payload.email, payload.password, cfg)
        set_token_cookie(response, out["token"], cfg)
        return {**out, "expiresIn": cfg.JWT_EXPIRATION_MINUTES}

    @router.post("/refresh")
    async def refresh(response: Response, token: str = Depends(require_token), db=Depends(get_db)):
        new_token = await accounts.refresh_access(db, token, cfg)
        set_token_cookie(response, new_token, cfg)
        return {"token": new_token, "expiresIn": cfg.JWT_EXPIRATION_MINUTES}

    @router.post("/refresh-token")
    async def refresh_token(payload: RefreshTokenIn, db=Depends(get_db)):
        token, new_refresh = await accounts.rotate_refresh_token(db, payload.refreshToken, cfg)
        return {"token": token, "refreshToken": new_refresh}

    @router.post("/logout")
    async def logout(response: Response, payload: Optional[LogoutIn] = None, db=Depends(get_db)):
        await accounts.logout(db, payload.refreshToken if payload else None)
        clear_token_cookie(response, cfg)
        return {"message": "Logged out successfully"}

    return router
