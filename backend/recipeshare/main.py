# app/main.py
# FastAPI 앱 초기화 및 라우터 설정
# 라우터는 각 기능별로 분리하여 관리

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from recipeshare.api.routes_auth import build_router as build_auth_router
from recipeshare.api.routes_recipes import build_router as build_recipes_router
from recipeshare.api.routes_user import build_router as build_user_router
from recipeshare.core.config import Settings, settings as default_settings
from recipeshare.core.errors import register_error_handlers
from recipeshare.core.headers import apply_security_headers
from recipeshare.core.ratelimit import build_limiter
from recipeshare.db.indexes import ensure_indexes
from recipeshare.db.init import Mongo

log = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, mongo: Optional[Mongo] = None) -> FastAPI:
    """
    settings/mongo를 주입 가능하게 앱 생성.
    mongo를 넘기지 않으면 settings.MONGO_URI로 motor 클라이언트를 만든다.
    """
    settings = settings or default_settings
    logging.basicConfig(level=settings.LOG_LEVEL)

    app = FastAPI(title="Recipe Share - API", version="0.1.0")
    app.state.settings = settings
    app.state.mongo = mongo or Mongo(settings.MONGO_URI, settings.MONGO_DB)
    # 요청 제한 카운터도 앱 단위 (주입된 설정의 저장소/한도)
    limiter = build_limiter(settings)
    app.state.limiter = limiter

    # CORS: 프론트 허용 + 쿠키 전달
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def secure_headers(request: Request, call_next):
        response = await call_next(request)
        return apply_security_headers(response, request.url.path)

    register_error_handlers(app)

    # 앱 시작/종료 이벤트 핸들러
    @app.on_event("startup")
    async def on_startup() -> None:
        # 1) DB 먼저 붙는다
        ready = await app.state.mongo.connect(retries=settings.DB_CONNECT_RETRIES)
        if not ready:
            return
        # 2) 인덱스 보장
        try:
            await ensure_indexes(app.state.mongo.db)
            log.info("[startup] indexes ensured")
        except Exception:
            log.exception("[startup] ensure_indexes failed")

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        # 몽고db 커넥션 정리
        app.state.mongo.close()
        log.info("[shutdown] db closed")

    @app.get("/")
    async def root():
        return {"status": "ok"}

    @app.get("/health")
    async def health():
        ok = {"status": "ok", "db": "ok"}
        try:
            await app.state.mongo.ping()
        except Exception as e:
            ok["db"] = f"error: {e}"
        return ok

    # 라우터 prefix는 각 파일 내에서 정의함 , 중복 prefix 금지
    app.include_router(build_auth_router(limiter, settings))
    app.include_router(build_recipes_router(limiter, settings))
    app.include_router(build_user_router(limiter, settings))
    return app


app = create_app()
