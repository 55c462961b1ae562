# app/db/init.py
# Mongo 연결 서비스: motor
# 모듈 전역 대신 앱 생성 시 1개 만들어 app.state.mongo에 붙이고,
# 라우터는 get_db 의존성으로 핸들을 받는다.

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from fastapi import Request
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

log = logging.getLogger(__name__)


class Mongo:
    def __init__(self, uri: str, name: str, client: Optional[Any] = None):
        # motor 클라이언트는 lazy 연결이라 생성만으로는 네트워크를 타지 않음
        # (테스트에서는 mongomock-motor 클라이언트를 주입)
        self.client = client if client is not None else AsyncIOMotorClient(uri)
        self.db: AsyncIOMotorDatabase = self.client[name]

    async def ping(self) -> None:
        await self.db.command("ping")

    async def connect(self, retries: int = 20, delay: float = 1.0) -> bool:
        # 앱 시작 시 호출: 준비될 때까지 재시도 (최대 retries회, delay초 간격)
        for i in range(retries):
            try:
                await self.ping()
                log.info("[startup] db ready")
                return True
            except Exception as e:
                log.warning("[startup] db init retry %d: %s", i + 1, e)
                await asyncio.sleep(delay)
        log.error("[startup] db init failed after %d retries", retries)
        return False

    def close(self) -> None:
        # 앱 종료 시 커넥션 정리
        self.client.close()


def get_db(request: Request) -> AsyncIOMotorDatabase:
    # 라우터에서 쓰는 핸들. 미초기화면 예외 발생
    mongo: Optional[Mongo] = getattr(request.app.state, "mongo", None)
    if mongo is None:
        raise RuntimeError("MongoDB is not initialized yet.")
    return mongo.db
