import os

# 설정 객체가 만들어지기 전에 테스트용 값 주입
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from recipeshare.core.config import Settings
from recipeshare.db.init import Mongo
from recipeshare.main import create_app


@pytest.fixture()
def mongo() -> Mongo:
    """In-memory Mongo service; each test gets an empty database."""
    return Mongo("mongodb://unused", "recipeshare_test", client=AsyncMongoMockClient())


@pytest.fixture()
def db(mongo):
    return mongo.db


@pytest.fixture()
def app(mongo):
    # 요청 제한 카운터는 앱마다 새로 생긴다
    return create_app(mongo=mongo)


@pytest.fixture()
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def anon(app) -> TestClient:
    # 쿠키가 없는 별도 클라이언트
    return TestClient(app)


@pytest.fixture()
def make_client(mongo):
    """Client for an app built with overridden settings, e.g. make_client(COOKIE_SECURE=True)."""
    def _make(**overrides) -> TestClient:
        return TestClient(create_app(settings=Settings(**overrides), mongo=mongo))
    return _make
