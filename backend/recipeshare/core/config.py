# 환경변수 로딩 (.env)
from typing import List, Optional

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    MONGO_URI: str = "mongodb://localhost:27017"  # 필요 시 prod/staging로 분리
    MONGO_DB: str = "recipe-share"
    DB_CONNECT_RETRIES: int = 20

    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # 토큰/비밀번호
    JWT_SECRET: str = "default-jwt-secret-key-change-in-production"
    REFRESH_TOKEN_SECRET: str = "default-refresh-token-secret-change-in-production"
    JWT_EXPIRATION_MINUTES: int = 30
    REFRESH_TOKEN_EXPIRATION_DAYS: int = 7
    MAX_REFRESH_TOKENS: int = 10  # 계정당 동시 세션 수
    BCRYPT_ROUNDS: int = 10

    # 쿠키: None이면 ENVIRONMENT 기준
    COOKIE_SECURE: Optional[bool] = None
    COOKIE_MAX_AGE: int = 60 * 60 * 24  # 24시간(초)

    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:3001"]

    # IP당 요청 제한 (slowapi 표기)
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    RATE_LIMIT_LOGIN: str = "5/minute"
    RATE_LIMIT_REGISTER: str = "5/minute"
    RATE_LIMIT_COMMENT: str = "5/minute"
    RATE_LIMIT_RECIPE_WRITE: str = "10/minute"

    class Config:
        env_file = ".env"

    @property
    def cookie_secure(self) -> bool:
        if self.COOKIE_SECURE is not None:
            return self.COOKIE_SECURE
        return self.ENVIRONMENT == "production"

settings = Settings()
