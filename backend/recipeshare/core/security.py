# 비밀번호 해시(bcrypt) + 토큰 발급/검증(PyJWT)

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
import jwt  # pyjwt

from recipeshare.core.config import Settings, settings
from recipeshare.core.errors import TokenExpired, TokenInvalid

ALGORITHM = "HS256"
ACCESS = "access"
REFRESH = "refresh"


def _pw_bytes(plain: str) -> bytes:
    # bcrypt는 앞 72바이트만 사용
    return (plain or "").encode("utf-8")[:72]

def hash_password(plain: str, rounds: int | None = None) -> str:
    if not plain:
        raise ValueError("empty password")
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(_pw_bytes(plain), salt).decode("utf-8")

def verify_password(plain: str, hashed: str) -> bool:
    if not plain or not hashed:
        return False
    try:
        return bcrypt.checkpw(_pw_bytes(plain), hashed.encode("utf-8"))
    except ValueError:
        # 저장된 값이 bcrypt 해시가 아님
        return False

# 존재하지 않는 계정 로그인 시에도 같은 비용으로 비교하기 위한 더미 해시
DUMMY_HASH = hash_password("not-a-real-password")


def _encode(sub: str, kind: str, secret: str, ttl: timedelta) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": sub,
        "type": kind,
        "jti": uuid.uuid4().hex,  # 같은 초에 발급돼도 서로 다른 토큰
        "iat": now,
        "exp": now + ttl,
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM)

def _decode(token: str, kind: str, secret: str) -> Dict[str, Any]:
    if not token:
        raise TokenInvalid()
    try:
        claims = jwt.decode(token, secret, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise TokenExpired()
    except jwt.InvalidTokenError:
        raise TokenInvalid()
    if claims.get("type") != kind or not claims.get("sub"):
        raise TokenInvalid("Invalid token format")
    return claims


def _cfg(cfg: Optional[Settings]) -> Settings:
    # 앱에 주입된 설정이 없으면 모듈 기본값
    return cfg or settings

def create_access_token(account_id: str, cfg: Optional[Settings] = None) -> str:
    cfg = _cfg(cfg)
    return _encode(
        account_id, ACCESS, cfg.JWT_SECRET,
        timedelta(minutes=cfg.JWT_EXPIRATION_MINUTES),
    )

def decode_access_token(token: str, cfg: Optional[Settings] = None) -> str:
    """access 토큰 검증 후 계정 id 반환. 만료는 TokenExpired, 그 외는 TokenInvalid."""
    return _decode(token, ACCESS, _cfg(cfg).JWT_SECRET)["sub"]

def create_refresh_token(account_id: str, cfg: Optional[Settings] = None) -> str:
    cfg = _cfg(cfg)
    return _encode(
        account_id, REFRESH, cfg.REFRESH_TOKEN_SECRET,
        timedelta(days=cfg.REFRESH_TOKEN_EXPIRATION_DAYS),
    )

def decode_refresh_token(token: str, cfg: Optional[Settings] = None) -> str:
    return _decode(token, REFRESH, _cfg(cfg).REFRESH_TOKEN_SECRET)["sub"]

def refresh_token_live(token: str, cfg: Optional[Settings] = None) -> bool:
    # 저장된 refresh 토큰 정리용: 만료/위조면 False
    try:
        decode_refresh_token(token, cfg)
    except (TokenExpired, TokenInvalid):
        return False
    return True
