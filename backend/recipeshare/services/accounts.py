# 계정/세션 관리: 가입, 로그인, 토큰 검증/갱신, refresh 토큰 회전, 로그아웃
#
# refresh 토큰 집합은 계정 문서의 refreshTokens 배열이며, 배열에 들어 있는 것만 유효하다.
# 회전/로그아웃은 조건부 $pull 한 번으로 토큰을 "회수"하므로
# 동시에 로그아웃된 토큰이 회전으로 되살아나지 않는다.
# 새 토큰을 넣을 때 만료된 토큰은 지우고 최근 MAX_REFRESH_TOKENS개만 남긴다.
#
# cfg는 앱에 주입된 Settings (app.state.settings). 생략하면 모듈 기본 설정.

from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, Optional, Tuple

from pymongo.errors import DuplicateKeyError
from starlette.concurrency import run_in_threadpool

from recipeshare.core.config import Settings, settings
from recipeshare.core.errors import (
    AuthenticationError,
    DuplicateAccount,
    InvalidCredentials,
    MissingRefreshToken,
    RefreshRejected,
    ValidationError,
)
from recipeshare.core.security import (
    DUMMY_HASH,
    create_access_token,
    create_refresh_token,
    decode_access_token,
    decode_refresh_token,
    hash_password,
    refresh_token_live,
    verify_password,
)
from recipeshare.db.models.account import AccountDoc
from recipeshare.models.schemas import EMAIL_RE, MIN_PASSWORD, normalize_email
from recipeshare.services.utils import maybe_object_id

log = logging.getLogger(__name__)


async def register(db, name: str, email: str, password: str, cfg: Optional[Settings] = None) -> str:
    """새 계정 생성 후 access 토큰 반환. 같은 이메일이 있으면 DuplicateAccount."""
    cfg = cfg or settings
    email = normalize_email(email)
    if not EMAIL_RE.match(email):
        raise ValidationError("Invalid email format")
    if len(password or "") < MIN_PASSWORD:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD} characters long")

    users = db["users"]
    if await users.find_one({"email": email}, {"_id": 1}):
        raise DuplicateAccount()

    hashed = await run_in_threadpool(hash_password, password, cfg.BCRYPT_ROUNDS)
    doc = AccountDoc(email=email, name=name, password=hashed).model_dump()
    try:
        res = await users.insert_one(doc)
    except DuplicateKeyError:
        # 동시 가입: unique 인덱스가 최종 판정
        raise DuplicateAccount()

    log.info("registered account %s", res.inserted_id)
    return create_access_token(str(res.inserted_id), cfg)


async def _store_refresh_token(users, oid, token: str, cfg: Settings) -> None:
    doc = await users.find_one({"_id": oid}, {"refreshTokens": 1}) or {}
    stale = [t for t in doc.get("refreshTokens") or [] if not refresh_token_live(t, cfg)]
    if stale:
        await users.update_one({"_id": oid}, {"$pullAll": {"refreshTokens": stale}})
    await users.update_one(
        {"_id": oid},
        {
            # 오래된 세션부터 밀려난다
            "$push": {"refreshTokens": {"$each": [token], "$slice": -cfg.MAX_REFRESH_TOKENS}},
            "$set": {"updatedAt": datetime.utcnow()},
        },
    )


async def login(db, email: str, password: str, cfg: Optional[Settings] = None) -> Dict[str, str]:
    """
    계정 없음/비밀번호 불일치 모두 같은 InvalidCredentials.
    계정이 없어도 더미 해시와 비교해 응답 시간 차이를 줄인다.
    """
    cfg = cfg or settings
    users = db["users"]
    doc = await users.find_one({"email": normalize_email(email)})
    hashed = doc.get("password", "") if doc else DUMMY_HASH
    ok = await run_in_threadpool(verify_password, password, hashed)
    if not doc or not ok:
        raise InvalidCredentials()

    account_id = str(doc["_id"])
    refresh = create_refresh_token(account_id, cfg)
    await _store_refresh_token(users, doc["_id"], refresh, cfg)
    return {
        "token": create_access_token(account_id, cfg),
        "refreshToken": refresh,
        "userId": account_id,
    }


def verify_access(token: str, cfg: Optional[Settings] = None) -> str:
    # 만료 TokenExpired / 그 외 TokenInvalid
    return decode_access_token(token, cfg)


async def refresh_access(db, token: str, cfg: Optional[Settings] = None) -> str:
    """쿠키 흐름: 아직 유효한 access 토큰으로 새 access 토큰 발급."""
    account_id = verify_access(token, cfg)
    oid = maybe_object_id(account_id)
    if oid is None or not await db["users"].find_one({"_id": oid}, {"_id": 1}):
        raise AuthenticationError("User not found")
    return create_access_token(account_id, cfg)


async def rotate_refresh_token(db, refresh_token: str, cfg: Optional[Settings] = None) -> Tuple[str, str]:
    """
    헤더 흐름: refresh 토큰 → (새 access, 새 refresh).
    서명/만료, 계정 존재, 집합 소속 중 하나라도 실패하면 RefreshRejected.
    """
    cfg = cfg or settings
    if not refresh_token:
        raise RefreshRejected()
    try:
        account_id = decode_refresh_token(refresh_token, cfg)
    except AuthenticationError as e:
        log.info("refresh rejected: %s", e.message)
        raise RefreshRejected()

    oid = maybe_object_id(account_id)
    users = db["users"]
    if oid is None or not await users.find_one({"_id": oid}, {"_id": 1}):
        raise RefreshRejected("User not found")

    # 이전 토큰 원자적 회수. 매칭이 없으면 이미 로그아웃/회전/정리된 토큰
    res = await users.update_one(
        {"_id": oid, "refreshTokens": refresh_token},
        {"$pull": {"refreshTokens": refresh_token}},
    )
    if res.modified_count == 0:
        log.info("refresh rejected for %s: token not in set", account_id)
        raise RefreshRejected("Refresh token not recognized")

    new_refresh = create_refresh_token(account_id, cfg)
    await _store_refresh_token(users, oid, new_refresh, cfg)
    return create_access_token(account_id, cfg), new_refresh


async def logout(db, refresh_token: str | None) -> None:
    # access 토큰 없이도 가능. 토큰을 가진 계정에서 제거(없으면 no-op)
    if not refresh_token:
        raise MissingRefreshToken()
    await db["users"].update_many(
        {"refreshTokens": refresh_token},
        {"$pull": {"refreshTokens": refresh_token}},
    )
