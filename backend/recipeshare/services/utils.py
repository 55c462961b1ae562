# app/services/utils.py
# id 변환/직렬화, 검색어 정규식 유틸

from __future__ import annotations

import re
from typing import Any, Iterable, List, Mapping, Optional

from bson import ObjectId

from recipeshare.core.errors import NotFoundError, ValidationError

def to_object_id(value: Any, label: str = "id") -> ObjectId:
    # 형식이 틀린 id는 400
    if isinstance(value, ObjectId):
        return value
    if not value or not ObjectId.is_valid(str(value)):
        raise ValidationError(f"Invalid {label} format")
    return ObjectId(str(value))

def maybe_object_id(value: Any) -> Optional[ObjectId]:
    # 토큰 sub 등 신뢰 경로: 형식이 틀리면 "없는 것"으로 취급
    if isinstance(value, ObjectId):
        return value
    if value and ObjectId.is_valid(str(value)):
        return ObjectId(str(value))
    return None

def oid_str(value: Any) -> Optional[str]:
    return str(value) if value is not None else None

def contains_regex(text: str) -> dict:
    """사용자 입력을 안전 이스케이프 후 부분일치(대소문자 무시) 조건으로."""
    return {"$regex": re.escape(text.strip()), "$options": "i"}

def exact_ci_regex(text: str) -> dict:
    return {"$regex": f"^{re.escape(text.strip())}$", "$options": "i"}

async def names_by_id(db, ids: Iterable[Any]) -> dict:
    # 작성자 표시용 {ObjectId: name}
    uniq: List[ObjectId] = list({i for i in ids if isinstance(i, ObjectId)})
    if not uniq:
        return {}
    cur = db["users"].find({"_id": {"$in": uniq}}, {"name": 1})
    docs = await cur.to_list(length=len(uniq))
    return {d["_id"]: d.get("name", "") for d in docs}

def require(doc: Optional[Mapping[str, Any]], what: str) -> Mapping[str, Any]:
    if not doc:
        raise NotFoundError(f"{what} not found")
    return doc
