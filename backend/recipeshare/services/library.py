# 사용자 프로필 / 내 레시피 / 저장 컬렉션

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List

from recipeshare.core.errors import DuplicateSave, ValidationError
from recipeshare.db.models.account import DEFAULT_COLLECTION, SavedRecipe
from recipeshare.services.recipes import list_recipes
from recipeshare.services.utils import maybe_object_id, require, to_object_id

# 비밀번호/refresh 토큰은 절대 내보내지 않는다
PROFILE_PROJECTION = {"password": 0, "refreshTokens": 0}


async def _account(db, account_id: Any, projection: Dict[str, int] = PROFILE_PROJECTION):
    oid = maybe_object_id(account_id)
    doc = await db["users"].find_one({"_id": oid}, projection) if oid else None
    return require(doc, "User")

def _profile_out(doc: Dict[str, Any], recipe_count: int) -> Dict[str, Any]:
    return {
        "id": str(doc["_id"]),
        "name": doc.get("name", ""),
        "email": doc.get("email", ""),
        "avatar": doc.get("avatar", ""),
        "roles": doc.get("roles") or [],
        "createdAt": doc.get("createdAt"),
        "stats": {
            "recipes": recipe_count,
            "saved": len(doc.get("savedRecipes") or []),
        },
    }

async def get_profile(db, account_id: Any) -> Dict[str, Any]:
    doc = await _account(db, account_id)
    n = await db["recipes"].count_documents({"author": doc["_id"]})
    return _profile_out(doc, n)

async def update_profile(db, account_id: Any, changes: Dict[str, Any]) -> Dict[str, Any]:
    doc = await _account(db, account_id, {"_id": 1})
    to_set = {k: v for k, v in changes.items() if k in ("name", "avatar") and v is not None}
    if to_set:
        to_set["updatedAt"] = datetime.utcnow()
        await db["users"].update_one({"_id": doc["_id"]}, {"$set": to_set})
    return await get_profile(db, doc["_id"])

async def my_recipes(db, account_id: Any, skip: Any = 0, limit: Any = None) -> List[Dict[str, Any]]:
    doc = await _account(db, account_id, {"_id": 1})
    return await list_recipes(db, skip=skip, limit=limit, author=doc["_id"])


async def save_recipe(db, account_id: Any, recipe_id: Any, collection: str = DEFAULT_COLLECTION) -> Dict[str, bool]:
    rid = to_object_id(recipe_id, "recipe id")
    collection = (collection or "").strip() or DEFAULT_COLLECTION
    if len(collection) > 50:
        raise ValidationError("Collection must be at most 50 characters long")
    doc = await _account(db, account_id, {"_id": 1})
    require(await db["recipes"].find_one({"_id": rid}, {"_id": 1}), "Recipe")

    # 중복이 없을 때만 추가하는 조건부 업데이트 1회
    entry = SavedRecipe(recipe=rid, collection=collection).model_dump()
    res = await db["users"].update_one(
        {"_id": doc["_id"], "savedRecipes.recipe": {"$ne": rid}},
        {"$push": {"savedRecipes": entry}},
    )
    if res.modified_count == 0:
        raise DuplicateSave()
    return {"saved": True}

async def unsave_recipe(db, account_id: Any, recipe_id: Any) -> Dict[str, bool]:
    rid = to_object_id(recipe_id, "recipe id")
    doc = await _account(db, account_id, {"_id": 1})
    await db["users"].update_one(
        {"_id": doc["_id"]},
        {"$pull": {"savedRecipes": {"recipe": rid}}},
    )
    return {"saved": False}

async def list_saved(db, account_id: Any) -> List[Dict[str, Any]]:
    doc = await _account(db, account_id, {"savedRecipes": 1})
    saved = doc.get("savedRecipes") or []
    ids = [s.get("recipe") for s in saved]
    cur = db["recipes"].find(
        {"_id": {"$in": ids}},
        {"title": 1, "imageUrls": 1, "tags": 1, "category": 1},
    )
    by_id = {r["_id"]: r for r in await cur.to_list(length=len(ids) or 1)}

    out: List[Dict[str, Any]] = []
    for s in saved:
        r = by_id.get(s.get("recipe"))
        out.append({
            "recipe": None if r is None else {
                "id": str(r["_id"]),
                "title": r.get("title", ""),
                "imageUrls": r.get("imageUrls") or [],
                "tags": r.get("tags") or [],
                "category": r.get("category"),
            },
            "collection": s.get("collection", DEFAULT_COLLECTION),
            "savedAt": s.get("savedAt"),
        })
    return out
