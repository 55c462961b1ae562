# 레시피 애그리거트: CRUD(작성자 소유권), 댓글/평점, 좋아요, 목록
#
# 평균 평점(averageRating)은 항상 현재 댓글 rating의 산술평균(반올림 없음), 댓글이 없으면 0.
# 댓글 변경은 "읽기 → 재계산 → version 조건부 쓰기"로 comments/averageRating을 한 번에 저장하고,
# 경쟁에서 지면 다시 읽어 재시도한다.

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from pymongo import ReturnDocument

from recipeshare.core.errors import AuthorizationError, NotFoundError, ServerError, ValidationError
from recipeshare.db.models.recipe import CommentDoc, RecipeDoc
from recipeshare.models.schemas import CLEARABLE_FIELDS
from recipeshare.services.filters import RecipeFilters, build_recipe_query, clamp_pagination
from recipeshare.services.utils import names_by_id, oid_str, require, to_object_id

log = logging.getLogger(__name__)

MAX_ATTEMPTS = 5
LIST_SORT = [("createdAt", -1), ("_id", -1)]  # 동률 시 _id로 고정 → 페이지 겹침 없음

EDITABLE_FIELDS = (
    "title", "description", "ingredients", "steps", "category", "cookTime",
    "imageUrls", "diet", "cuisine", "difficulty", "prepTime", "nutrition", "tags",
)


def average_rating(comments: List[Mapping[str, Any]]) -> float:
    ratings = [c["rating"] for c in comments if isinstance(c.get("rating"), (int, float))]
    if not ratings:
        return 0
    return sum(ratings) / len(ratings)


# ------------------------------
# 직렬화
# ------------------------------

def _author_out(author: Any, names: Mapping[Any, str]) -> Dict[str, Any]:
    return {"id": oid_str(author), "name": names.get(author, "")}

def recipe_summary(doc: Mapping[str, Any], names: Mapping[Any, str]) -> Dict[str, Any]:
    return {
        "id": str(doc["_id"]),
        "title": doc.get("title", ""),
        "description": doc.get("description", ""),
        "category": doc.get("category"),
        "cookTime": doc.get("cookTime"),
        "prepTime": doc.get("prepTime"),
        "imageUrls": doc.get("imageUrls") or [],
        "diet": doc.get("diet"),
        "cuisine": doc.get("cuisine"),
        "difficulty": doc.get("difficulty"),
        "tags": doc.get("tags") or [],
        "author": _author_out(doc.get("author"), names),
        "averageRating": doc.get("averageRating", 0),
        "commentCount": len(doc.get("comments") or []),
        "likeCount": len(doc.get("likes") or []),
        "createdAt": doc.get("createdAt"),
    }

def _comment_out(c: Mapping[str, Any], names: Mapping[Any, str]) -> Dict[str, Any]:
    return {
        "id": oid_str(c.get("_id")),
        "user": _author_out(c.get("user"), names),
        "text": c.get("text", ""),
        "rating": c.get("rating"),
        "createdAt": c.get("createdAt"),
        "updatedAt": c.get("updatedAt"),
    }

async def comments_out(db, comments: List[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    # 삽입 순서 그대로
    names = await names_by_id(db, [c.get("user") for c in comments])
    return [_comment_out(c, names) for c in comments]

async def recipe_full(db, doc: Mapping[str, Any]) -> Dict[str, Any]:
    comments = doc.get("comments") or []
    names = await names_by_id(db, [doc.get("author")] + [c.get("user") for c in comments])
    out = recipe_summary(doc, names)
    out.update({
        "ingredients": doc.get("ingredients") or [],
        "steps": doc.get("steps") or [],
        "nutrition": doc.get("nutrition"),
        "likes": [str(x) for x in (doc.get("likes") or [])],
        "comments": [_comment_out(c, names) for c in comments],
        "updatedAt": doc.get("updatedAt"),
    })
    return out


# ------------------------------
# 조회
# ------------------------------

async def list_recipes(db, filters: Optional[RecipeFilters] = None, skip: Any = 0,
                       limit: Any = None, author: Any = None) -> List[Dict[str, Any]]:
    skip, limit = clamp_pagination(skip, limit)
    q = build_recipe_query(filters or RecipeFilters())
    if author is not None:
        q["author"] = to_object_id(author, "user id")
    cur = db["recipes"].find(q).sort(LIST_SORT).skip(skip).limit(limit)
    docs = await cur.to_list(length=limit)
    names = await names_by_id(db, [d.get("author") for d in docs])
    return [recipe_summary(d, names) for d in docs]

async def get_recipe(db, recipe_id: Any) -> Dict[str, Any]:
    oid = to_object_id(recipe_id, "recipe id")
    doc = require(await db["recipes"].find_one({"_id": oid}), "Recipe")
    return await recipe_full(db, doc)


# ------------------------------
# CRUD (작성자만 수정/삭제)
# ------------------------------

def _ensure_owner(owner: Any, account_id: Any, what: str = "recipe") -> None:
    if str(owner) != str(account_id):
        raise AuthorizationError(f"Not authorized to modify this {what}")

async def create_recipe(db, author_id: Any, fields: Dict[str, Any]) -> Dict[str, Any]:
    data = {k: v for k, v in fields.items() if k in EDITABLE_FIELDS}
    doc = RecipeDoc(author=to_object_id(author_id, "user id"), **data).to_mongo()
    res = await db["recipes"].insert_one(doc)
    doc["_id"] = res.inserted_id
    log.info("recipe %s created by %s", res.inserted_id, author_id)
    return await recipe_full(db, doc)

async def update_recipe(db, recipe_id: Any, author_id: Any, changes: Dict[str, Any],
                        cleared: Iterable[str] = ()) -> Dict[str, Any]:
    """보낸 필드만 $set, cleared에 든 선택 필드는 $unset."""
    oid = to_object_id(recipe_id, "recipe id")
    recipes = db["recipes"]
    cur = require(await recipes.find_one({"_id": oid}, {"author": 1}), "Recipe")
    _ensure_owner(cur["author"], author_id)

    to_set = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS}
    to_set["updatedAt"] = datetime.utcnow()
    update: Dict[str, Any] = {"$set": to_set}
    to_unset = {k: "" for k in cleared if k in CLEARABLE_FIELDS and k not in to_set}
    if to_unset:
        update["$unset"] = to_unset
    doc = await recipes.find_one_and_update(
        {"_id": oid, "author": cur["author"]},
        update,
        return_document=ReturnDocument.AFTER,
    )
    return await recipe_full(db, require(doc, "Recipe"))

async def delete_recipe(db, recipe_id: Any, author_id: Any) -> None:
    oid = to_object_id(recipe_id, "recipe id")
    recipes = db["recipes"]
    cur = require(await recipes.find_one({"_id": oid}, {"author": 1}), "Recipe")
    _ensure_owner(cur["author"], author_id)
    await recipes.delete_one({"_id": oid})
    # 저장 목록에서도 정리
    await db["users"].update_many(
        {"savedRecipes.recipe": oid},
        {"$pull": {"savedRecipes": {"recipe": oid}}},
    )
    log.info("recipe %s deleted by %s", recipe_id, author_id)


# ------------------------------
# 좋아요
# ------------------------------

async def toggle_like(db, recipe_id: Any, account_id: Any) -> Dict[str, Any]:
    oid = to_object_id(recipe_id, "recipe id")
    uid = str(account_id)
    recipes = db["recipes"]
    require(await recipes.find_one({"_id": oid}, {"_id": 1}), "Recipe")

    res = await recipes.update_one({"_id": oid, "likes": {"$ne": uid}}, {"$push": {"likes": uid}})
    liked = res.modified_count > 0
    if not liked:
        await recipes.update_one({"_id": oid}, {"$pull": {"likes": uid}})

    doc = require(await recipes.find_one({"_id": oid}, {"likes": 1}), "Recipe")
    return {"liked": liked, "likes": len(doc.get("likes") or [])}


# ------------------------------
# 댓글/평점
# ------------------------------

def _check_comment(text: Any, rating: Any) -> str:
    text = (text or "").strip() if isinstance(text, str) else ""
    if not 1 <= len(text) <= 500:
        raise ValidationError("Comment text must be 1-500 characters")
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise ValidationError("Rating must be an integer between 1 and 5")
    return text

async def _mutate_comments(db, recipe_id: Any,
                           mutate: Callable[[List[Dict[str, Any]]], List[Dict[str, Any]]]) -> Dict[str, Any]:
    oid = to_object_id(recipe_id, "recipe id")
    recipes = db["recipes"]
    for attempt in range(MAX_ATTEMPTS):
        doc = require(await recipes.find_one({"_id": oid}, {"comments": 1, "version": 1}), "Recipe")
        comments = mutate([dict(c) for c in (doc.get("comments") or [])])
        avg = average_rating(comments)
        res = await recipes.update_one(
            {"_id": oid, "version": doc.get("version")},
            {
                "$set": {"comments": comments, "averageRating": avg, "updatedAt": datetime.utcnow()},
                "$inc": {"version": 1},
            },
        )
        if res.matched_count:
            return {"comments": await comments_out(db, comments), "averageRating": avg}
        log.info("recipe %s changed concurrently, retry %d", recipe_id, attempt + 1)
    raise ServerError("Recipe is being modified concurrently, please try again")

def _find_comment(comments: List[Dict[str, Any]], comment_id: Any) -> int:
    cid = to_object_id(comment_id, "comment id")
    for i, c in enumerate(comments):
        if c.get("_id") == cid:
            return i
    raise NotFoundError("Comment not found")

async def add_comment(db, recipe_id: Any, author_id: Any, text: str, rating: int) -> Dict[str, Any]:
    text = _check_comment(text, rating)
    user = to_object_id(author_id, "user id")

    def _add(comments):
        comments.append(CommentDoc(user=user, text=text, rating=rating).to_mongo())
        return comments

    return await _mutate_comments(db, recipe_id, _add)

async def update_comment(db, recipe_id: Any, comment_id: Any, author_id: Any,
                         text: str, rating: int) -> Dict[str, Any]:
    text = _check_comment(text, rating)

    def _update(comments):
        i = _find_comment(comments, comment_id)
        # 댓글 작성자만, 레시피 작성자라도 불가
        _ensure_owner(comments[i].get("user"), author_id, "comment")
        comments[i].update({"text": text, "rating": rating, "updatedAt": datetime.utcnow()})
        return comments

    return await _mutate_comments(db, recipe_id, _update)

async def delete_comment(db, recipe_id: Any, comment_id: Any, author_id: Any) -> Dict[str, Any]:
    def _delete(comments):
        i = _find_comment(comments, comment_id)
        _ensure_owner(comments[i].get("user"), author_id, "comment")
        del comments[i]
        return comments

    return await _mutate_comments(db, recipe_id, _delete)

async def list_comments(db, recipe_id: Any) -> List[Dict[str, Any]]:
    oid = to_object_id(recipe_id, "recipe id")
    doc = require(await db["recipes"].find_one({"_id": oid}, {"comments": 1}), "Recipe")
    return await comments_out(db, doc.get("comments") or [])
