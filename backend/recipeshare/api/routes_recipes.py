# app/api/routes_recipes.py
# 레시피 목록/상세/작성/수정/삭제 + 좋아요 + 댓글(평점)
# 쓰기 라우트는 모두 IP당 요청 제한 (레시피 쓰기/좋아요: RATE_LIMIT_RECIPE_WRITE, 댓글: RATE_LIMIT_COMMENT)

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Request
from slowapi import Limiter

from recipeshare.core.config import Settings
from recipeshare.core.deps import current_account_id
from recipeshare.core.ratelimit import WRITE_MSG
from recipeshare.db.init import get_db
from recipeshare.models.schemas import CommentIn, RecipeIn, RecipeUpdateIn
from recipeshare.services import recipes
from recipeshare.services.filters import RecipeFilters


def build_router(limiter: Limiter, cfg: Settings) -> APIRouter:
    # 메인 라우터
    router = APIRouter(prefix="/recipes", tags=["recipes"])
    write_limit = limiter.limit(cfg.RATE_LIMIT_RECIPE_WRITE, error_message=WRITE_MSG)
    comment_limit = limiter.limit(cfg.RATE_LIMIT_COMMENT, error_message=WRITE_MSG)

    # ------------------------------
    # 조회
    # ------------------------------

    # skip/limit은 문자열로 받아 서비스에서 보정(잘못된 값도 400이 아니라 기본값)
    @router.get("", response_model=List[Dict[str, Any]])
    async def list_recipes(
        search: Optional[str] = None,
        category: Optional[str] = None,
        ingredient: Optional[str] = None,
        diet: Optional[str] = None,
        cuisine: Optional[str] = None,
        maxPrepTime: Optional[int] = Query(default=None, ge=0),
        difficulty: Optional[str] = None,
        skip: Optional[str] = None,
        limit: Optional[str] = None,
        db=Depends(get_db),
    ):
        filters = RecipeFilters(
            search=search, category=category, ingredient=ingredient, diet=diet,
            cuisine=cuisine, maxPrepTime=maxPrepTime, difficulty=difficulty,
        )
        return await recipes.list_recipes(db, filters, skip=skip, limit=limit)

    @router.get("/{rid}")
    async def get_recipe(rid: str, db=Depends(get_db)):
        return await recipes.get_recipe(db, rid)

    # ------------------------------
    # 작성/수정/삭제 (작성자만)
    # ------------------------------

    @router.post("", status_code=201)
    @write_limit
    async def create_recipe(
        request: Request,
        payload: RecipeIn,
        account_id: str = Depends(current_account_id),
        db=Depends(get_db),
    ):
        return await recipes.create_recipe(db, account_id, payload.changes())

    # null을 보낸 선택 필드(diet, cuisine, difficulty, prepTime, nutrition)는 삭제
    @router.put("/{rid}")
    @write_limit
    async def update_recipe(
        request: Request,
        rid: str,
        payload: RecipeUpdateIn,
        account_id: str = Depends(current_account_id),
        db=Depends(get_db),
    ):
        return await recipes.update_recipe(db, rid, account_id, payload.changes(), payload.cleared())

    @router.delete("/{rid}")
    @write_limit
    async def delete_recipe(
        request: Request,
        rid: str,
        account_id: str = Depends(current_account_id),
        db=Depends(get_db),
    ):
        await recipes.delete_recipe(db, rid, account_id)
        return {"msg": "Recipe deleted"}

    @router.post("/{rid}/like")
    @write_limit
    async def toggle_like(
        request: Request,
        rid: str,
        account_id: str = Depends(current_account_id),
        db=Depends(get_db),
    ):
        return await recipes.toggle_like(db, rid, account_id)

    # ------------------------------
    # 댓글/평점
    # ------------------------------

    @router.get("/{rid}/comments")
    async def list_comments(rid: str, db=Depends(get_db)):
        return await recipes.list_comments(db, rid)

    @router.post("/{rid}/comments", status_code=201)
    @comment_limit
    async def add_comment(
        request: Request,
        rid: str,
        payload: CommentIn,
        account_id: str = Depends(current_account_id),
        db=Depends(get_db),
    ):
        return await recipes.add_comment(db, rid, account_id, payload.text, payload.rating)

    @router.put("/{rid}/comments/{cid}")
    @comment_limit
    async def update_comment(
        request: Request,
        rid: str,
        cid: str,
        payload: CommentIn,
        account_id: str = Depends(current_account_id),
        db=Depends(get_db),
    ):
        return await recipes.update_comment(db, rid, cid, account_id, payload.text, payload.rating)

    @router.delete("/{rid}/comments/{cid}")
    @comment_limit
    async def delete_comment(
        request: Request,
        rid: str,
        cid: str,
        account_id: str = Depends(current_account_id),
        db=Depends(get_db),
    ):
        return await recipes.delete_comment(db, rid, cid, account_id)

    return router
