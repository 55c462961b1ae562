# app/api/routes_user.py
# 프로필 / 내 레시피 / 저장 컬렉션: 모두 로그인 필요

from typing import Optional

from fastapi import APIRouter, Depends, Request
from slowapi import Limiter

from recipeshare.core.config import Settings
from recipeshare.core.deps import current_account_id
from recipeshare.core.ratelimit import WRITE_MSG
from recipeshare.db.init import get_db
from recipeshare.models.schemas import ProfileUpdateIn, SaveRecipeIn
from recipeshare.services import library


def build_router(limiter: Limiter, cfg: Settings) -> APIRouter:
    router = APIRouter(prefix="/user", tags=["user"])
    write_limit = limiter.limit(cfg.RATE_LIMIT_RECIPE_WRITE, error_message=WRITE_MSG)

    @router.get("/profile")
    async def get_profile(account_id: str = Depends(current_account_id), db=Depends(get_db)):
        return await library.get_profile(db, account_id)

    @router.put("/profile")
    async def update_profile(
        payload: ProfileUpdateIn,
        account_id: str = Depends(current_account_id),
        db=Depends(get_db),
    ):
        return await library.update_profile(db, account_id, payload.model_dump(exclude_unset=True))

    @router.get("/recipes")
    async def my_recipes(
        skip: Optional[str] = None,
        limit: Optional[str] = None,
        account_id: str = Depends(current_account_id),
        db=Depends(get_db),
    ):
        return await library.my_recipes(db, account_id, skip=skip, limit=limit)

    @router.get("/saved")
    async def list_saved(account_id: str = Depends(current_account_id), db=Depends(get_db)):
        return await library.list_saved(db, account_id)

    @router.post("/save/{rid}")
    @write_limit
    async def save_recipe(
        request: Request,
        rid: str,
        payload: Optional[SaveRecipeIn] = None,
        account_id: str = Depends(current_account_id),
        db=Depends(get_db),
    ):
        collection = payload.collection if payload else "General"
        return await library.save_recipe(db, account_id, rid, collection)

    @router.post("/unsave/{rid}")
    @write_limit
    async def unsave_recipe(
        request: Request,
        rid: str,
        account_id: str = Depends(current_account_id),
        db=Depends(get_db),
    ):
        return await library.unsave_recipe(db, account_id, rid)

    return router
