# 목록 조회용 쿼리 파라미터 정규화 + Mongo 필터 생성
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from recipeshare.services.utils import contains_regex, exact_ci_regex

DEFAULT_LIMIT = 20
MAX_LIMIT = 100

@dataclass
class RecipeFilters:
    search: Optional[str] = None       # 제목/설명 부분일치
    category: Optional[str] = None
    ingredient: Optional[str] = None   # 재료 중 하나라도 부분일치
    diet: Optional[str] = None
    cuisine: Optional[str] = None
    maxPrepTime: Optional[int] = None
    difficulty: Optional[str] = None

def _as_int(v: Any) -> Optional[int]:
    try:
        return int(v)
    except (TypeError, ValueError):
        return None

def clamp_pagination(skip: Any = 0, limit: Any = DEFAULT_LIMIT) -> Tuple[int, int]:
    """skip은 0 이상(잘못되면 0), limit은 [1,100] (잘못되거나 1 미만이면 20, 100 초과면 100)."""
    s = _as_int(skip)
    if s is None or s < 0:
        s = 0
    n = _as_int(limit)
    if n is None or n < 1:
        n = DEFAULT_LIMIT
    elif n > MAX_LIMIT:
        n = MAX_LIMIT
    return s, n

def build_recipe_query(f: RecipeFilters) -> Dict[str, Any]:
    q: Dict[str, Any] = {}
    if f.search and f.search.strip():
        rx = contains_regex(f.search)
        q["$or"] = [{"title": rx}, {"description": rx}]
    if f.category and f.category.strip():
        q["category"] = exact_ci_regex(f.category)
    if f.ingredient and f.ingredient.strip():
        q["ingredients"] = contains_regex(f.ingredient)
    if f.diet and f.diet.strip():
        q["diet"] = exact_ci_regex(f.diet)
    if f.cuisine and f.cuisine.strip():
        q["cuisine"] = exact_ci_regex(f.cuisine)
    if f.difficulty and f.difficulty.strip():
        q["difficulty"] = f.difficulty.strip().lower()
    if f.maxPrepTime is not None and f.maxPrepTime >= 0:
        q["prepTime"] = {"$lte": f.maxPrepTime}
    return q
