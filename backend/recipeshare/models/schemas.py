# 요청 바디 스키마: 엔드포인트별로 명시적으로 두고 경계에서 검증한다
from __future__ import annotations

import re
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
URL_RE = re.compile(r"^https?://[^\s/$.?#].[^\s]*$", re.I)
TAG_RE = re.compile(r"<[^>]*>?")

MIN_PASSWORD = 6

# 공통 유틸
def sanitize_string(s: str) -> str:
    # HTML 태그 제거 + trim
    return TAG_RE.sub("", s or "").strip()

def normalize_email(s: str) -> str:
    return (s or "").strip().lower()

def _check_len(v: str, lo: int, hi: int, label: str) -> str:
    if len(v) < lo:
        raise ValueError(f"{label} must be at least {lo} characters long")
    if len(v) > hi:
        raise ValueError(f"{label} must be at most {hi} characters long")
    return v

def _clean_lines(v: List[str], label: str) -> List[str]:
    out = [sanitize_string(str(x)) for x in (v or [])]
    if not out:
        raise ValueError(f"At least one {label} is required")
    if any(not s for s in out):
        raise ValueError(f"Each {label} must be a non-empty string")
    return out

def _check_email(v: str) -> str:
    v = normalize_email(v)
    if not EMAIL_RE.match(v):
        raise ValueError("Invalid email format")
    return v

def _check_url(v: str) -> str:
    v = (v or "").strip()
    if not URL_RE.match(v):
        raise ValueError("Invalid URL")
    return v


# ------------------------------
# 인증
# ------------------------------

class RegisterIn(BaseModel):
    name: str
    email: str
    password: str

    @field_validator("name")
    @classmethod
    def _v_name(cls, v):
        return _check_len(sanitize_string(v), 2, 50, "Name")

    @field_validator("email")
    @classmethod
    def _v_email(cls, v):
        return _check_email(v)

    @field_validator("password")
    @classmethod
    def _v_password(cls, v):
        if len(v) < MIN_PASSWORD:
            raise ValueError(f"Password must be at least {MIN_PASSWORD} characters long")
        return v

class LoginIn(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _v_email(cls, v):
        return _check_email(v)

class RefreshTokenIn(BaseModel):
    refreshToken: str

class LogoutIn(BaseModel):
    # 없으면 서비스에서 MissingRefreshToken(400)
    refreshToken: Optional[str] = None


# ------------------------------
# 레시피
# ------------------------------

class NutritionIn(BaseModel):
    calories: Optional[float] = Field(default=None, ge=0)
    protein: Optional[float] = Field(default=None, ge=0)
    carbs: Optional[float] = Field(default=None, ge=0)
    fat: Optional[float] = Field(default=None, ge=0)

Difficulty = Literal["easy", "medium", "hard"]

# 수정 시 null로 지울 수 있는 선택 필드
CLEARABLE_FIELDS = ("diet", "cuisine", "difficulty", "prepTime", "nutrition")

class RecipeUpdateIn(BaseModel):
    # author/comments/averageRating/likes 등은 받지 않는다 (extra 무시)
    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    description: Optional[str] = None
    ingredients: Optional[List[str]] = None
    steps: Optional[List[str]] = None
    category: Optional[str] = None
    cookTime: Optional[int] = Field(default=None, ge=1, le=10080)  # 최대 1주일(분)
    imageUrls: Optional[List[str]] = None
    diet: Optional[str] = None
    cuisine: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    prepTime: Optional[int] = Field(default=None, ge=0, le=10080)
    nutrition: Optional[NutritionIn] = None
    tags: Optional[List[str]] = None

    @field_validator("title")
    @classmethod
    def _v_title(cls, v):
        return None if v is None else _check_len(sanitize_string(v), 3, 100, "Title")

    @field_validator("description")
    @classmethod
    def _v_description(cls, v):
        return None if v is None else _check_len(sanitize_string(v), 0, 2000, "Description")

    @field_validator("ingredients")
    @classmethod
    def _v_ingredients(cls, v):
        return None if v is None else _clean_lines(v, "ingredient")

    @field_validator("steps")
    @classmethod
    def _v_steps(cls, v):
        return None if v is None else _clean_lines(v, "step")

    @field_validator("category")
    @classmethod
    def _v_category(cls, v):
        return None if v is None else _check_len(sanitize_string(v), 2, 50, "Category")

    @field_validator("diet", "cuisine")
    @classmethod
    def _v_short(cls, v):
        return None if v is None else _check_len(sanitize_string(v), 0, 50, "Value")

    @field_validator("imageUrls")
    @classmethod
    def _v_images(cls, v):
        return None if v is None else [_check_url(u) for u in v]

    @field_validator("tags")
    @classmethod
    def _v_tags(cls, v):
        if v is None:
            return None
        tags = [_check_len(sanitize_string(t), 1, 30, "Tag") for t in v]
        return list(dict.fromkeys(tags))

    def changes(self) -> dict:
        # 보낸 필드만, null은 제외 (null은 cleared()로)
        return self.model_dump(exclude_unset=True, exclude_none=True)

    def cleared(self) -> List[str]:
        # 선택 필드에 명시적으로 null을 보내면 삭제. 필수 필드의 null은 무시
        sent = self.model_dump(exclude_unset=True)
        return [k for k in CLEARABLE_FIELDS if k in sent and sent[k] is None]

class RecipeIn(RecipeUpdateIn):
    title: str
    ingredients: List[str]
    steps: List[str]
    category: str
    cookTime: int = Field(ge=1, le=10080)


# ------------------------------
# 댓글/평점
# ------------------------------

class CommentIn(BaseModel):
    text: str
    rating: int = Field(ge=1, le=5, strict=True)

    @field_validator("text")
    @classmethod
    def _v_text(cls, v):
        return _check_len(sanitize_string(v), 1, 500, "Comment text")


# ------------------------------
# 사용자
# ------------------------------

class ProfileUpdateIn(BaseModel):
    name: Optional[str] = None
    avatar: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _v_name(cls, v):
        return None if v is None else _check_len(sanitize_string(v), 2, 50, "Name")

    @field_validator("avatar")
    @classmethod
    def _v_avatar(cls, v):
        if v is None or v == "":
            return v
        return _check_url(v)

class SaveRecipeIn(BaseModel):
    collection: str = "General"

    @field_validator("collection")
    @classmethod
    def _v_collection(cls, v):
        return _check_len(sanitize_string(v), 1, 50, "Collection")
