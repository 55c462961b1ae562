# 계정 저장 문서 스키마
from datetime import datetime
from typing import List

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_ROLE = "user"
DEFAULT_COLLECTION = "General"

class SavedRecipe(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    recipe: ObjectId
    collection: str = DEFAULT_COLLECTION
    savedAt: datetime = Field(default_factory=datetime.utcnow)

class AccountDoc(BaseModel):
    email: str          # 소문자/trim 정규화된 값
    name: str
    password: str       # bcrypt 해시만 저장
    avatar: str = ""
    roles: List[str] = Field(default_factory=lambda: [DEFAULT_ROLE], min_length=1)
    refreshTokens: List[str] = Field(default_factory=list)
    savedRecipes: List[dict] = Field(default_factory=list)
    createdAt: datetime = Field(default_factory=datetime.utcnow)
    updatedAt: datetime = Field(default_factory=datetime.utcnow)
