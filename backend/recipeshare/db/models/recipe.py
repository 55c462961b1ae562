# 레시피 저장 문서 스키마
from datetime import datetime
from typing import List, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field

class Nutrition(BaseModel):
    calories: Optional[float] = None
    protein: Optional[float] = None
    carbs: Optional[float] = None
    fat: Optional[float] = None

class CommentDoc(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True, populate_by_name=True)

    id: ObjectId = Field(default_factory=ObjectId, alias="_id")
    user: ObjectId
    text: str
    rating: int
    createdAt: datetime = Field(default_factory=datetime.utcnow)
    updatedAt: datetime = Field(default_factory=datetime.utcnow)

    def to_mongo(self) -> dict:
        return self.model_dump(by_alias=True)

class RecipeDoc(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    title: str
    description: str = ""
    ingredients: List[str]
    steps: List[str]
    category: str
    cookTime: int
    imageUrls: List[str] = Field(default_factory=list)
    diet: Optional[str] = None
    cuisine: Optional[str] = None
    difficulty: Optional[str] = None
    prepTime: Optional[int] = None
    nutrition: Optional[Nutrition] = None
    tags: List[str] = Field(default_factory=list)

    author: ObjectId
    likes: List[str] = Field(default_factory=list)
    comments: List[dict] = Field(default_factory=list)
    averageRating: float = 0
    version: int = 0  # 댓글 변경 시 낙관적 동시성 토큰
    createdAt: datetime = Field(default_factory=datetime.utcnow)
    updatedAt: datetime = Field(default_factory=datetime.utcnow)

    def to_mongo(self) -> dict:
        return self.model_dump()
