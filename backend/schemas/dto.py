from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel

# single-recipe endpoints take a bare JSON array of names
IngredientNames = TypeAdapter(List[str])

SortKey = Literal["matchPercentage", "rating", "viewCount", "createdAt"]

_SORT_KEYS = {"matchpercentage": "matchPercentage", "rating": "rating",
              "viewcount": "viewCount", "createdat": "createdAt"}

class CamelModel(BaseModel):
    """Snake_case attributes, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

class RecipeSearchRequest(CamelModel):
    available_ingredients: List[str] = Field(min_length=1)
    min_match_percentage: float = Field(default=0.0, ge=0.0, le=100.0)
    exact_match_only: bool = False
    category_ids: Optional[List[int]] = None
    sort_by: SortKey = "matchPercentage"
    sort_direction: Literal["asc", "desc"] = "desc"

    @field_validator("available_ingredients")
    @classmethod
    def non_blank(cls, v):
        kept = [s for s in v if s and s.strip()]
        if not kept:
            raise ValueError("At least one ingredient must be selected")
        return kept

    @field_validator("sort_by", mode="before")
    @classmethod
    def sort_key(cls, v):
        if isinstance(v, str):
            return _SORT_KEYS.get(v.strip().lower(), v)
        return v

    @field_validator("sort_direction", mode="before")
    @classmethod
    def direction(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

class RecipeMatch(CamelModel):
    id: Optional[int] = None
    title: Optional[str] = None
    description: Optional[str] = None
    prep_time: Optional[int] = None
    cook_time: Optional[int] = None
    servings: Optional[int] = None
    difficulty: Optional[str] = None
    average_rating: Optional[float] = None
    review_count: int = 0
    view_count: int = 0
    created_at: Optional[datetime] = None
    author_username: Optional[str] = None
    author_display_name: Optional[str] = None
    primary_image_url: Optional[str] = None
    match_percentage: float = 0.0
    total_ingredients: int = 0
    matched_ingredients: int = 0
    missing_ingredients: List[str] = Field(default_factory=list)
    available_ingredients: List[str] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)

class MatchPage(CamelModel):
    content: List[RecipeMatch]
    current_page: int
    total_items: int
    total_pages: int

class RecipeMatchSummary(CamelModel):
    recipe_id: int
    match_percentage: float
    missing_ingredients: List[str]
    available_ingredients: List[str]
    total_missing_count: int
    total_available_count: int

class MissingIngredientsResponse(CamelModel):
    recipe_id: int
    missing_ingredients: List[str]
    missing_count: int

class IngredientSearchItem(CamelModel):
    name: str
    recipe_count: int

class LikeRequest(CamelModel):
    user_id: int

class LikeResponse(CamelModel):
    recipe_id: int
    liked: bool
    like_count: int

class NotificationItem(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    message: str
    notification_type: str
    entity_id: Optional[int] = None
    is_read: bool
    created_at: datetime
    read_at: Optional[datetime] = None
    batch_count: int = 1
    last_batch_update: Optional[datetime] = None
    batch_actors: List[str] = Field(default_factory=list)

    @field_validator("batch_actors", mode="before")
    @classmethod
    def actors(cls, v):
        return v or []

class NotificationPage(CamelModel):
    content: List[NotificationItem]
    current_page: int
    total_items: int
    total_pages: int

class NotificationSummary(CamelModel):
    unread_count: int
    read_count: int
    total_notifications: int
