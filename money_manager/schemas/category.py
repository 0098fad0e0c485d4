from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from money_manager.models.enums import CategoryKind


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=60)
    icon: str = "tag"
    kind: CategoryKind = Field(
        default=CategoryKind.expense,
        validation_alias=AliasChoices("kind", "type"),
    )


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=60)
    icon: Optional[str] = None


class CategoryRead(BaseModel):
    id: int
    name: str
    icon: str
    kind: CategoryKind
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class GroupedCategories(BaseModel):
    expense: List[CategoryRead] = []
    income: List[CategoryRead] = []
