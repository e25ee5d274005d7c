from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from models.page_template import PageTemplateCategory
from utils.slug import SLUG_PATTERN


class PageTemplateCreate(BaseModel):
    """Schema for creating a page template (admin)."""
    name: str = Field(..., min_length=1, max_length=100)
    slug: str = Field(..., min_length=1, max_length=50, pattern=SLUG_PATTERN)
    description: Optional[str] = Field(None, max_length=255)
    thumbnail_url: Optional[str] = Field(None, max_length=500)
    category: PageTemplateCategory = PageTemplateCategory.OTHER
    # Raw document; checked by the content validator so errors carry a path
    content_json: dict[str, Any] = Field(default_factory=lambda: {"blocks": []})
    default_title: Optional[str] = Field(None, max_length=255)
    is_premium: bool = False
    order: int = 0


class PageTemplateUpdate(BaseModel):
    """Schema for updating a page template (admin). Unset fields are kept."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    slug: Optional[str] = Field(None, min_length=1, max_length=50, pattern=SLUG_PATTERN)
    description: Optional[str] = Field(None, max_length=255)
    thumbnail_url: Optional[str] = Field(None, max_length=500)
    category: Optional[PageTemplateCategory] = None
    content_json: Optional[dict[str, Any]] = None
    default_title: Optional[str] = Field(None, max_length=255)
    is_premium: Optional[bool] = None
    order: Optional[int] = None
    is_active: Optional[bool] = None

    model_config = {"from_attributes": True}


class PageTemplateRead(BaseModel):
    id: UUID
    name: str
    slug: str
    description: Optional[str]
    thumbnail_url: Optional[str]
    category: PageTemplateCategory
    content_json: dict[str, Any]
    default_title: Optional[str]
    is_premium: bool
    order: int
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
