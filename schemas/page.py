from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from utils.slug import SLUG_PATTERN


class PageCreate(BaseModel):
    """Schema for creating a page, optionally from a page template."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = Field(None, min_length=1, max_length=100, pattern=SLUG_PATTERN)
    template_slug: Optional[str] = Field(None, max_length=50)


class PageUpdate(BaseModel):
    """Schema for updating page settings. Content is saved separately."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = Field(None, min_length=1, max_length=100, pattern=SLUG_PATTERN)
    is_published: Optional[bool] = None

    model_config = {"from_attributes": True}


class PageRead(BaseModel):
    id: UUID
    owner_id: str
    title: str
    slug: str
    template_id: Optional[UUID]
    is_published: bool
    remove_branding: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
