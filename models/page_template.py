import enum
from typing import Optional

from sqlalchemy import Boolean, Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, DocumentJSON


class PageTemplateCategory(str, enum.Enum):
    CV = "cv"
    LANDING = "landing"
    LINKS = "links"
    OTHER = "other"


def empty_document() -> dict:
    return {"blocks": []}


class PageTemplate(Base):
    """
    Administrator-curated starting point for new pages.

    Authors only ever read a template: instantiating one deep-copies
    `content_json` into the new page, the template row is never written.
    """
    __tablename__ = "page_templates"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    slug: Mapped[str] = mapped_column(String(50), nullable=False, unique=True, index=True)
    thumbnail_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    category: Mapped[PageTemplateCategory] = mapped_column(
        Enum(PageTemplateCategory, name="page_template_category", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=PageTemplateCategory.OTHER,
    )
    content_json: Mapped[dict] = mapped_column(DocumentJSON, nullable=False, default=empty_document)
    default_title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    is_premium: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
