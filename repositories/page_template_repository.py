from datetime import datetime, timezone
from uuid import UUID

from fastapi import Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.errors import ErrorCodes, http_error
from core.logging_config import get_logger
from db.session import get_db
from models import PageTemplate
from schemas.content import ContentDocument
from schemas.page_template import PageTemplateCreate, PageTemplateUpdate

logger = get_logger(__name__)


class PageTemplateRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_all(self, include_inactive: bool = False) -> list[PageTemplate]:
        """Templates ordered for the catalogue; inactive ones only for admins."""
        query = self.db.query(PageTemplate)
        if not include_inactive:
            query = query.filter(PageTemplate.is_active.is_(True))
        return query.order_by(PageTemplate.order, PageTemplate.name).all()

    def get_by_id(self, template_id: UUID) -> PageTemplate:
        template = self.db.query(PageTemplate).filter(PageTemplate.id == template_id).first()
        if not template:
            raise http_error(ErrorCodes.PAGE_TEMPLATE_NOT_FOUND)
        return template

    def get_by_slug(self, slug: str) -> PageTemplate | None:
        return self.db.query(PageTemplate).filter(PageTemplate.slug == slug).first()

    def get_active_by_slug(self, slug: str) -> PageTemplate:
        template = (
            self.db.query(PageTemplate)
            .filter(PageTemplate.slug == slug, PageTemplate.is_active.is_(True))
            .first()
        )
        if not template:
            raise http_error(ErrorCodes.PAGE_TEMPLATE_NOT_FOUND)
        return template

    def create(self, data: PageTemplateCreate, content: ContentDocument) -> PageTemplate:
        """Create a template. `content` must already be validated."""
        if self.get_by_slug(data.slug):
            raise HTTPException(
                status_code=400,
                detail=f"Template with slug '{data.slug}' already exists."
            )

        template = PageTemplate(
            name=data.name,
            slug=data.slug,
            description=data.description,
            thumbnail_url=data.thumbnail_url,
            category=data.category,
            content_json=content.to_json(),
            default_title=data.default_title,
            is_premium=data.is_premium,
            order=data.order,
        )

        self.db.add(template)
        self._commit()
        self.db.refresh(template)

        return template

    def update(self, template_id: UUID, data: PageTemplateUpdate, content: ContentDocument | None = None) -> PageTemplate:
        """Update a template. Fields left unset in `data` keep their value."""
        template = self.get_by_id(template_id)

        if data.slug is not None and data.slug != template.slug:
            existing = self.get_by_slug(data.slug)
            if existing and existing.id != template_id:
                raise HTTPException(
                    status_code=400,
                    detail=f"Template with slug '{data.slug}' already exists."
                )

        for field, value in data.model_dump(exclude_unset=True, exclude={"content_json"}).items():
            if value is not None:
                setattr(template, field, value)

        if content is not None:
            template.content_json = content.to_json()

        template.updated_at = datetime.now(timezone.utc)
        self._commit()
        self.db.refresh(template)

        return template

    def delete(self, template_id: UUID) -> PageTemplate:
        template = self.get_by_id(template_id)
        self.db.delete(template)
        self._commit()
        return template

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Page template write failed, rolled back")
            raise


def get_page_template_repository(db: Session = Depends(get_db)) -> PageTemplateRepository:
    return PageTemplateRepository(db)
