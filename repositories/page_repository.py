from datetime import datetime, timezone
from uuid import UUID

from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.errors import ErrorCodes, http_error
from core.logging_config import get_logger
from db.session import get_db
from models import Page, PageTemplate
from schemas.content import ContentDocument
from schemas.page import PageUpdate

logger = get_logger(__name__)


class PageRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_all_by_owner(self, owner_id: str) -> list[Page]:
        return (
            self.db.query(Page)
            .filter(Page.owner_id == owner_id)
            .order_by(Page.created_at.desc())
            .all()
        )

    def get_or_404(self, page_id: UUID, owner_id: str) -> Page:
        """Get a page owned by `owner_id`; other owners' pages look missing."""
        page = (
            self.db.query(Page)
            .filter(Page.id == page_id, Page.owner_id == owner_id)
            .first()
        )
        if not page:
            raise http_error(ErrorCodes.PAGE_NOT_FOUND)
        return page

    def get_by_slug(self, slug: str) -> Page | None:
        return self.db.query(Page).filter(Page.slug == slug).first()

    def get_published_by_slug(self, slug: str) -> Page | None:
        return (
            self.db.query(Page)
            .filter(Page.slug == slug, Page.is_published.is_(True))
            .first()
        )

    def load_document(self, page_id: UUID) -> ContentDocument | None:
        page = self.db.get(Page, page_id)
        if page is None:
            return None
        return ContentDocument.model_validate(page.content_json)

    def create(
        self,
        owner_id: str,
        title: str,
        slug: str,
        content: ContentDocument,
        template: PageTemplate | None = None,
        remove_branding: bool = False,
    ) -> Page:
        self._ensure_slug_available(slug)

        page = Page(
            owner_id=owner_id,
            title=title,
            slug=slug,
            content_json=content.to_json(),
            template_id=template.id if template else None,
            remove_branding=remove_branding,
        )

        self.db.add(page)
        self._commit()
        self.db.refresh(page)

        return page

    def update_settings(self, page: Page, data: PageUpdate) -> Page:
        if data.slug is not None and data.slug != page.slug:
            self._ensure_slug_available(data.slug)
            page.slug = data.slug

        if data.title is not None:
            page.title = data.title
        if data.is_published is not None:
            page.is_published = data.is_published

        page.updated_at = datetime.now(timezone.utc)
        self._commit()
        self.db.refresh(page)

        return page

    def save_document(self, page: Page, content: ContentDocument, remove_branding: bool | None = None) -> Page:
        """Replace the page's document wholesale. `content` must already be validated."""
        page.content_json = content.to_json()
        if remove_branding is not None:
            page.remove_branding = remove_branding
        page.updated_at = datetime.now(timezone.utc)

        self._commit()
        self.db.refresh(page)

        return page

    def delete(self, page: Page) -> None:
        self.db.delete(page)
        self._commit()

    def _ensure_slug_available(self, slug: str) -> None:
        if self.get_by_slug(slug):
            raise http_error(ErrorCodes.PAGE_SLUG_TAKEN, f"Slug '{slug}' is already in use")

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Page write failed, rolled back")
            raise


def get_page_repository(db: Session = Depends(get_db)) -> PageRepository:
    return PageRepository(db)
