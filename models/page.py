import uuid
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, DocumentJSON
from models.page_template import empty_document


class Page(Base):
    """
    An author's page. The whole body lives in `content_json` as one
    content document that is replaced wholesale on every save.
    """
    __tablename__ = "pages"

    # Identity comes from the auth provider's `sub` claim
    owner_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    content_json: Mapped[dict] = mapped_column(DocumentJSON, nullable=False, default=empty_document)

    # Provenance only; deleting the template keeps the page
    template_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("page_templates.id", ondelete="SET NULL"),
        nullable=True,
    )

    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    remove_branding: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
