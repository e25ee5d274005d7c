"""Page authoring and publishing - ties storage, validation, rendering and caching together"""

import json
from typing import Any, Optional

from fastapi import Depends
from pydantic import ValidationError

from core.errors import ErrorCodes, http_error
from core.logging_config import get_logger
from core.settings import settings
from models import Page
from repositories.page_repository import PageRepository, get_page_repository
from repositories.page_template_repository import PageTemplateRepository, get_page_template_repository
from schemas.content import ContentDocument
from schemas.page import PageCreate, PageRead, PageUpdate
from services.cache_service import CacheKeys, CacheService, get_cache_service
from services.content_validation_service import ContentValidator
from services.render_service import RenderDispatcher, RenderOptions, get_render_dispatcher
from services.template_instantiation_service import instantiate
from utils.get_current_account import CurrentAccount
from utils.slug import slugify

logger = get_logger(__name__)

DEFAULT_PAGE_TITLE = "New page"


def check_content_size(raw: Any) -> None:
    size = len(json.dumps(raw, default=str).encode("utf-8"))
    if size > settings.MAX_CONTENT_BYTES:
        raise http_error(
            ErrorCodes.PAGE_CONTENT_TOO_LARGE,
            f"Content is {size} bytes, the limit is {settings.MAX_CONTENT_BYTES}",
        )


def document_for_render(page: Page) -> ContentDocument:
    """Stored document of a page, tolerating records that no longer validate.

    Malformed block records are handed to the dispatcher as raw mappings,
    which renders them as placeholders.
    """
    raw = page.content_json or {}
    try:
        return ContentDocument.model_validate(raw)
    except ValidationError:
        logger.warning_ctx("Stored document does not validate, rendering leniently", page_slug=page.slug)
        blocks = raw.get("blocks") if isinstance(raw, dict) else None
        return ContentDocument.model_construct(blocks=blocks if isinstance(blocks, list) else [], meta=None)


def shell_options(page: Page, document: ContentDocument, **overrides: Any) -> RenderOptions:
    """Page shell options; `meta.lang` and `meta.description` fill the document head."""
    meta = document.meta or {}
    lang = meta.get("lang")
    description = meta.get("description")
    return RenderOptions(
        show_branding=not page.remove_branding,
        lang=lang if isinstance(lang, str) and lang else "en",
        description=description if isinstance(description, str) and description else None,
        **overrides,
    )


class PageService:

    def __init__(
        self,
        pages: PageRepository,
        templates: PageTemplateRepository,
        cache: CacheService,
        dispatcher: Optional[RenderDispatcher] = None,
        validator: Optional[ContentValidator] = None,
    ):
        self.pages = pages
        self.templates = templates
        self.cache = cache
        self.dispatcher = dispatcher or get_render_dispatcher()
        self.validator = validator or ContentValidator(self.dispatcher.registry)

    def validate(self, raw: Any) -> ContentDocument:
        check_content_size(raw)
        return self.validator.validate(raw)

    def list_pages(self, account: CurrentAccount) -> list[dict]:
        def load() -> list[dict]:
            pages = self.pages.get_all_by_owner(account.id)
            return [PageRead.model_validate(page).model_dump(mode="json") for page in pages]

        return self.cache.get_or_set(CacheKeys.owner_pages(account.id), settings.CACHE_TTL_PAGES, load)

    def create_page(self, account: CurrentAccount, data: PageCreate) -> Page:
        template = None
        if data.template_slug:
            template = self.templates.get_active_by_slug(data.template_slug)

        title = data.title or (template.default_title if template else None) or DEFAULT_PAGE_TITLE
        slug = data.slug or slugify(title)
        if not slug:
            raise http_error(ErrorCodes.PAGE_BLOCK_INVALID, "A slug could not be derived from the title")

        content = instantiate(template, title, slug)
        page = self.pages.create(
            owner_id=account.id,
            title=title,
            slug=slug,
            content=content,
            template=template,
            remove_branding=account.has_feature("removeBranding"),
        )
        self._invalidate(page.owner_id, page.slug)
        return page

    def save_content(self, page: Page, raw: Any, account: CurrentAccount) -> ContentDocument:
        content = self.validate(raw)
        self.pages.save_document(page, content, remove_branding=account.has_feature("removeBranding"))
        self._invalidate(page.owner_id, page.slug)
        logger.info_ctx("Saved page content", page_slug=page.slug, block_count=len(content.blocks))
        return content

    def update_settings(self, page: Page, data: PageUpdate) -> Page:
        old_slug = page.slug
        page = self.pages.update_settings(page, data)
        self._invalidate(page.owner_id, old_slug, page.slug)
        return page

    def delete_page(self, page: Page) -> None:
        owner_id, slug = page.owner_id, page.slug
        self.pages.delete(page)
        self._invalidate(owner_id, slug)

    def preview(self, page: Page) -> str:
        """Draft render for the authoring surface. Never cached."""
        document = document_for_render(page)
        options = shell_options(page, document, editable=True)
        return self.dispatcher.render_page(document, page.title, options)

    def render_public(self, slug: str) -> Optional[str]:
        def render() -> Optional[str]:
            page = self.pages.get_published_by_slug(slug)
            if page is None:
                return None
            document = document_for_render(page)
            options = shell_options(
                page,
                document,
                canonical_url=f"{settings.PUBLIC_BASE_URL.rstrip('/')}/{page.slug}",
            )
            return self.dispatcher.render_page(document, page.title, options)

        return self.cache.get_or_set(CacheKeys.page_html(slug), settings.CACHE_TTL_PAGES, render)

    def public_document(self, slug: str) -> Optional[dict]:
        def load() -> Optional[dict]:
            page = self.pages.get_published_by_slug(slug)
            if page is None:
                return None
            return page.content_json

        return self.cache.get_or_set(CacheKeys.page_document(slug), settings.CACHE_TTL_PAGES, load)

    def _invalidate(self, owner_id: str, *slugs: str) -> None:
        self.cache.invalidate_pattern(CacheKeys.owner_pages_prefix(owner_id))
        for slug in set(slugs):
            self.cache.invalidate_pattern(CacheKeys.page_prefix(slug))


def get_page_service(
    pages: PageRepository = Depends(get_page_repository),
    templates: PageTemplateRepository = Depends(get_page_template_repository),
    cache: CacheService = Depends(get_cache_service),
) -> PageService:
    return PageService(pages, templates, cache)
