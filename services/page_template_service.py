"""Page template catalogue with cached public reads"""

from typing import Optional
from uuid import UUID

from fastapi import Depends

from core.settings import settings
from models import PageTemplate
from repositories.page_template_repository import PageTemplateRepository, get_page_template_repository
from schemas.page_template import PageTemplateCreate, PageTemplateRead, PageTemplateUpdate
from services.cache_service import CacheKeys, CacheService, get_cache_service
from services.content_validation_service import ContentValidator
from services.page_service import check_content_size


class PageTemplateService:

    def __init__(
        self,
        templates: PageTemplateRepository,
        cache: CacheService,
        validator: Optional[ContentValidator] = None,
    ):
        self.templates = templates
        self.cache = cache
        self.validator = validator or ContentValidator()

    def list_active(self) -> list[dict]:
        def load() -> list[dict]:
            return [_to_json(template) for template in self.templates.get_all()]

        return self.cache.get_or_set(CacheKeys.page_templates_all(), settings.CACHE_TTL_TEMPLATES, load)

    def get_active(self, slug: str) -> dict:
        cached = self.cache.get(CacheKeys.page_template(slug))
        if cached is not None:
            return cached

        # Raises 404 for unknown or inactive templates; misses are not cached
        template = _to_json(self.templates.get_active_by_slug(slug))
        self.cache.set(CacheKeys.page_template(slug), template, settings.CACHE_TTL_TEMPLATES)
        return template

    def list_all(self) -> list[PageTemplate]:
        return self.templates.get_all(include_inactive=True)

    def create(self, data: PageTemplateCreate) -> PageTemplate:
        check_content_size(data.content_json)
        content = self.validator.validate(data.content_json)
        template = self.templates.create(data, content)
        self._invalidate()
        return template

    def update(self, template_id: UUID, data: PageTemplateUpdate) -> PageTemplate:
        content = None
        if data.content_json is not None:
            check_content_size(data.content_json)
            content = self.validator.validate(data.content_json)
        template = self.templates.update(template_id, data, content)
        self._invalidate()
        return template

    def delete(self, template_id: UUID) -> None:
        self.templates.delete(template_id)
        self._invalidate()

    def _invalidate(self) -> None:
        # Drops the catalogue lists and every per-slug entry
        self.cache.invalidate_pattern(CacheKeys.PAGE_TEMPLATES)
        self.cache.invalidate_pattern(CacheKeys.PAGE_TEMPLATE)


def _to_json(template: PageTemplate) -> dict:
    return PageTemplateRead.model_validate(template).model_dump(mode="json")


def get_page_template_service(
    templates: PageTemplateRepository = Depends(get_page_template_repository),
    cache: CacheService = Depends(get_cache_service),
) -> PageTemplateService:
    return PageTemplateService(templates, cache)
