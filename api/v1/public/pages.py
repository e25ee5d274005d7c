"""
Public page endpoints - no authentication.

Both endpoints read through the cache; a miss loads the published page
and, for HTML, renders it. Unknown or unpublished slugs are 404 and are
never cached.
"""
from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from core.errors import ErrorCodes, http_error
from services.page_service import PageService, get_page_service

router = APIRouter()


@router.get("/{slug}/", response_class=HTMLResponse)
def get_public_page(slug: str, page_service: PageService = Depends(get_page_service)):
    """Rendered HTML of a published page."""
    html = page_service.render_public(slug)
    if html is None:
        raise http_error(ErrorCodes.PAGE_NOT_FOUND)
    return HTMLResponse(html)


@router.get("/{slug}/document/")
def get_public_document(slug: str, page_service: PageService = Depends(get_page_service)):
    """Content document of a published page, for client-side renderers."""
    document = page_service.public_document(slug)
    if document is None:
        raise http_error(ErrorCodes.PAGE_NOT_FOUND)
    return document
