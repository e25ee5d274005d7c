from typing import Any
from uuid import UUID

from fastapi import APIRouter, Body, Depends
from fastapi.responses import HTMLResponse
from starlette import status

from repositories.page_repository import PageRepository, get_page_repository
from schemas.page import PageCreate, PageRead, PageUpdate
from services.page_service import PageService, get_page_service
from utils.get_current_account import CurrentAccount, get_current_account

router = APIRouter()


@router.post("/validate/")
def validate_content(
    document: Any = Body(...),
    account: CurrentAccount = Depends(get_current_account),
    page_service: PageService = Depends(get_page_service),
):
    """Validate a content document without saving it."""
    return page_service.validate(document).to_json()


@router.get("/", response_model=list[PageRead])
def list_pages(
    account: CurrentAccount = Depends(get_current_account),
    page_service: PageService = Depends(get_page_service),
):
    """List the current account's pages."""
    return page_service.list_pages(account)


@router.post("/", response_model=PageRead, status_code=status.HTTP_201_CREATED)
def create_page(
    data: PageCreate,
    account: CurrentAccount = Depends(get_current_account),
    page_service: PageService = Depends(get_page_service),
):
    """Create a page, blank or cloned from an active page template."""
    return page_service.create_page(account, data)


@router.get("/{page_id}/", response_model=PageRead)
def get_page(
    page_id: UUID,
    account: CurrentAccount = Depends(get_current_account),
    page_repository: PageRepository = Depends(get_page_repository),
):
    return page_repository.get_or_404(page_id, account.id)


@router.put("/{page_id}/", response_model=PageRead)
def update_page(
    page_id: UUID,
    data: PageUpdate,
    account: CurrentAccount = Depends(get_current_account),
    page_repository: PageRepository = Depends(get_page_repository),
    page_service: PageService = Depends(get_page_service),
):
    """Update title, slug or publish state."""
    page = page_repository.get_or_404(page_id, account.id)
    return page_service.update_settings(page, data)


@router.delete("/{page_id}/")
def delete_page(
    page_id: UUID,
    account: CurrentAccount = Depends(get_current_account),
    page_repository: PageRepository = Depends(get_page_repository),
    page_service: PageService = Depends(get_page_service),
):
    page = page_repository.get_or_404(page_id, account.id)
    page_service.delete_page(page)
    return {"message": "Page deleted successfully."}


@router.get("/{page_id}/content/")
def get_page_content(
    page_id: UUID,
    account: CurrentAccount = Depends(get_current_account),
    page_repository: PageRepository = Depends(get_page_repository),
):
    """Load the page's content document for editing."""
    page = page_repository.get_or_404(page_id, account.id)
    return page.content_json


@router.put("/{page_id}/content/")
def save_page_content(
    page_id: UUID,
    document: Any = Body(...),
    account: CurrentAccount = Depends(get_current_account),
    page_repository: PageRepository = Depends(get_page_repository),
    page_service: PageService = Depends(get_page_service),
):
    """Replace the page's content document wholesale."""
    page = page_repository.get_or_404(page_id, account.id)
    return page_service.save_content(page, document, account).to_json()


@router.get("/{page_id}/preview/", response_class=HTMLResponse)
def preview_page(
    page_id: UUID,
    account: CurrentAccount = Depends(get_current_account),
    page_repository: PageRepository = Depends(get_page_repository),
    page_service: PageService = Depends(get_page_service),
):
    """Draft render with every block addressable by `data-block-id`."""
    page = page_repository.get_or_404(page_id, account.id)
    return HTMLResponse(page_service.preview(page))
