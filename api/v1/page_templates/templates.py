from uuid import UUID

from fastapi import APIRouter, Depends
from starlette import status

from schemas.page_template import PageTemplateCreate, PageTemplateRead, PageTemplateUpdate
from services.page_template_service import PageTemplateService, get_page_template_service
from utils.get_current_account import CurrentAccount, get_current_account_admin

router = APIRouter()


@router.get("/", response_model=list[PageTemplateRead])
def list_templates(template_service: PageTemplateService = Depends(get_page_template_service)):
    """List active page templates (public, cached)."""
    return template_service.list_active()


# Declared before "/{slug}/" so the literal path wins
@router.get("/admin/all/", response_model=list[PageTemplateRead])
def list_all_templates(
    admin: CurrentAccount = Depends(get_current_account_admin),
    template_service: PageTemplateService = Depends(get_page_template_service),
):
    """List every page template, inactive ones included (admin)."""
    return template_service.list_all()


@router.get("/{slug}/", response_model=PageTemplateRead)
def get_template(slug: str, template_service: PageTemplateService = Depends(get_page_template_service)):
    """Get an active page template by slug (public, cached)."""
    return template_service.get_active(slug)


@router.post("/", response_model=PageTemplateRead, status_code=status.HTTP_201_CREATED)
def create_template(
    data: PageTemplateCreate,
    admin: CurrentAccount = Depends(get_current_account_admin),
    template_service: PageTemplateService = Depends(get_page_template_service),
):
    """Create a page template (admin)."""
    return template_service.create(data)


@router.put("/{template_id}/", response_model=PageTemplateRead)
def update_template(
    template_id: UUID,
    data: PageTemplateUpdate,
    admin: CurrentAccount = Depends(get_current_account_admin),
    template_service: PageTemplateService = Depends(get_page_template_service),
):
    """Update a page template (admin)."""
    return template_service.update(template_id, data)


@router.delete("/{template_id}/")
def delete_template(
    template_id: UUID,
    admin: CurrentAccount = Depends(get_current_account_admin),
    template_service: PageTemplateService = Depends(get_page_template_service),
):
    """Delete a page template (admin)."""
    template_service.delete(template_id)
    return {"message": "Template deleted successfully."}
