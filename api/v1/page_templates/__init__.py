"""Page template API routes"""

from fastapi import APIRouter
from . import templates

router = APIRouter()
router.include_router(templates.router, prefix="/page-templates", tags=["Page Templates"])
