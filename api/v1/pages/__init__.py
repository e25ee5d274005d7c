"""Page authoring API routes"""

from fastapi import APIRouter
from . import pages

router = APIRouter()
router.include_router(pages.router, prefix="/pages", tags=["Pages"])
