"""Block type API routes"""

from fastapi import APIRouter
from . import block_types

router = APIRouter()
router.include_router(block_types.router, prefix="/block-types", tags=["Block Types"])
