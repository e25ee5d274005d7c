"""
Block type endpoints.

The authoring surface builds its input controls generically from these
schemas (one control per `FieldSpec.kind`) and seeds new blocks from
`defaults`.
"""
from fastapi import APIRouter, Depends

from core.errors import ErrorCodes, http_error
from schemas.block_type import BlockTypeRead
from services.block_registry import BlockRegistry, get_block_registry

router = APIRouter()


@router.get("/", response_model=list[BlockTypeRead])
def list_block_types(registry: BlockRegistry = Depends(get_block_registry)):
    """List every registered block type with its schema and default props."""
    return [registry.describe(definition.type) for definition in registry]


@router.get("/{block_type}/", response_model=BlockTypeRead)
def get_block_type(block_type: str, registry: BlockRegistry = Depends(get_block_registry)):
    """Get the schema of one block type."""
    described = registry.describe(block_type)
    if described is None:
        raise http_error(ErrorCodes.PAGE_BLOCK_TYPE_NOT_FOUND, f"Block type '{block_type}' is not registered")
    return described
