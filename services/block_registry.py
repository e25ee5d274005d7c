"""Block Registry - static mapping from block type tag to schema and renderer"""

import copy
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional

from markupsafe import Markup

from core.logging_config import get_logger
from schemas.block_type import BlockTypeRead, FieldSpec

logger = get_logger(__name__)

BlockSchema = Dict[str, FieldSpec]

# Receives the block id and its fully resolved props (nested block lists
# already rendered to markup) and returns the block's markup.
BlockRenderer = Callable[[str, Dict[str, Any]], Markup]


@dataclass(frozen=True)
class BlockDefinition:
    type: str
    label: str
    schema: BlockSchema
    renderer: BlockRenderer
    category: str = "content"


class BlockRegistry:
    """
    Capability table of block types.

    The registry is the single source of truth for field defaults: the
    authoring surface seeds new blocks from `defaults()` and the render
    dispatcher fills gaps in stored props from `get_schema()`.
    """

    def __init__(self, definitions: Optional[List[BlockDefinition]] = None):
        self._definitions: Dict[str, BlockDefinition] = {}
        for definition in definitions or []:
            self.register(definition)

    def register(self, definition: BlockDefinition) -> None:
        if definition.type in self._definitions:
            raise ValueError(f"Block type '{definition.type}' is already registered")
        self._definitions[definition.type] = definition
        logger.debug(f"Registered block type: {definition.type}")

    def get_definition(self, block_type: str) -> Optional[BlockDefinition]:
        return self._definitions.get(block_type)

    def get_schema(self, block_type: str) -> Optional[BlockSchema]:
        definition = self._definitions.get(block_type)
        return definition.schema if definition else None

    def types(self) -> List[str]:
        return list(self._definitions)

    def defaults(self, block_type: str) -> Optional[Dict[str, Any]]:
        """Props for a freshly inserted block of `block_type`."""
        schema = self.get_schema(block_type)
        if schema is None:
            return None
        return schema_defaults(schema)

    def describe(self, block_type: str) -> Optional[BlockTypeRead]:
        definition = self._definitions.get(block_type)
        if definition is None:
            return None
        return BlockTypeRead(
            type=definition.type,
            label=definition.label,
            category=definition.category,
            field_schema=definition.schema,
            defaults=schema_defaults(definition.schema),
        )

    def __contains__(self, block_type: object) -> bool:
        return block_type in self._definitions

    def __iter__(self) -> Iterator[BlockDefinition]:
        return iter(self._definitions.values())

    def __len__(self) -> int:
        return len(self._definitions)


def schema_defaults(schema: BlockSchema) -> Dict[str, Any]:
    # Defaults are shared by every block of the type, hand out copies
    return {name: copy.deepcopy(spec.default) for name, spec in schema.items()}


_block_registry: Optional[BlockRegistry] = None


def get_block_registry() -> BlockRegistry:
    """Get the process-wide registry holding the built-in block types"""
    global _block_registry
    if _block_registry is None:
        from services.block_catalog import BUILTIN_BLOCKS

        _block_registry = BlockRegistry(BUILTIN_BLOCKS)
        logger.info(f"Loaded {len(_block_registry)} block types")
    return _block_registry
