"""
Content document validation.

Only structure is enforced. Props a schema declares but a block omits are
fine (defaults fill them at render time) and props a schema does not know
are kept, so documents written before a schema change keep loading.
"""

from typing import Any, Mapping, Optional

from core.errors import ContentValidationError
from core.logging_config import get_logger
from core.settings import settings
from schemas.block_type import FieldKind, FieldSpec, matches_kind
from schemas.content import ContentDocument
from services.block_registry import BlockRegistry, BlockSchema, get_block_registry

logger = get_logger(__name__)

# JSON containers a single block level may span (list, block, props, repeater item, ...)
NESTING_PER_BLOCK_LEVEL = 8

# pydantic refuses to serialise values nested past roughly 255 levels
MAX_VALUE_NESTING = 200


def max_value_nesting(max_depth: int) -> int:
    return min(max_depth * NESTING_PER_BLOCK_LEVEL, MAX_VALUE_NESTING)


class ContentValidator:

    def __init__(self, registry: Optional[BlockRegistry] = None, max_depth: Optional[int] = None):
        self.registry = registry or get_block_registry()
        self.max_depth = max_depth if max_depth is not None else settings.MAX_BLOCK_DEPTH
        self.max_nesting = max_value_nesting(self.max_depth)

    def validate(self, document: Any) -> ContentDocument:
        try:
            if not isinstance(document, Mapping):
                raise ContentValidationError("$", "document must be an object")
            if "blocks" not in document:
                raise ContentValidationError("blocks", "blocks is required")

            meta = document.get("meta")
            if meta is not None and not isinstance(meta, Mapping):
                raise ContentValidationError("meta", "meta must be an object")

            self._check_nesting(document)
            self._check_block_list(document["blocks"], "blocks", depth=1)
        except ContentValidationError as e:
            logger.info_ctx("Content document rejected", path=e.path, reason=e.message)
            raise

        return ContentDocument.model_validate(document)

    def _check_nesting(self, document: Mapping) -> None:
        """Reject any value nested too deep, including props no schema declares."""
        pending = [(value, str(key), 1) for key, value in document.items()]
        while pending:
            value, path, level = pending.pop()
            if isinstance(value, Mapping):
                children = [(item, f"{path}.{key}") for key, item in value.items()]
            elif isinstance(value, list):
                children = [(item, f"{path}[{index}]") for index, item in enumerate(value)]
            else:
                continue

            if level > self.max_nesting:
                raise ContentValidationError(path, f"values nested deeper than {self.max_nesting} levels")
            pending.extend((item, item_path, level + 1) for item, item_path in children)

    def _check_block_list(self, blocks: Any, path: str, depth: int) -> None:
        if not isinstance(blocks, list):
            raise ContentValidationError(path, "blocks must be a list")
        if blocks and depth > self.max_depth:
            raise ContentValidationError(path, f"nesting deeper than {self.max_depth} levels")

        seen_ids = set()
        for index, block in enumerate(blocks):
            block_path = f"{path}[{index}]"
            self._check_block(block, block_path, depth)
            if block["id"] in seen_ids:
                raise ContentValidationError(f"{block_path}.id", f"duplicate block id '{block['id']}'")
            seen_ids.add(block["id"])

    def _check_block(self, block: Any, path: str, depth: int) -> None:
        if not isinstance(block, Mapping):
            raise ContentValidationError(path, "block must be an object")

        for key in ("id", "type"):
            value = block.get(key)
            if not isinstance(value, str) or not value:
                raise ContentValidationError(f"{path}.{key}", f"{key} must be a non-empty string")

        props = block.get("props", {})
        if not isinstance(props, Mapping):
            raise ContentValidationError(f"{path}.props", "props must be an object")

        schema = self.registry.get_schema(block["type"])
        if schema is None:
            # Unknown types are stored as-is and rendered as placeholders
            return
        self._check_props(schema, props, f"{path}.props", depth)

    def _check_props(self, schema: BlockSchema, props: Mapping, path: str, depth: int) -> None:
        for name, spec in schema.items():
            value = props.get(name)
            if value is None:
                continue
            self._check_value(spec, value, f"{path}.{name}", depth)

    def _check_value(self, spec: FieldSpec, value: Any, path: str, depth: int) -> None:
        if not matches_kind(spec.kind, value):
            raise ContentValidationError(path, f"expected a {spec.kind.value} value")

        if spec.kind == FieldKind.BLOCKS:
            self._check_block_list(value, path, depth + 1)
        elif spec.kind == FieldKind.REPEATER:
            for index, item in enumerate(value):
                item_path = f"{path}[{index}]"
                if not isinstance(item, Mapping):
                    raise ContentValidationError(item_path, "repeater items must be objects")
                self._check_props(spec.item_schema, item, item_path, depth)


def validate_content(
    document: Any,
    registry: Optional[BlockRegistry] = None,
    max_depth: Optional[int] = None,
) -> ContentDocument:
    """Validate a raw document and return it as a ContentDocument.

    Raises:
        ContentValidationError: with the path of the first offending value
    """
    return ContentValidator(registry, max_depth).validate(document)


def measure_depth(document: ContentDocument, registry: Optional[BlockRegistry] = None) -> int:
    """Deepest block nesting level of a document (0 for an empty document)."""
    registry = registry or get_block_registry()

    def list_depth(blocks: Any) -> int:
        if not isinstance(blocks, list) or not blocks:
            return 0
        return 1 + max(block_depth(block) for block in blocks)

    def block_depth(block: Any) -> int:
        if not isinstance(block, Mapping):
            return 0
        schema = registry.get_schema(block.get("type"))
        if schema is None:
            return 0
        return props_depth(schema, block.get("props") or {})

    def props_depth(schema: BlockSchema, props: Mapping) -> int:
        deepest = 0
        for name, spec in schema.items():
            value = props.get(name)
            if spec.kind == FieldKind.BLOCKS:
                deepest = max(deepest, list_depth(value))
            elif spec.kind == FieldKind.REPEATER and isinstance(value, list):
                for item in value:
                    if isinstance(item, Mapping):
                        deepest = max(deepest, props_depth(spec.item_schema, item))
        return deepest

    return list_depth([block.model_dump() for block in document.blocks])
