"""Template instantiation - clone a page template's document into a new page"""

import copy
import uuid
from typing import Any, Callable, Optional

from core.logging_config import get_logger
from models.page_template import PageTemplate
from schemas.block_type import FieldKind
from schemas.content import ContentDocument
from services.block_registry import BlockRegistry, BlockSchema, get_block_registry

logger = get_logger(__name__)

IdFactory = Callable[[], str]


def new_block_id() -> str:
    return f"blk_{uuid.uuid4().hex}"


def instantiate(
    template: Optional[PageTemplate],
    title: str,
    slug: str,
    id_factory: IdFactory = new_block_id,
    registry: Optional[BlockRegistry] = None,
) -> ContentDocument:
    """
    Build the starting document for a new page.

    Without a template the page starts blank. Otherwise the template's
    document is deep-copied and every block id in it, nested ones included,
    is regenerated so pages cloned from the same template never share ids.
    The template itself is only read.
    """
    if template is None:
        logger.info_ctx("Instantiated blank page", page_slug=slug, title=title)
        return ContentDocument(blocks=[])

    document = copy.deepcopy(template.content_json or {"blocks": []})
    rekeyer = _Rekeyer(registry or get_block_registry(), id_factory)
    renamed = rekeyer.block_list(document.get("blocks"))

    logger.info_ctx(
        "Instantiated page from template",
        template_slug=template.slug,
        page_slug=slug,
        title=title,
        block_count=renamed,
    )
    return ContentDocument.model_validate(document)


def _is_block(value: Any) -> bool:
    return (
        isinstance(value, dict)
        and isinstance(value.get("id"), str)
        and isinstance(value.get("type"), str)
        and isinstance(value.get("props", {}), dict)
    )


class _Rekeyer:
    """Regenerate block ids, following the schema of every registered type.

    Repeater items are walked but keep their own keys. Only props of types
    the registry does not know are searched structurally for blocks.
    """

    def __init__(self, registry: BlockRegistry, id_factory: IdFactory):
        self.registry = registry
        self.id_factory = id_factory

    def block_list(self, blocks: Any) -> int:
        if not isinstance(blocks, list):
            return 0
        return sum(self.block(block) for block in blocks if _is_block(block))

    def block(self, block: dict) -> int:
        block["id"] = self.id_factory()
        props = block.get("props", {})
        schema = self.registry.get_schema(block["type"])
        if schema is None:
            return 1 + self.opaque(props)
        return 1 + self.props(schema, props)

    def props(self, schema: BlockSchema, props: dict) -> int:
        count = 0
        for name, spec in schema.items():
            value = props.get(name)
            if spec.kind == FieldKind.BLOCKS:
                count += self.block_list(value)
            elif spec.kind == FieldKind.REPEATER and isinstance(value, list):
                for item in value:
                    if isinstance(item, dict):
                        count += self.props(spec.item_schema, item)
        return count

    def opaque(self, value: Any) -> int:
        count = 0
        if isinstance(value, dict):
            for item in value.values():
                count += self.opaque(item)
        elif isinstance(value, list):
            for item in value:
                count += self.block(item) if _is_block(item) else self.opaque(item)
        return count
