"""
Render Dispatcher - turns a tree of blocks into markup.

Traversal is depth-first and type-dispatched through the block registry.
Every node gets its missing props filled from the schema defaults. A block
that cannot be resolved (unknown type, malformed record, renderer error,
nesting past the depth cap) renders as a placeholder and the walk carries
on with its next sibling, so one bad block never blanks a page.
"""

import copy
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Union

from markupsafe import Markup
from pydantic import ValidationError

from core.logging_config import get_logger
from core.settings import settings
from schemas.block_type import FieldKind, FieldSpec, matches_kind
from schemas.content import Block, ContentDocument
from services.block_catalog import template_env
from services.block_registry import BlockRegistry, BlockSchema, get_block_registry

logger = get_logger(__name__)

BlockLike = Union[Block, Mapping[str, Any]]


@dataclass(frozen=True)
class RenderOptions:
    # Draft mode: wrap every block so the authoring surface can address it
    editable: bool = False
    # Plan feature flag consulted by the page shell
    show_branding: bool = True
    lang: str = "en"
    canonical_url: Optional[str] = None
    description: Optional[str] = None


class RenderDispatcher:

    def __init__(self, registry: Optional[BlockRegistry] = None, max_depth: Optional[int] = None):
        self.registry = registry or get_block_registry()
        self.max_depth = max_depth if max_depth is not None else settings.MAX_BLOCK_DEPTH

    def render(self, block: BlockLike, options: RenderOptions = RenderOptions(), depth: int = 1) -> Markup:
        """Render a single block, never raising."""
        block_id, block_type = _identity(block)

        if depth > self.max_depth:
            return self._placeholder(block_id, block_type, "nesting depth exceeded")

        if not isinstance(block, Block):
            try:
                block = Block.model_validate(block)
            except ValidationError:
                return self._placeholder(block_id, block_type, "malformed block record")

        definition = self.registry.get_definition(block.type)
        if definition is None:
            return self._placeholder(block.id, block.type, "unknown block type")

        try:
            props = self.resolve_props(definition.schema, block.props, options, depth)
            markup = definition.renderer(block.id, props)
        except Exception as e:
            logger.exception(f"Renderer for block type '{block.type}' failed")
            return self._placeholder(block.id, block.type, f"render error: {type(e).__name__}")

        if options.editable:
            return self._wrap_editable(block.id, block.type, markup)
        return markup

    def render_blocks(self, blocks: Any, options: RenderOptions = RenderOptions(), depth: int = 1) -> List[Markup]:
        """Render an ordered block list; failures stay local to their block."""
        if not isinstance(blocks, list):
            return [self._placeholder(None, None, "nested blocks are not a list")]
        return [self.render(block, options, depth) for block in blocks]

    def render_document(self, document: ContentDocument, options: RenderOptions = RenderOptions()) -> Markup:
        return Markup("\n").join(self.render_blocks(document.blocks, options))

    def render_page(self, document: ContentDocument, title: str, options: RenderOptions = RenderOptions()) -> str:
        """Render the complete HTML page around the document body."""
        template = template_env.get_template("page.html")
        return template.render(
            title=title,
            body=self.render_document(document, options),
            editable=options.editable,
            show_branding=options.show_branding,
            lang=options.lang,
            canonical_url=options.canonical_url,
            description=options.description,
            site_name=settings.SITE_NAME,
            site_url=settings.PUBLIC_BASE_URL,
        )

    def resolve_props(
        self,
        schema: BlockSchema,
        props: Mapping[str, Any],
        options: RenderOptions = RenderOptions(),
        depth: int = 1,
    ) -> Dict[str, Any]:
        """Effective props for one node.

        Keys outside the schema are dropped, missing or mistyped values fall
        back to the declared default, and nested block lists are replaced by
        their rendered markup.
        """
        resolved: Dict[str, Any] = {}
        for name, spec in schema.items():
            value = self._effective_value(spec, props.get(name))

            if spec.kind == FieldKind.BLOCKS:
                resolved[name] = self.render_blocks(value, options, depth + 1)
            elif spec.kind == FieldKind.REPEATER:
                resolved[name] = []
                for index, item in enumerate(value):
                    if not isinstance(item, Mapping):
                        logger.warning_ctx("Skipping malformed repeater item", field=name, index=index)
                        continue
                    resolved[name].append(self.resolve_props(spec.item_schema, item, options, depth))
            else:
                resolved[name] = value
        return resolved

    @staticmethod
    def _effective_value(spec: FieldSpec, value: Any) -> Any:
        if value is None or not matches_kind(spec.kind, value):
            return copy.deepcopy(spec.default)
        if spec.kind == FieldKind.SELECT and value not in spec.options:
            return spec.default
        return value

    @staticmethod
    def _placeholder(block_id: Optional[str], block_type: Optional[str], reason: str) -> Markup:
        logger.warning_ctx(
            "Rendering block placeholder",
            block_id=block_id,
            block_type=block_type,
            reason=reason,
        )
        template = template_env.get_template("placeholder.html")
        return Markup(template.render(block_id=block_id, block_type=block_type or "unknown"))

    @staticmethod
    def _wrap_editable(block_id: str, block_type: str, markup: Markup) -> Markup:
        template = template_env.get_template("editable.html")
        return Markup(template.render(block_id=block_id, block_type=block_type, markup=markup))


def _identity(block: Any) -> tuple:
    if isinstance(block, Block):
        return block.id, block.type
    if isinstance(block, Mapping):
        block_id = block.get("id")
        block_type = block.get("type")
        return (
            block_id if isinstance(block_id, str) else None,
            block_type if isinstance(block_type, str) else None,
        )
    return None, None


_render_dispatcher: Optional[RenderDispatcher] = None


def get_render_dispatcher() -> RenderDispatcher:
    global _render_dispatcher
    if _render_dispatcher is None:
        _render_dispatcher = RenderDispatcher()
    return _render_dispatcher
