"""Built-in block types: field schemas plus their Jinja templates"""

from pathlib import Path
from typing import Any, Dict
from urllib.parse import urlparse

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape
from markupsafe import Markup

from schemas.block_type import FieldKind, FieldSpec
from services.block_registry import BlockDefinition, BlockRenderer, BlockSchema

BASE_DIR = Path(__file__).resolve().parent.parent
SAFE_URL_SCHEMES = {"", "http", "https", "mailto", "tel"}


def safe_url(value: str) -> str:
    """Drop URLs with executable schemes such as `javascript:`."""
    value = (value or "").strip()
    if urlparse(value).scheme.lower() not in SAFE_URL_SCHEMES:
        return "#"
    return value


template_env = Environment(
    loader=FileSystemLoader(str(BASE_DIR / "templates")),
    autoescape=select_autoescape(["html", "xml"]),
    undefined=StrictUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
)
template_env.filters["safe_url"] = safe_url


def template_renderer(template_name: str) -> BlockRenderer:
    def render(block_id: str, props: Dict[str, Any]) -> Markup:
        template = template_env.get_template(template_name)
        return Markup(template.render(block_id=block_id, props=props))

    return render


def string(label: str, default: str = "") -> FieldSpec:
    return FieldSpec(kind=FieldKind.STRING, label=label, default=default)


def boolean(label: str, default: bool = False) -> FieldSpec:
    return FieldSpec(kind=FieldKind.BOOLEAN, label=label, default=default)


def select(label: str, options: list[str], default: str | None = None) -> FieldSpec:
    return FieldSpec(kind=FieldKind.SELECT, label=label, options=options, default=default)


def richtext(label: str) -> FieldSpec:
    return FieldSpec(kind=FieldKind.RICHTEXT, label=label)


def repeater(label: str, item_schema: BlockSchema) -> FieldSpec:
    return FieldSpec(kind=FieldKind.REPEATER, label=label, item_schema=item_schema)


def blocks(label: str) -> FieldSpec:
    return FieldSpec(kind=FieldKind.BLOCKS, label=label)


ALIGN = ["center", "left", "right"]

PROCESS_ICONS = [
    "search", "target", "lightbulb", "pentool", "check", "rocket", "code", "palette",
    "users", "settings", "zap", "chart", "shield", "globe", "database", "layout", "lock",
]

LINK_ICONS = ["link", "website", "email", "github", "linkedin", "instagram", "twitter", "youtube"]


HERO_SCHEMA: BlockSchema = {
    "title": string("Title"),
    "subtitle": string("Subtitle"),
    "align": select("Alignment", ALIGN),
    "background": select("Background", ["none", "muted", "gradient"]),
    "buttonLabel": string("Button label"),
    "buttonUrl": string("Button URL"),
}

HEADING_SCHEMA: BlockSchema = {
    "text": string("Text"),
    "level": select("Level", ["h2", "h1", "h3", "h4"]),
    "align": select("Alignment", ["left", "center", "right"]),
}

TEXT_SCHEMA: BlockSchema = {
    "content": string("Text"),
    "align": select("Alignment", ["left", "center", "right"]),
    "size": select("Size", ["medium", "small", "large"]),
}

RICHTEXT_SCHEMA: BlockSchema = {
    "html": richtext("Content"),
}

IMAGE_SCHEMA: BlockSchema = {
    "src": string("Image URL"),
    "alt": string("Alternative text"),
    "caption": string("Caption"),
    "width": select("Width", ["full", "wide", "narrow"]),
    "rounded": boolean("Rounded corners", True),
}

BUTTON_SCHEMA: BlockSchema = {
    "label": string("Label", "Learn more"),
    "url": string("URL", "#"),
    "style": select("Style", ["primary", "secondary", "outline"]),
    "align": select("Alignment", ALIGN),
    "openInNewTab": boolean("Open in new tab"),
}

LINKS_SCHEMA: BlockSchema = {
    "title": string("Title"),
    "style": select("Style", ["stacked", "pills", "grid"]),
    "items": repeater("Links", {
        "label": string("Label"),
        "url": string("URL"),
        "icon": select("Icon", LINK_ICONS),
    }),
}

VIDEO_SCHEMA: BlockSchema = {
    "url": string("Embed URL"),
    "title": string("Title"),
    "aspect": select("Aspect ratio", ["16:9", "4:3", "1:1"]),
}

SPACER_SCHEMA: BlockSchema = {
    "size": select("Size", ["medium", "small", "large"]),
}

DIVIDER_SCHEMA: BlockSchema = {
    "style": select("Style", ["solid", "dashed", "dotted"]),
}

COLUMNS_SCHEMA: BlockSchema = {
    "columns": select("Number of columns", ["2", "3", "4"]),
    "gap": select("Spacing", ["small", "medium", "large"], "medium"),
    "style": select("Style", ["simple", "cards", "bordered"], "cards"),
    "verticalAlign": select("Vertical alignment", ["top", "center", "bottom"]),
    "items": repeater("Column items", {
        "title": string("Title (optional)"),
        "content": richtext("Content (optional)"),
        "blocks": blocks("Nested blocks"),
    }),
}

PROCESS_SCHEMA: BlockSchema = {
    "title": string("Title"),
    "subtitle": string("Subtitle"),
    "style": select("Style", ["horizontal", "vertical", "cards"]),
    "showConnectors": boolean("Show connectors", True),
    "iconStyle": select("Icon style", ["circle", "square", "minimal"]),
    "iconColor": select("Icon color", ["amber", "primary", "muted", "gradient"], "muted"),
    "steps": repeater("Steps", {
        "title": string("Title"),
        "description": string("Description"),
        "icon": select("Icon", PROCESS_ICONS),
    }),
}


def _builtin(block_type: str, label: str, schema: BlockSchema, category: str) -> BlockDefinition:
    return BlockDefinition(
        type=block_type,
        label=label,
        schema=schema,
        renderer=template_renderer(f"blocks/{block_type}.html"),
        category=category,
    )


BUILTIN_BLOCKS = [
    _builtin("hero", "Hero", HERO_SCHEMA, "sections"),
    _builtin("heading", "Heading", HEADING_SCHEMA, "content"),
    _builtin("text", "Text", TEXT_SCHEMA, "content"),
    _builtin("richtext", "Rich text", RICHTEXT_SCHEMA, "content"),
    _builtin("image", "Image", IMAGE_SCHEMA, "media"),
    _builtin("video", "Video", VIDEO_SCHEMA, "media"),
    _builtin("button", "Button", BUTTON_SCHEMA, "content"),
    _builtin("links", "Links", LINKS_SCHEMA, "sections"),
    _builtin("spacer", "Spacer", SPACER_SCHEMA, "layout"),
    _builtin("divider", "Divider", DIVIDER_SCHEMA, "layout"),
    _builtin("columns", "Columns", COLUMNS_SCHEMA, "layout"),
    _builtin("process", "Process", PROCESS_SCHEMA, "sections"),
]
