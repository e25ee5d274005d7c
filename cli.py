import json
from pathlib import Path

import typer
from pydantic import ValidationError
from typer import Argument, Option

from core.errors import ContentValidationError
from core.logging_config import setup_logging
from schemas.page_template import PageTemplateCreate, PageTemplateUpdate
from services.block_registry import get_block_registry
from services.content_validation_service import measure_depth, validate_content
from services.render_service import RenderOptions, get_render_dispatcher

app = typer.Typer(help="Block engine utilities")


def _load_json(path: Path):
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        typer.echo(f"{path}: invalid JSON ({e})", err=True)
        raise typer.Exit(code=1)


def _validated(path: Path):
    try:
        return validate_content(_load_json(path))
    except ContentValidationError as e:
        typer.echo(f"{path}: {e.path}: {e.message}", err=True)
        raise typer.Exit(code=1)


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"]) or "$"
    return f"{location}: {first['msg']}"


@app.command("block-types")
def block_types():
    """List registered block types and their fields."""
    for definition in get_block_registry():
        fields = ", ".join(f"{name}:{spec.kind.value}" for name, spec in definition.schema.items())
        typer.echo(f"{definition.type:<10} {definition.label:<10} {fields}")


@app.command()
def validate(path: Path = Argument(..., exists=True, dir_okay=False)):
    """Validate a content document file."""
    document = _validated(path)
    typer.echo(f"OK: {len(document.blocks)} blocks, depth {measure_depth(document)}")


@app.command()
def render(
    path: Path = Argument(..., exists=True, dir_okay=False),
    title: str = Option("Preview", "--title"),
    draft: bool = Option(False, "--draft", help="Render editable draft markup"),
    output: Path = Option(None, "--output", "-o"),
):
    """Render a content document file to a complete HTML page."""
    document = _validated(path)
    html = get_render_dispatcher().render_page(document, title, RenderOptions(editable=draft))
    if output:
        output.write_text(html, encoding="utf-8")
        typer.echo(f"Wrote {output}")
    else:
        typer.echo(html)


@app.command("seed-templates")
def seed_templates(path: Path = Argument(..., exists=True, dir_okay=False)):
    """Create or update page templates from a JSON list, matched by slug."""
    from db.session import db_context
    from repositories.page_template_repository import PageTemplateRepository
    from services.cache_service import build_cache_service
    from services.page_template_service import PageTemplateService

    setup_logging()
    entries = _load_json(path)
    if not isinstance(entries, list):
        typer.echo(f"{path}: expected a list of templates", err=True)
        raise typer.Exit(code=1)

    cache = build_cache_service()
    try:
        with db_context() as db:
            repository = PageTemplateRepository(db)
            service = PageTemplateService(repository, cache)
            for index, entry in enumerate(entries):
                try:
                    data = PageTemplateCreate.model_validate(entry)
                    changes = PageTemplateUpdate.model_validate(entry)
                except ValidationError as e:
                    typer.echo(f"{path}: entry {index}: {_describe(e)}", err=True)
                    raise typer.Exit(code=1)

                existing = repository.get_by_slug(data.slug)
                try:
                    if existing:
                        service.update(existing.id, changes)
                        typer.echo(f"Updated {data.slug}")
                    else:
                        service.create(data)
                        typer.echo(f"Created {data.slug}")
                except ContentValidationError as e:
                    typer.echo(f"{data.slug}: {e.path}: {e.message}", err=True)
                    raise typer.Exit(code=1)
    finally:
        cache.close()


if __name__ == "__main__":
    app()
