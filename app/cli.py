import asyncio
import json
from pathlib import Path
from typing import Optional

import typer  # type: ignore

from swbrowser.config import Settings, load_settings
from swbrowser.databank.models import EntityCategory
from swbrowser.enrichment.context import build_context
from swbrowser.enrichment.enrichment_service import EnrichmentService
from swbrowser.enrichment.models import ENDPOINTS_BY_CATEGORY, EnrichedEntity
from swbrowser.utils.logger import LoggerManager

app = typer.Typer(help="Browse Star Wars Databank entities enriched with SWAPI data.")

# Entity fields that are not SWAPI attributes
_IDENTITY_FIELDS = {"id", "name", "description", "image", "films", "matched", "enriched_at"}


def _settings(config: Optional[Path]) -> Settings:
    settings = load_settings(config)
    LoggerManager.configure(
        level=settings.logging.level,
        log_dir=settings.logging.dir,
        use_json=settings.logging.json_files,
    )
    return settings


async def _with_service(settings: Settings, action):
    context = build_context(settings)
    try:
        return await action(EnrichmentService(context))
    finally:
        await context.aclose()


def _print_entity(entity: EnrichedEntity, verbose: bool = False) -> None:
    marker = "[SWAPI]" if entity.matched else "[-----]"
    typer.echo(f"{marker} {entity.name} ({entity.id})")
    if not verbose:
        return

    if entity.description:
        typer.echo(f"    {entity.description}")
    for key, value in entity.model_dump(exclude_none=True).items():
        if key in _IDENTITY_FIELDS or value in ([], ""):
            continue
        typer.echo(f"    {key}: {value}")
    if entity.films:
        typer.echo(f"    films: {', '.join(entity.films)}")


@app.command()
def categories():
    """
    Lists Databank categories and the SWAPI collections used to enrich them.
    """
    for category in EntityCategory:
        endpoints = ", ".join(e.value for e in ENDPOINTS_BY_CATEGORY[category]) or "(not enriched)"
        typer.echo(f"{category.value:<15} {endpoints}")


@app.command("list")
def list_entities(
    category: EntityCategory = typer.Argument(..., help="Databank category."),
    page: int = typer.Option(1, "--page", min=1, help="Page number."),
    limit: Optional[int] = typer.Option(None, "--limit", min=1, max=100, help="Page size."),
    search: Optional[str] = typer.Option(None, "--search", help="Filter by name."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw JSON page."),
    config: Optional[Path] = typer.Option(None, "--config", help="Settings YAML file."),
):
    """
    Lists one page of entities, enriched with SWAPI attributes where available.
    """
    settings = _settings(config)

    async def action(service: EnrichmentService):
        return await service.get_enhanced_entities(category, page=page, limit=limit, search=search)

    response = asyncio.run(_with_service(settings, action))
    if not response.success:
        typer.echo(f"Error: {response.error}", err=True)
        raise typer.Exit(code=1)

    enhanced = response.data
    if as_json:
        typer.echo(enhanced.model_dump_json(indent=2))
        return

    info = enhanced.info
    typer.echo(f"{category.label}: page {info.page} ({len(enhanced.data)} of {info.total})")
    for entity in enhanced.data:
        _print_entity(entity)

    summary = enhanced.enrichment
    typer.echo(f"\nEnriched {summary.matched}/{summary.total}")
    if summary.partial:
        typer.echo("SWAPI enrichment is partial or unavailable; showing Databank data.")


@app.command()
def show(
    category: EntityCategory = typer.Argument(..., help="Databank category."),
    entity_id: str = typer.Argument(..., help="Databank entity id."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw JSON entity."),
    config: Optional[Path] = typer.Option(None, "--config", help="Settings YAML file."),
):
    """
    Shows a single entity with every merged SWAPI attribute.
    """
    settings = _settings(config)

    async def action(service: EnrichmentService):
        return await service.get_enhanced_entity_by_id(category, entity_id)

    response = asyncio.run(_with_service(settings, action))
    if not response.success:
        typer.echo(f"Error: {response.error}", err=True)
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(response.data.model_dump_json(indent=2))
    else:
        _print_entity(response.data, verbose=True)


@app.command()
def status(
    config: Optional[Path] = typer.Option(None, "--config", help="Settings YAML file."),
):
    """
    Probes SWAPI and prints the availability tracker state.
    """
    settings = _settings(config)

    async def action(service: EnrichmentService):
        await service.tracker.is_available()
        return service.tracker.status()

    snapshot = asyncio.run(_with_service(settings, action))
    typer.echo(json.dumps(snapshot.model_dump(mode="json"), indent=2))
    if not snapshot.reachable:
        raise typer.Exit(code=2)


if __name__ == "__main__":
    app()
