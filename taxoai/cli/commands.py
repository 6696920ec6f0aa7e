"""
Command line interface for the TaxoAI connector
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

import typer
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from taxoai.core.config import settings
from taxoai.core.database import db_manager, init_db
from taxoai.core.exceptions import TaxoAIError
from taxoai.core.logging import setup_logging
from taxoai.schemas.batch import BatchPollResult
from taxoai.schemas.product import CatalogFilter, ProductCreate
from taxoai.services import Services, TaxoAIClient, build_services, validate_api_key

app = typer.Typer(help="TaxoAI product classification connector")
console = Console()


@app.callback()
def main(log_level: str = typer.Option(None, help="Override TAXOAI_LOG_LEVEL")):
    setup_logging(level=log_level or "WARNING")


@asynccontextmanager
async def service_scope() -> AsyncIterator[Services]:
    await init_db()
    try:
        async with TaxoAIClient() as client:
            async with db_manager.session() as session:
                yield build_services(session, client)
    finally:
        await db_manager.close()


def run(coro):
    """Run a command coroutine, turning connector errors into exit code 1"""
    try:
        return asyncio.run(coro)
    except TaxoAIError as e:
        console.print(f"[red]Error:[/red] {e.detail} [dim]({e.code})[/dim]")
        raise typer.Exit(code=1)


def _confidence_style(confidence: Optional[float]) -> str:
    if confidence is None:
        return "dim"
    if confidence >= 0.8:
        return "green"
    if confidence >= 0.5:
        return "yellow"
    return "red"


@app.command()
def analyze(product_id: int = typer.Argument(..., help="Product to analyze")):
    """Analyze one product and write the result back"""

    async def _analyze():
        async with service_scope() as services:
            result = await services.analyzer.analyze(product_id)
            applied = services.analyzer.meets_threshold(result)

        table = Table(title=f"Product {product_id}")
        table.add_column("Field", style="cyan")
        table.add_column("Value")
        if result.classification:
            confidence = result.classification.confidence
            table.add_row("Google category", result.classification.google_category)
            table.add_row("Category id", str(result.classification.google_category_id))
            table.add_row("Confidence", f"[{_confidence_style(confidence)}]{confidence:.0%}[/]")
        if result.seo and result.seo.keywords:
            table.add_row("Keywords", ", ".join(k.keyword for k in result.seo.keywords))
        table.add_row("Applied", "yes" if applied else f"no (threshold {settings.confidence_threshold:.2f})")
        console.print(table)

    run(_analyze())


@app.command()
def search(
    query: str = typer.Argument(..., help="Category search text"),
    limit: int = typer.Option(10, min=1, max=50, help="Maximum number of categories"),
):
    """Search Google product categories"""

    async def _search():
        if not query.strip():
            console.print("[dim]No categories.[/dim]")
            return
        async with TaxoAIClient() as client:
            result = await client.search_taxonomies(query, limit)

        table = Table(title=f"Categories matching '{query}'")
        table.add_column("ID", style="cyan")
        table.add_column("Category", style="green")
        for category in result.categories:
            table.add_row(
                str(category.get("id", category.get("google_category_id", ""))),
                str(category.get("name", category.get("full_path", category.get("google_category", "")))),
            )
        console.print(table)

    run(_search())


@app.command()
def bulk(
    product_ids: List[int] = typer.Argument(..., help="Products to analyze as one batch"),
    wait: bool = typer.Option(False, "--wait", help="Poll until the job finishes"),
    interval: float = typer.Option(None, help="Seconds between polls (default TAXOAI_POLL_INTERVAL)"),
):
    """Submit a batch analysis job"""

    async def _bulk():
        async with service_scope() as services:
            submitted = await services.batch.submit(product_ids)
            console.print(
                f"Job [bold]{submitted.job_id or '-'}[/bold] {submitted.status}: "
                f"{submitted.total_products} products"
            )
            if not wait or not submitted.job_id:
                return

            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                TextColumn("{task.completed}/{task.total}"),
                console=console,
            ) as progress:
                task = progress.add_task("pending", total=submitted.total_products)

                def on_progress(status: BatchPollResult):
                    progress.update(
                        task,
                        description=status.status,
                        completed=status.processed_products,
                        total=status.total_products or submitted.total_products,
                    )

                final = await services.batch.wait(submitted.job_id, interval=interval, on_progress=on_progress)

            console.print(f"Job finished: [bold]{final.status}[/bold], {len(final.applied_products)} results stored")

    run(_bulk())


@app.command()
def poll(job_id: str = typer.Argument(..., help="Batch job id")):
    """Check a batch job once"""

    async def _poll():
        async with service_scope() as services:
            status = await services.batch.poll(job_id)
        console.print(
            f"{status.status}: {status.processed_products}/{status.total_products} processed"
            + (f", {len(status.applied_products)} results stored" if status.applied_products else "")
        )

    run(_poll())


@app.command()
def usage(refresh: bool = typer.Option(False, "--refresh", help="Ignore the cached snapshot")):
    """Show plan usage"""

    async def _usage():
        async with service_scope() as services:
            snapshot = await services.usage.get_usage(force_refresh=refresh)
            count, month = await services.usage.local_usage()

        table = Table(title="TaxoAI usage")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="green")
        table.add_row("Tier", snapshot.tier)
        table.add_row("Used this month", str(snapshot.products_used_this_month))
        table.add_row("Limit", str(snapshot.products_limit) if snapshot.products_limit is not None else "unlimited")
        table.add_row("Percentage used", f"{snapshot.percentage_used:.1f}%")
        table.add_row("Local counter", f"{count} ({month})")
        console.print(table)

    run(_usage())


@app.command("validate-key")
def validate_key(api_key: str = typer.Argument(..., help="Key to check")):
    """Check an API key against the usage endpoint"""

    async def _validate():
        async with service_scope() as services:
            snapshot = await validate_api_key(api_key, services.usage, base_client=services.client)
        console.print(f"[green]Valid key[/green] - tier {snapshot.tier}")

    run(_validate())


@app.command("list")
def list_products(
    filter: CatalogFilter = typer.Option(CatalogFilter.ALL, help="all, unanalyzed or low-confidence"),
    page: int = typer.Option(1, min=1),
):
    """List products with their analysis status"""

    async def _list():
        async with service_scope() as services:
            catalog = await services.products.list_products(
                filter=filter, threshold=settings.confidence_threshold, page=page
            )

        table = Table(title=f"Products ({catalog.total}) - page {catalog.page}/{max(catalog.total_pages, 1)}")
        table.add_column("ID", style="cyan")
        table.add_column("Name")
        table.add_column("Status")
        table.add_column("Category")
        table.add_column("Confidence")
        table.add_column("Analyzed at", style="dim")
        for row in catalog.items:
            confidence = f"{row.confidence:.0%}" if row.confidence is not None else "-"
            table.add_row(
                str(row.id),
                row.name,
                row.status.value,
                row.google_category or "-",
                f"[{_confidence_style(row.confidence)}]{confidence}[/]",
                row.analyzed_at or "-",
            )
        console.print(table)

    run(_list())


@app.command("add-product")
def add_product(
    name: str = typer.Argument(...),
    description: str = typer.Option(None),
    price: float = typer.Option(None),
    image: List[str] = typer.Option(None, help="Image URL; the first one is the featured image"),
    draft: bool = typer.Option(False, "--draft"),
):
    """Register a product in the local store"""

    async def _add():
        images = list(image or [])
        async with service_scope() as services:
            product = await services.products.create_product(
                ProductCreate(
                    name=name,
                    description=description,
                    price=price,
                    status="draft" if draft else "publish",
                    image_url=images[0] if images else None,
                    gallery_urls=images[1:],
                )
            )
            product_id = product.id
        console.print(f"Product [bold]{product_id}[/bold] created")

    run(_add())


@app.command()
def serve(
    host: str = typer.Option(None, help="Bind address (default TAXOAI_HOST)"),
    port: int = typer.Option(None, help="Port (default TAXOAI_PORT)"),
    reload: bool = typer.Option(False, "--reload"),
):
    """Run the HTTP API"""
    import uvicorn

    uvicorn.run(
        "taxoai.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_config=None,
        access_log=False,
    )


if __name__ == "__main__":
    app()
