# catalog_sync/cli/runner.py

"""Headless CLI commands, each driving the product store once."""

import json
import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from rich.console import Console
from rich.table import Table

from catalog_sync.clients.resource_client import ResourceClient
from catalog_sync.filters.product_sort import sort_products
from catalog_sync.forms.product_form import (
    apply_product_edit,
    build_product,
    parse_comment_text,
    product_form_values,
)
from catalog_sync.models.comment import Comment, CommentDraft
from catalog_sync.models.errors import ValidationError
from catalog_sync.models.product import Product
from catalog_sync.services.product_store import ActionResult, ProductStore

logger = logging.getLogger("catalog_sync.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


@asynccontextmanager
async def open_store() -> AsyncIterator[ProductStore]:
    """Yield a started store backed by a fresh client."""
    async with ResourceClient() as client:
        async with ProductStore(client) as store:
            yield store


def _report(result: ActionResult) -> bool:
    """Print a failed action to stderr; return whether it succeeded."""
    if not result.ok:
        _err.print(f"[red]Error: {result.error}[/red]")
    return result.ok


def _report_validation(exc: ValidationError) -> None:
    for name, message in exc.errors.items():
        _err.print(f"[red]{name}: {message}[/red]")


def _write_json(data: Any) -> None:
    json.dump(data, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")


def _print_products(products: list[Product]) -> None:
    """Render a Rich table of products to stdout."""
    table = Table(
        title="Products",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Name", max_width=40)
    table.add_column("Count", justify="right", style="green")
    table.add_column("Weight")
    table.add_column("Size (W x H)", justify="center")
    table.add_column("Comments", justify="right")
    table.add_column("ID", overflow="fold", style="dim")

    for idx, p in enumerate(products, 1):
        table.add_row(
            str(idx),
            p.name,
            str(p.count),
            p.weight or "—",
            f"{p.size.width:g} x {p.size.height:g}",
            str(len(p.comments)),
            p.id,
        )

    Console().print(table)


def _print_comments(comments: list[Comment]) -> None:
    table = Table(title="Comments", title_style="bold cyan")
    table.add_column("Date", style="dim")
    table.add_column("Comment")
    table.add_column("ID", overflow="fold", style="dim")
    for c in comments:
        table.add_row(c.date, c.description, c.id)
    Console().print(table)


async def cli_list(sort_key: str, output_format: str) -> int:
    """List every product, sorted for display."""
    async with open_store() as store:
        if not _report(await store.load()):
            return 1
        products = sort_products(store.items, sort_key)

    if output_format == "table":
        _print_products(products)
    else:
        _write_json([p.to_dict() for p in products])
    return 0


async def cli_show(product_id: str, output_format: str) -> int:
    """Show one product together with its comments."""
    async with open_store() as store:
        if not _report(await store.load()):
            return 1
        product = store.find(product_id)
        if product is None:
            _err.print(f"[yellow]Product {product_id} isn't found[/yellow]")
            return 1
        result = await store.fetch_comments(product_id)
        if not _report(result):
            return 1
        comments: list[Comment] = result.value

    if output_format == "table":
        _print_products([product])
        _print_comments(comments)
    else:
        _write_json(
            {
                **product.to_dict(),
                "commentDetails": [c.to_dict() for c in comments],
            }
        )
    return 0


async def cli_add(fields: dict[str, str]) -> int:
    """Validate form fields and create a product."""
    try:
        product = build_product(fields)
    except ValidationError as exc:
        _report_validation(exc)
        return 1

    async with open_store() as store:
        result = await store.create(product)
    if not _report(result):
        return 1
    _err.print(f"[green]✓ Created {result.value.name} ({result.value.id})[/green]")
    return 0


async def cli_update(product_id: str, changes: dict[str, str]) -> int:
    """Apply the given field changes to an existing product."""
    async with open_store() as store:
        if not _report(await store.load()):
            return 1
        current = store.find(product_id)
        if current is None:
            _err.print(f"[yellow]Product {product_id} isn't found[/yellow]")
            return 1

        values = product_form_values(current)
        values.update(changes)
        try:
            edited = apply_product_edit(current, values)
        except ValidationError as exc:
            _report_validation(exc)
            return 1

        result = await store.update(edited)
    if not _report(result):
        return 1
    _err.print(f"[green]✓ Updated {product_id}[/green]")
    return 0


async def cli_delete(product_id: str) -> int:
    """Delete a product (its comments stay on the backend)."""
    async with open_store() as store:
        result = await store.delete(product_id)
    if not _report(result):
        return 1
    _err.print(f"[green]✓ Deleted {product_id}[/green]")
    return 0


async def cli_comment(product_id: str, text: str) -> int:
    """Attach a new comment to a product."""
    try:
        description = parse_comment_text(text)
    except ValidationError as exc:
        _report_validation(exc)
        return 1

    async with open_store() as store:
        result = await store.add_comment(
            product_id, CommentDraft(description)
        )
    if not _report(result):
        return 1
    _err.print(f"[green]✓ Comment {result.value.id} added[/green]")
    return 0


async def cli_uncomment(product_id: str, comment_id: str) -> int:
    """Remove a comment from a product."""
    async with open_store() as store:
        result = await store.delete_comment(product_id, comment_id)
    if not _report(result):
        return 1
    _err.print(f"[green]✓ Comment {comment_id} removed[/green]")
    return 0


async def run_health_check() -> int:
    """Run a connectivity health check on both collections."""
    from catalog_sync.services.health_checker import HealthChecker

    _err.print("[bold]Running backend health check...[/bold]")
    async with ResourceClient() as client:
        results = await HealthChecker(client).check_all()

    table = Table(
        title="Backend Health Check",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Resource", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Latency", justify="right")
    table.add_column("Notes", style="dim")

    any_down = False
    for r in results:
        if r.status == "ok":
            status = "[green]✅ OK[/green]"
        elif r.status == "slow":
            status = "[yellow]⚠️  SLOW[/yellow]"
        else:
            status = "[red]❌ DOWN[/red]"
            any_down = True

        latency = (
            f"{r.latency_ms:.0f}ms"
            if r.latency_ms > 0
            else "—"
        )
        table.add_row(r.resource, status, latency, r.message)

    Console().print(table)
    return 1 if any_down else 0
