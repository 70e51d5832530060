"""CLI commands that print collection reports as tables."""

import typer
from rich.table import Table

from collectibles.catalog.schemas import Item
from collectibles.catalog.store import CollectionStore
from collectibles.cli.runner import console, error_console, run_async
from collectibles.config.settings import get_settings
from collectibles.db.session import get_session_factory
from collectibles.reports import service
from collectibles.reports.formatting import format_currency, format_percentage

app = typer.Typer(help="Print valuation reports", no_args_is_help=True)


async def _load_store() -> CollectionStore:
    store = CollectionStore(get_session_factory())
    if not await store.load():
        error_console.print("[red]Error: Unable to load the collection.[/red]")
        raise typer.Exit(1)
    return store


def _item_table(title: str, items: list[Item], store: CollectionStore) -> Table:
    table = Table(title=title)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Item")
    table.add_column("Category")
    table.add_column("Valuation", justify="right", style="green")
    for rank, item in enumerate(items, start=1):
        category = store.get_category(item.category_id)
        table.add_row(
            str(rank),
            item.name,
            category.name if category else "",
            format_currency(item.valuation),
        )
    return table


@app.command("sums")
def category_sums() -> None:
    """In-stock valuation per category."""

    async def _sums() -> None:
        store = await _load_store()
        report = service.category_valuation_sums(store.categories, store.items)
        if not report.categories:
            console.print("[yellow]No valued in-stock items.[/yellow]")
            return

        table = Table(title="Category SUMS")
        table.add_column("Category")
        table.add_column("Valuation", justify="right", style="green")
        for row in report.categories:
            table.add_row(row.name, format_currency(row.sum))
        table.add_section()
        total = format_currency(report.total_valuation)
        table.add_row("[bold]Total[/bold]", f"[bold]{total}[/bold]")
        console.print(table)

    run_async(_sums())


@app.command("top")
def top_items(
    limit: int = typer.Option(
        service.TOP_ITEMS_LIMIT, "--limit", "-l", min=1, help="Number of items"
    ),
) -> None:
    """Most valuable items."""

    async def _top() -> None:
        store = await _load_store()
        items = service.top_items_by_value(store.items, limit=limit)
        console.print(_item_table(f"Top {limit} Items by Value", items, store))

    run_async(_top())


@app.command("wishlist")
def wishlist() -> None:
    """Out-of-stock items, most valuable first."""

    async def _wishlist() -> None:
        store = await _load_store()
        items = service.wishlist(store.items)
        if not items:
            console.print("[yellow]The wishlist is empty.[/yellow]")
            return
        console.print(_item_table("Wishlist", items, store))

    run_async(_wishlist())


@app.command("valuation")
def valuation() -> None:
    """Purchase price against valuation, grouped by category."""

    async def _valuation() -> None:
        store = await _load_store()
        report = service.valuation_report(store.categories, store.items)
        if not report.groups:
            console.print("[yellow]No in-stock items with a purchase price and valuation.[/yellow]")
            return

        table = Table(title="Valuation Report")
        table.add_column("Item")
        table.add_column("Bought For", justify="right")
        table.add_column("Valuation", justify="right")
        table.add_column("Profit", justify="right")
        table.add_column("Profit %", justify="right")
        for group in report.groups:
            table.add_row(
                f"[bold]{group.category_name}[/bold]",
                format_currency(group.total_purchases),
                format_currency(group.total_valuation),
                format_currency(group.total_profit),
                "",
            )
            for line in group.items:
                style = "green" if line.profit >= 0 else "red"
                table.add_row(
                    f"  {line.name}",
                    format_currency(line.bought_for),
                    format_currency(line.valuation),
                    f"[{style}]{format_currency(line.profit)}[/{style}]",
                    f"[{style}]{format_percentage(line.profit_percentage)}[/{style}]",
                )
            table.add_section()
        table.add_row(
            "[bold]Total[/bold]",
            format_currency(report.total_purchases),
            format_currency(report.total_valuation),
            format_currency(report.total_profit),
            format_percentage(report.total_profit_percentage),
        )
        console.print(table)

    run_async(_valuation())


@app.command("home")
def home(
    category: str | None = typer.Option(None, "--category", "-c", help="Top-level category name"),
    subcategory: str | None = typer.Option(None, "--subcategory", "-s", help="Direct child name"),
) -> None:
    """Valuation of the home category tree."""
    settings = get_settings()

    async def _home() -> None:
        store = await _load_store()
        report = service.category_tree_valuation(
            store.categories,
            store.items,
            category or settings.home_report_category,
            subcategory if subcategory is not None else settings.home_report_subcategory,
        )

        table = Table(title="Category Valuation")
        table.add_column("Category")
        table.add_column("Items", justify="right")
        table.add_column("Valuation", justify="right", style="green")
        for total in (report.category, report.subcategory):
            if total is None:
                continue
            if total.found:
                table.add_row(
                    total.name, str(total.item_count), format_currency(total.total_valuation)
                )
            else:
                table.add_row(total.name, "0", "[dim italic]Not found[/dim italic]")
        console.print(table)

    run_async(_home())
