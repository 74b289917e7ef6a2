"""Terminal output using Rich library."""
from datetime import datetime
from rich.console import Console
from rich.table import Table
from models import CheckOutcome, CheckResult

OUTCOME_STYLES = {
    CheckOutcome.NOT_AVAILABLE: "dim",
    CheckOutcome.AVAILABLE_UNPARSABLE_PRICE: "yellow",
    CheckOutcome.AVAILABLE_ABOVE_LIMIT: "white",
    CheckOutcome.AVAILABLE_WITHIN_BUDGET: "bold green",
}


def render_results_table(results: list[CheckResult], currency_symbol: str = "£") -> str:
    """Render one pass of check results as a Rich table. Returns string representation."""
    console = Console(record=True, width=160)

    if not results:
        console.print("[bold red]No products configured.[/bold red]")
        return console.export_text()

    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    in_stock = sum(1 for r in results if r.in_stock)
    console.print(f"\n[bold]Restock Monitor — {now}    In stock: {in_stock}/{len(results)}[/bold]\n")

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", width=3)
    table.add_column("Product", width=30)
    table.add_column("Status", width=16)
    table.add_column("Price", justify="right", width=10)
    table.add_column("Limit", justify="right", width=10)
    table.add_column("Autobuy", width=16)
    table.add_column("Screenshot", width=30)

    for i, result in enumerate(results, 1):
        price = f"{currency_symbol}{result.price:,.2f}" if result.price is not None else "—"
        limit = f"{currency_symbol}{result.max_price:,.2f}" if result.max_price else "any"
        table.add_row(
            str(i),
            result.product_name,
            result.outcome.value,
            price,
            limit,
            result.purchase.value if result.purchase else "—",
            result.screenshot_path or "—",
            style=OUTCOME_STYLES[result.outcome],
        )

    console.print(table)
    return console.export_text()
