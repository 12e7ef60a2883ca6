"""Command-line interface for shelfshare.

Built with Typer for commands and Rich for beautiful output.
"""

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from .. import __version__
from .accrual import (
    DayCountPolicy,
    InvalidInputError,
    compute_accrual,
    cost_breakdown,
    late_fee,
    rental_cost,
)
from .api import PlatformAuthError, PlatformError, RentalPlatformClient
from .cache import ResponseCache
from .config import get_config
from .statements import BorrowerStatement, LineStatus, StatementBuilder

# Create the main app
app = typer.Typer(
    name="shelfshare",
    help="Work out what borrowers owe on rented books.",
    no_args_is_help=True,
)

# Create sub-apps for command groups
cache_app = typer.Typer(help="Manage the local response cache.")
app.add_typer(cache_app, name="cache")

# Rich console for pretty output
console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Work out what borrowers owe on rented books."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


# ============================================================================
# Helper Functions
# ============================================================================


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[dim]{message}[/dim]")


def format_money(amount: Decimal) -> str:
    """Format an amount with two decimals."""
    return f"{amount:,.2f}"


def format_statement_table(statement: BorrowerStatement) -> Table:
    """Create a rich table for a borrower statement."""
    table = Table(title="Borrowed Books", show_header=True, header_style="bold magenta")
    table.add_column("Title", style="cyan", no_wrap=False, max_width=40)
    table.add_column("Owner", style="green", max_width=25)
    table.add_column("Checked Out")
    table.add_column("Rate/Day", justify="right")
    table.add_column("Days", justify="center")
    table.add_column("Rent Due", justify="right")
    table.add_column("Late Fee", justify="right")
    table.add_column("Status", style="yellow")

    for line in statement.lines:
        status = (
            f"[red]Overdue {line.days_overdue}d[/red]"
            if line.status == LineStatus.OVERDUE
            else "Active"
        )
        table.add_row(
            line.book_title,
            line.owner_name or "-",
            line.checkout_at.strftime("%b %d, %Y"),
            format_money(line.daily_rate),
            str(line.accrual.days_elapsed),
            format_money(line.accrual.amount_due),
            format_money(line.estimated_late_fee),
            status,
        )

    return table


# ============================================================================
# Calculation Commands
# ============================================================================


@app.command()
def accrual(
    checkout: str = typer.Argument(..., help="Checkout timestamp (ISO-8601)"),
    rate: str = typer.Option(..., "--rate", "-r", help="Charge per day"),
    now: Optional[str] = typer.Option(None, "--now", "-n", help="Evaluate at this instant"),
    policy: DayCountPolicy = typer.Option(
        DayCountPolicy.CEILING, "--policy", "-p", help="Day counting policy"
    ),
) -> None:
    """Show days elapsed and rent due on a rental."""
    try:
        result = compute_accrual(checkout, rate, now=now, policy=policy)
    except InvalidInputError as e:
        print_error(str(e))
        raise typer.Exit(1)

    console.print(f"Days elapsed: [bold]{result.days_elapsed}[/bold]")
    console.print(f"Amount due:   [bold]{format_money(result.amount_due)}[/bold]")


@app.command("late-fee")
def late_fee_command(
    due: str = typer.Argument(..., help="Due date (ISO-8601)"),
    returned: Optional[str] = typer.Argument(None, help="Return date (default: now)"),
    rate: Optional[str] = typer.Option(None, "--rate", "-r", help="Late fee per day"),
) -> None:
    """Show the late fee for a rental."""
    config = get_config()
    try:
        fee = late_fee(
            due,
            returned,
            rate=rate if rate is not None else config.late_fee_per_day,
            grace_period_days=config.fine_grace_days,
            max_fine=config.max_fine,
        )
    except InvalidInputError as e:
        print_error(str(e))
        raise typer.Exit(1)

    console.print(f"Days late: [bold]{fee.days_late}[/bold]")
    suffix = " [dim](capped)[/dim]" if fee.capped else ""
    console.print(f"Late fee:  [bold]{format_money(fee.amount)}[/bold]{suffix}")


@app.command()
def cost(
    start: str = typer.Argument(..., help="Rental start (ISO-8601)"),
    end: str = typer.Argument(..., help="Due date (ISO-8601)"),
    rate: str = typer.Option(..., "--rate", "-r", help="Price per day"),
    returned: Optional[str] = typer.Option(
        None, "--returned", help="Return date, for a full breakdown"
    ),
) -> None:
    """Show the cost of a rental period."""
    config = get_config()
    try:
        if returned is None:
            total = rental_cost(rate, start, end)
            console.print(f"Rental cost: [bold]{format_money(total)}[/bold]")
            return

        breakdown = cost_breakdown(
            rate,
            start,
            end,
            returned=returned,
            late_fee_rate=config.late_fee_per_day,
            grace_period_days=config.fine_grace_days,
            max_fine=config.max_fine,
        )
    except InvalidInputError as e:
        print_error(str(e))
        raise typer.Exit(1)

    lines = [
        f"[bold]Daily rate:[/bold] {format_money(breakdown.daily_rate)}",
        f"[bold]Rental days:[/bold] {breakdown.rental_days}",
        f"[bold]Base cost:[/bold] {format_money(breakdown.base_cost)}",
        f"[bold]Late fees:[/bold] {format_money(breakdown.late_fees)}",
        f"[bold]Total:[/bold] {format_money(breakdown.total_cost)}",
        f"[bold]Returned:[/bold] {breakdown.return_status.value}",
    ]
    console.print(Panel("\n".join(lines), title="Cost Breakdown"))


# ============================================================================
# Platform Commands
# ============================================================================


@app.command()
def statement(
    token: Optional[str] = typer.Option(None, "--token", "-t", help="API bearer token"),
    now: Optional[str] = typer.Option(None, "--now", "-n", help="Evaluate at this instant"),
) -> None:
    """Show rent due on every book you have checked out."""
    config = get_config()
    if token:
        config = replace(config, api_token=token)
    if not config.has_api_token():
        print_error("No API token. Set SHELFSHARE_API_TOKEN or pass --token.")
        raise typer.Exit(1)

    builder = StatementBuilder(config=config)
    try:
        result = builder.build(now=now)
    except PlatformAuthError as e:
        print_error(f"Not authorized: {e}")
        raise typer.Exit(1)
    except PlatformError as e:
        print_error(f"Platform error: {e}")
        raise typer.Exit(1)
    except InvalidInputError as e:
        print_error(str(e))
        raise typer.Exit(1)

    if not result.lines:
        print_info("No books checked out.")
    else:
        console.print(format_statement_table(result))
        console.print(
            f"\nRent due: [bold]{format_money(result.total_rent_due)}[/bold]  "
            f"Late fees: [bold]{format_money(result.total_late_fees)}[/bold]  "
            f"Total: [bold]{format_money(result.grand_total)}[/bold]"
        )

    for hold in result.holds:
        style = "yellow" if hold.expiring_soon else "dim"
        console.print(f"[{style}]Hold: {hold.book_title} ({hold.time_remaining} left)[/{style}]")

    if result.skipped:
        print_info(f"{result.skipped} rental(s) skipped due to incomplete data.")


@app.command("late-fee-rate")
def late_fee_rate(
    token: Optional[str] = typer.Option(None, "--token", "-t", help="API bearer token"),
) -> None:
    """Show the platform's current late fee per day."""
    config = get_config()
    client = RentalPlatformClient(
        base_url=config.api_url,
        token=token or config.api_token,
        timeout=config.api_timeout,
    )
    try:
        rate = client.get_late_fee_rate()
    except PlatformError as e:
        print_error(f"Platform error: {e}")
        raise typer.Exit(1)

    console.print(f"Late fee: [bold]{format_money(rate)}[/bold] per day")


# ============================================================================
# Cache Commands
# ============================================================================


@cache_app.command("clear")
def cache_clear() -> None:
    """Remove every cached response."""
    config = get_config()
    count = ResponseCache(config.cache_path, ttl=config.cache_ttl).clear()
    print_success(f"Removed {count} cached response(s)")


@cache_app.command("purge")
def cache_purge() -> None:
    """Remove expired cached responses."""
    config = get_config()
    count = ResponseCache(config.cache_path, ttl=config.cache_ttl).purge_expired()
    print_success(f"Purged {count} expired response(s)")


# ============================================================================
# Utility Commands
# ============================================================================


@app.command("config")
def show_config() -> None:
    """Show current configuration."""
    cfg = get_config()

    table = Table(title="Configuration", show_header=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("API URL", cfg.api_url)
    table.add_row("API Token", "[green]Set[/green]" if cfg.has_api_token() else "[red]Not set[/red]")
    table.add_row("Cache Path", str(cfg.cache_path))
    table.add_row("Cache TTL", f"{cfg.cache_ttl}s")
    table.add_row("Late Fee / Day", cfg.late_fee_per_day)
    table.add_row("Grace Days", str(cfg.fine_grace_days))
    table.add_row("Max Fine", cfg.max_fine or "None")
    table.add_row("Default Daily Rate", cfg.default_daily_rate)

    console.print(table)

    errors = cfg.validate()
    for error in errors:
        print_error(error)
    if errors:
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"shelfshare version {__version__}")


if __name__ == "__main__":
    app()
