"""
Marketplace Load Generator CLI

Usage:
    marketsim serve --port 3000 --register alice=http://localhost:3001
    marketsim periods --start 95 --count 20
    marketsim seller --name alice --port 3001
"""

import asyncio
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import MarketSimSettings
from .logs import configure_logging
from .orchestration.dispatcher import guess_period

app = typer.Typer(
    name="marketsim",
    help="Marketplace load generator - send orders to sellers and check their bills",
    add_completion=False,
)
console = Console()


def parse_registration(value: str) -> tuple[str, str]:
    """Parse a ``name=url`` seller registration."""
    name, sep, url = value.partition("=")
    if not sep or not name.strip() or not url.strip():
        raise typer.BadParameter(f"Expected name=url, got '{value}'")
    return name.strip(), url.strip()


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="API bind host"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="API port"),
    acceleration: Optional[float] = typer.Option(
        None, "--acceleration", "-a", help="Shorten every interval by this factor"
    ),
    start_iteration: Optional[int] = typer.Option(
        None, "--start-iteration", help="Iteration to start from"
    ),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for order generation"),
    register: list[str] = typer.Option(
        [], "--register", "-r", help="Pre-register a seller as name=url (repeatable)"
    ),
):
    """Run the registration API and the dispatcher."""
    overrides = {
        key: value
        for key, value in {
            "host": host,
            "port": port,
            "acceleration": acceleration,
            "start_iteration": start_iteration,
            "seed": seed,
        }.items()
        if value is not None
    }
    try:
        settings = MarketSimSettings(**overrides)
    except ValidationError as e:
        console.print(f"[red]Invalid configuration:[/red]\n{escape(str(e))}")
        raise typer.Exit(code=1)

    registrations = [parse_registration(value) for value in register]

    configure_logging(settings.log_level, settings.log_json)

    console.print("[bold green]Starting marketplace[/bold green]")
    console.print(f"  API: http://{settings.host}:{settings.port}")
    console.print(f"  Acceleration: {settings.acceleration}x")
    console.print(f"  Start iteration: {settings.start_iteration}")
    console.print(f"  Pre-registered sellers: {len(registrations)}")

    try:
        asyncio.run(_serve(settings, registrations))
    except KeyboardInterrupt:
        console.print("\n[yellow]Marketplace stopped by user[/yellow]")
    except ValueError as e:
        console.print(f"\n[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1)


async def _serve(settings: MarketSimSettings, registrations: list[tuple[str, str]]) -> None:
    import uvicorn

    from .api.server import create_app
    from .market import build_marketplace

    async with build_marketplace(settings) as market:
        for name, url in registrations:
            market.seller_service.register(url, name)

        api = create_app(market.seller_service, market.dispatcher)
        server = uvicorn.Server(
            uvicorn.Config(
                api,
                host=settings.host,
                port=settings.port,
                log_level=settings.log_level.lower(),
            )
        )

        task = market.dispatcher.start(settings.start_iteration)
        try:
            await server.serve()
        finally:
            market.dispatcher.stop()
            await asyncio.gather(task, return_exceptions=True)


@app.command()
def periods(
    start: int = typer.Option(0, "--start", "-s", help="First iteration", min=0),
    count: int = typer.Option(20, "--count", "-c", help="Number of iterations", min=1),
    changes_only: bool = typer.Option(
        False, "--changes-only", help="Only show iterations where the period changes"
    ),
):
    """Show which reduction and interval apply to a range of iterations."""
    table = Table(title="Shopping periods")
    table.add_column("Iteration", style="cyan", justify="right")
    table.add_column("Reduction", style="green")
    table.add_column("Interval (ms)", justify="right")

    previous = None
    for iteration in range(start, start + count):
        period = guess_period(iteration)
        if changes_only and period == previous:
            continue
        table.add_row(str(iteration), period.reduction.name, str(period.shopping_interval_ms))
        previous = period

    console.print(table)


@app.command()
def seller(
    name: str = typer.Option("reference-seller", "--name", "-n", help="Seller name"),
    host: str = typer.Option("0.0.0.0", "--host", help="Bind host"),
    port: int = typer.Option(3001, "--port", "-p", help="Port"),
):
    """Run a reference seller that always bills correctly."""
    from .sellers.reference_seller import run_seller

    configure_logging()
    console.print(f"[bold green]Reference seller '{name}'[/bold green] on port {port}")
    console.print(f"  Register it with: marketsim serve --register {name}=http://localhost:{port}")
    run_seller(name, host, port)


if __name__ == "__main__":
    app()
