"""Command-line interface for the Saleor checkout app."""

import asyncio
import json
from pathlib import Path
from typing import Optional
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.json import JSON

from .client import SaleorGraphQLClient, complete_checkout
from .config import AppConfig
from .manifest import get_app_manifest
from .mock_client import MockSaleorClient
from .models.webhook_models import CheckoutCompleted, CheckoutCompleteRejected

app = typer.Typer(
    name="saleor-checkout",
    help="Saleor checkout completer app CLI"
)
console = Console()


def load_config(config_path: str, saleor_host_url: Optional[str] = None) -> AppConfig:
    """Load configuration from JSON file."""
    config_file = Path(config_path)
    if not config_file.exists():
        console.print(f"[red]Error: Config file not found: {config_path}[/red]")
        raise typer.Exit(1)

    with open(config_file) as f:
        config_data = json.load(f)

    cfg = AppConfig(**config_data)
    if saleor_host_url:
        cfg.saleor.host_url = saleor_host_url
    return cfg


@app.command()
def init(
    output: str = typer.Option("config.json", help="Output configuration file path")
):
    """Initialize a new configuration file with example values."""
    example_config = AppConfig.model_config["json_schema_extra"]["example"]

    output_path = Path(output)
    with open(output_path, 'w') as f:
        json.dump(example_config, f, indent=2)

    console.print(f"[green]✓[/green] Configuration file created: {output}")
    console.print("\n[yellow]⚠ Please edit the file and set your Saleor host and app URL![/yellow]")


@app.command()
def validate(
    config: str = typer.Option("config.json", help="Configuration file path"),
):
    """Validate configuration file."""
    try:
        cfg = load_config(config)
    except (ValidationError, ValueError) as e:
        console.print(f"[red]✗ Configuration error:[/red] {str(e)}")
        raise typer.Exit(1)

    console.print("[green]✓[/green] Configuration is valid!")
    console.print(f"\n[bold]App:[/bold] {cfg.app.name} ({cfg.app.app_id})")
    console.print(f"[bold]App URL:[/bold] {cfg.app.app_url}")
    console.print(f"[bold]Saleor API:[/bold] {cfg.saleor.api_url or 'taken from delivery headers'}")
    console.print(f"[bold]APL backend:[/bold] {cfg.apl.backend}")


@app.command()
def serve(
    config: str = typer.Option("config.json", help="Configuration file path"),
    host: str = typer.Option("0.0.0.0", help="Host to bind to"),
    port: int = typer.Option(8000, help="Port to bind to"),
    saleor_host_url: Optional[str] = typer.Option(
        None, envvar="SALEOR_HOST_URL", help="Saleor host URL overriding the config file"
    ),
):
    """Start the app server receiving Saleor webhooks."""
    from .webhook import create_webhook_app
    import uvicorn

    cfg = load_config(config, saleor_host_url)
    webhook_app = create_webhook_app(cfg)

    console.print(f"[green]Starting app server on {host}:{port}[/green]")
    console.print(f"[blue]Manifest: http://{host}:{port}/api/manifest[/blue]")
    console.print(f"[blue]Webhook endpoint: http://{host}:{port}/api/webhooks/checkout-fully-paid[/blue]")

    uvicorn.run(webhook_app, host=host, port=port)


@app.command()
def manifest(
    config: str = typer.Option("config.json", help="Configuration file path"),
    output: Optional[str] = typer.Option(None, help="Output file for JSON (optional)"),
):
    """Print the app manifest Saleor installs the app from."""
    cfg = load_config(config)
    data = get_app_manifest(cfg)

    if output:
        with open(Path(output), "w") as f:
            json.dump(data, f, indent=2)
        console.print(f"[green]✓[/green] Manifest saved to {output}")
        return

    console.print(JSON(json.dumps(data, indent=2)))


@app.command()
def complete(
    checkout_id: str = typer.Argument(..., help="ID of the checkout to complete"),
    api_url: str = typer.Option(
        "http://localhost:8000/graphql/", envvar="SALEOR_API_URL", help="Saleor GraphQL endpoint"
    ),
    token: str = typer.Option("", envvar="SALEOR_APP_TOKEN", help="App token"),
    sandbox: bool = typer.Option(False, help="Use the mock Saleor client instead of the network"),
):
    """Complete a checkout once, outside of webhook delivery."""

    async def _complete():
        http_client = MockSaleorClient() if sandbox else None
        async with SaleorGraphQLClient(api_url, token, client=http_client) as client:
            return await complete_checkout(client, checkout_id)

    outcome = asyncio.run(_complete())

    if isinstance(outcome, CheckoutCompleted):
        console.print(f"[green]✓[/green] Checkout completed, order: {outcome.order_id}")
        return

    if isinstance(outcome, CheckoutCompleteRejected):
        for error in outcome.errors:
            console.print(f"[red]✗ {error.code}[/red] {error.field or '-'}: {error.message}")
    else:
        console.print(f"[red]✗ checkoutComplete failed:[/red] {outcome.reason}")
    raise typer.Exit(1)


if __name__ == "__main__":
    app()
