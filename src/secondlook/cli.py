"""
Command-line interface for secondlook package.

This module provides the main CLI application using Typer, with rich UI components
for progress indication and user feedback.
"""

import asyncio
import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.status import Status
from rich.table import Table

from .config import load_config
from .core.batch_parser import parse_batch_input
from .core.cdn import MalformedAssetUrlError, is_recognized_asset_url, parse_asset_url
from .core.enhancement import generate_enhanced_url, revert_to_original
from .core.generation import describe_listing_photo, generate_multiple_descriptions
from .errors import get_user_friendly_message
from .models import DescriptionOutcome, DescriptionRequest

# Create the main Typer application
app = typer.Typer(
    name="secondlook",
    help="Product photo enhancement and AI listing descriptions.",
    no_args_is_help=True,
)

# Create a sub-application for image URL commands
image_app = typer.Typer(
    name="image",
    help="CDN image URL commands",
    no_args_is_help=True,
)

# Add the image sub-application to the main app
app.add_typer(image_app, name="image")

# Create console for rich output
console = Console()


@image_app.command("enhance")
def enhance_command(
    url: str = typer.Argument(..., help="CDN delivery URL of the product photo"),
) -> None:
    """Print the URL with background removal and square padding applied."""
    try:
        console.print(generate_enhanced_url(url), soft_wrap=True)
    except MalformedAssetUrlError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@image_app.command("revert")
def revert_command(
    url: str = typer.Argument(..., help="Previously enhanced delivery URL"),
) -> None:
    """Print the URL with the enhancement chain removed."""
    console.print(revert_to_original(url), soft_wrap=True)


@image_app.command("public-id")
def public_id_command(
    url: str = typer.Argument(..., help="CDN delivery URL"),
) -> None:
    """Print the public ID of an asset."""
    try:
        parts = parse_asset_url(url)
    except MalformedAssetUrlError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)
    console.print(parts.public_id, soft_wrap=True)


@image_app.command("check")
def check_command(
    url: str = typer.Argument(..., help="URL to inspect"),
) -> None:
    """Show how a URL breaks down into CDN delivery parts."""
    if not is_recognized_asset_url(url):
        console.print("[yellow]Not a CDN delivery URL[/yellow]")
        sys.exit(1)

    parts = parse_asset_url(url)
    table = Table(title="Asset URL", show_header=False)
    table.add_column("Part", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Origin", parts.origin)
    table.add_row("Resource Type", parts.resource_type)
    table.add_row("Delivery Type", parts.delivery_type)
    table.add_row("Transformations", "/".join(parts.transformations) or "-")
    table.add_row("Version", parts.version or "-")
    table.add_row("Public ID", parts.public_id)
    table.add_row("Format", parts.format or "-")

    console.print(table)


@app.command("describe")
def describe_command(
    image_url: str = typer.Argument(..., help="URL of the product photo"),
    category: str = typer.Option(
        ..., "--category", "-c", help="Listing category, e.g. ELECTRONICS"
    ),
    condition: str = typer.Option(
        ..., "--condition", "-k", help="Item condition, e.g. GOOD"
    ),
    title: Optional[str] = typer.Option(
        None, "--title", "-t", help="Seller title to refine"
    ),
    style: Optional[str] = typer.Option(
        None, "--style", "-s", help="Description style (detailed, concise, seo)"
    ),
    enhance: bool = typer.Option(
        True, "--enhance/--no-enhance", help="Enhance CDN photos before describing"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose output"
    ),
) -> None:
    """
    Generate a listing description from a product photo.

    Examples:
        secondlook describe https://cdn.example.com/image/upload/v1/chair.jpg -c HOME_GARDEN -k GOOD
        secondlook describe https://example.com/phone.jpg -c ELECTRONICS -k LIKE_NEW --style seo
    """

    async def _async_describe() -> None:
        try:
            with Status("Loading configuration...", console=console):
                config = await load_config()

            request = DescriptionRequest(
                image_url=image_url,
                category=category,
                condition=condition,
                title=title,
                style=style,
            )

            with Status("Generating description...", console=console):
                outcome = await describe_listing_photo(request, config, enhance=enhance)

            _display_outcome(outcome, verbose)

        except KeyboardInterrupt:
            console.print("\n[yellow]Operation cancelled by user[/yellow]")
            sys.exit(1)
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")
            if verbose:
                console.print_exception()
            sys.exit(1)

        if not outcome.ok:
            sys.exit(1)

    # Run the async function
    asyncio.run(_async_describe())


def _display_outcome(outcome: DescriptionOutcome, verbose: bool = False) -> None:
    """Display a single description outcome."""
    if not outcome.ok:
        console.print(f"[red]Error: {get_user_friendly_message(outcome.error)}[/red]")
        if verbose:
            console.print(f"[dim]{outcome.error}[/dim]")
        return

    result = outcome.result
    console.print("[green]✓ Description generated successfully![/green]")
    if result.suggested_title:
        console.print(f"[blue]Title:[/blue] {result.suggested_title}")
    console.print()
    console.print(result.description)

    if verbose:
        table = Table(title="Generation Results", show_header=False)
        table.add_column("Property", style="cyan")
        table.add_column("Value", style="white")

        table.add_row("Words", str(result.word_count))
        table.add_row("Characters", str(result.character_count))
        table.add_row("Model Used", result.get_metadata("model", "unknown"))
        for name, value in result.attributes.model_dump().items():
            if value:
                table.add_row(name.capitalize(), value)
        if outcome.processing_time_seconds is not None:
            table.add_row(
                "Generation Time", f"{outcome.processing_time_seconds:.2f} seconds"
            )

        console.print()
        console.print(table)


@app.command("describe-batch")
def describe_batch_command(
    input_file: Path = typer.Argument(
        ..., help="JSONL or CSV file with one request per row"
    ),
    concurrency: Optional[int] = typer.Option(
        None, "--concurrency", "-j", min=1, max=50, help="Parallel requests"
    ),
) -> None:
    """Generate descriptions for every request in a batch file."""

    async def _async_batch() -> List[DescriptionOutcome]:
        config = await load_config()
        requests, rejected = await parse_batch_input(input_file)

        for row in rejected:
            console.print(
                f"[yellow]Skipped row {row.row_number}: {row.error_message}[/yellow]"
            )

        with Status(f"Describing {len(requests)} photos...", console=console):
            return await generate_multiple_descriptions(
                requests, config, max_concurrent=concurrency
            )

    try:
        outcomes = asyncio.run(_async_batch())
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    table = Table(title="Batch Results")
    table.add_column("Request", style="cyan")
    table.add_column("Status")
    table.add_column("Detail", style="white")

    for outcome in outcomes:
        if outcome.ok:
            detail = outcome.result.suggested_title or outcome.result.description[:60]
            table.add_row(outcome.request_id, "[green]success[/green]", detail)
        else:
            table.add_row(
                outcome.request_id,
                "[red]failure[/red]",
                f"{outcome.error.code.value}: {get_user_friendly_message(outcome.error)}",
            )

    console.print(table)
    succeeded = sum(outcome.ok for outcome in outcomes)
    console.print(f"{succeeded}/{len(outcomes)} descriptions generated")

    if succeeded < len(outcomes):
        sys.exit(1)


@app.command("version")
def version_command() -> None:
    """Display version information."""
    from . import __version__

    console.print(f"secondlook version {__version__}")


@app.command("config")
def config_command(
    show_path: bool = typer.Option(
        False, "--show-path", help="Show the configuration file path"
    ),
) -> None:
    """Display current configuration."""

    async def _async_config() -> None:
        try:
            config = await load_config()

            if show_path:
                # Try to find which config file was used
                config_paths = [
                    Path.cwd() / "secondlook.toml",
                    Path.home() / ".secondlook.toml",
                ]

                config_file = None
                for path in config_paths:
                    if path.exists():
                        config_file = path
                        break

                if config_file:
                    console.print(f"Configuration file: {config_file}")
                else:
                    console.print("Configuration from environment variables")
                console.print()

            # Display configuration (without sensitive data)
            table = Table(title="Current Configuration")
            table.add_column("Setting", style="cyan")
            table.add_column("Value", style="white")

            table.add_row("Text Model", config.defaults.text_model)
            table.add_row(
                "Request Timeout", f"{config.defaults.request_timeout_seconds:g}s"
            )
            table.add_row(
                "Max Concurrent", str(config.defaults.max_concurrent_requests)
            )
            table.add_row("Default Style", config.defaults.default_style.value)
            api_key_display = (
                "***" + config.auth.google_api_key[-4:]
                if len(config.auth.google_api_key) > 4
                else "***"
            )
            table.add_row("API Key", api_key_display)

            console.print(table)

        except Exception as e:
            console.print(f"[red]Error loading configuration: {e}[/red]")
            sys.exit(1)

    # Run the async function
    asyncio.run(_async_config())


def main() -> None:
    """Main entry point for the CLI application."""
    app()


if __name__ == "__main__":
    main()
