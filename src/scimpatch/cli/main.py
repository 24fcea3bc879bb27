from typing import Optional
import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from ..config import settings
from ..exceptions import SCIMException
from ..services import parse_patch_operation
from .company import company_cli

console = Console()


@click.group()
@click.version_option(version="1.0.0", prog_name="ScimPatch")
def cli():
    """ScimPatch - SCIM 2.0 PATCH operation service CLI"""
    pass


cli.add_command(company_cli, name="company")


@cli.command()
@click.argument("op")
@click.argument("path")
@click.argument("value", required=False)
def parse(op: str, path: str, value: Optional[str]):
    """Show how a PATCH operation resolves against the configured schema.

    Example: scimpatch parse add 'emails[type eq "work"].value' a@b.com
    """
    try:
        operation = parse_patch_operation(op, path, value, settings.schema_config())
    except SCIMException as e:
        console.print(f"[red]✗[/red] {e.detail}")
        raise click.Abort()

    path_filter = operation.path_scim.filter
    table = Table(title="PATCH operation")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("op", operation.op.value)
    table.add_row("attribute", operation.path_scim.attribute)
    table.add_row("rest_path", ".".join(operation.path_scim.rest_path) or "-")
    table.add_row(
        "filter",
        f'{path_filter.attribute} {path_filter.operator} "{path_filter.parameter}"' if path_filter else "-",
    )
    table.add_row("path_sp", repr(list(operation.path_sp)) if operation.is_resolved else "[red]not found[/red]")
    table.add_row("storage attribute", str(operation.storage_attribute) if operation.is_resolved else "-")
    table.add_row("value", repr(operation.value))
    console.print(table)


@cli.command()
@click.option('--host', '-h', default=None, help='Host to bind to')
@click.option('--port', '-p', default=None, type=int, help='Port to bind to')
@click.option('--reload/--no-reload', default=None, help='Enable auto-reload')
def run(host: Optional[str], port: Optional[int], reload: Optional[bool]):
    """Run the SCIM PATCH server"""
    host = host or settings.host
    port = port or settings.port
    reload = settings.reload if reload is None else reload

    console.print(Panel.fit(
        f"[bold green]Starting ScimPatch Server[/bold green]\n\n"
        f"[yellow]Host:[/yellow] {host}:{port}\n"
        f"[yellow]API:[/yellow]  http://localhost:{port}{settings.api_prefix}\n\n"
        f"[dim]Press CTRL+C to stop[/dim]",
        title="ScimPatch"
    ))

    import uvicorn
    uvicorn.run(
        "scimpatch.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
        access_log=True
    )


if __name__ == "__main__":
    cli()
