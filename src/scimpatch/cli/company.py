import asyncio
import functools
import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from tortoise import Tortoise

from ..config import settings
from ..exceptions import InvalidSyntax
from ..services import CompanyService


console = Console()


async def init_db():
    """Initialize database connection for CLI commands."""
    await Tortoise.init(config=settings.tortoise_orm_config)
    await Tortoise.generate_schemas()


async def close_db():
    """Close database connection."""
    await Tortoise.close_connections()


def async_command(f):
    """Decorator to run async commands."""
    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        async def run():
            try:
                await init_db()
                return await f(*args, **kwargs)
            finally:
                await close_db()

        return asyncio.run(run())

    return wrapper


@click.group("company")
def company_cli():
    """Manage companies and their API tokens."""
    pass


@company_cli.command("create")
@click.option("--name", "-n", required=True, help="Human-readable name (e.g., 'Acme Corporation')")
@click.option("--subdomain", "-s", required=True, help="Unique subdomain used to authenticate (e.g., 'acme')")
@async_command
async def create_company(name: str, subdomain: str):
    """Create a company and issue its API token."""
    try:
        company, api_token = await CompanyService.create_company(name=name, subdomain=subdomain)
    except InvalidSyntax as e:
        console.print(f"[red]✗[/red] Error: {e.detail}")
        raise click.Abort()

    console.print(Panel(
        f"[green]✓[/green] Company created successfully!\n\n"
        f"[bold]ID:[/bold] {company.id}\n"
        f"[bold]Name:[/bold] {company.name}\n"
        f"[bold]Subdomain:[/bold] {company.subdomain}\n\n"
        f"[bold]API token:[/bold] {api_token}\n"
        f"[dim]Store the token now, it cannot be shown again.[/dim]",
        title="Company Created",
        border_style="green"
    ))


@company_cli.command("rotate-token")
@click.argument("subdomain")
@async_command
async def rotate_token(subdomain: str):
    """Issue a new API token for a company."""
    try:
        api_token = await CompanyService.rotate_token(subdomain)
    except InvalidSyntax as e:
        console.print(f"[red]✗[/red] Error: {e.detail}")
        raise click.Abort()

    console.print(f"[green]✓[/green] New API token for {subdomain}: {api_token}")


@company_cli.command("list")
@click.option("--all", "-a", is_flag=True, help="Show inactive companies too")
@async_command
async def list_companies(all: bool):
    """List companies."""
    companies = await CompanyService.list_companies(active_only=not all)

    if not companies:
        console.print("[yellow]No companies found.[/yellow]")
        return

    table = Table(title="Companies", show_lines=True)
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Subdomain")
    table.add_column("Active", justify="center")
    table.add_column("Created", style="dim")

    for company in companies:
        table.add_row(
            str(company.id),
            company.name,
            company.subdomain,
            "✓" if company.active else "✗",
            company.created_at.strftime("%Y-%m-%d %H:%M")
        )

    console.print(table)
    console.print(f"\n[dim]Total: {len(companies)} company(ies)[/dim]")
