import json
import logging
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Optional

import typer
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from .config import ProviderConfig, load_config
from .provider import FsResourceProvider, NotFoundError, PathError
from .resource import ContentFileResource, FileResource, Resource, ResourceType

# Initialize Rich Console
console = Console()

# Configure logging to use Rich's RichHandler
logging.basicConfig(
    level=logging.WARNING,
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True)]
)
logger = logging.getLogger("vaultfs")

app = typer.Typer(help="Browse a FileVault content folder as a resource tree")

# FileVault packages keep the filter next to jcr_root
DEFAULT_FILTER_LOCATION = Path("META-INF") / "vault" / "filter.xml"

ROOT_OPTION = typer.Option(
    None, "--root", "-r",
    help="Provider root folder (e.g. ./jcr_root), defaults to the configured provider_root",
)

_STYLES = {
    ResourceType.FOLDER: "bold blue",
    ResourceType.FILE: "white",
    ResourceType.CONTENT: "green",
}


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose mode"),
):
    """
    vaultfs - map a FileVault folder (.content.xml descriptors, filter.xml)
    onto a read-only resource tree.
    """
    cli_config = load_config().cli
    if not cli_config.color:
        console.no_color = True
    if verbose or cli_config.verbose:
        logger.setLevel(logging.DEBUG)
        console.print("[bold green]Verbose mode enabled.[/bold green]")


def _open_provider(root: Optional[Path], filter_xml: Optional[Path]) -> FsResourceProvider:
    config = load_config()
    provider_config = config.provider

    root_path = root or (Path(provider_config.provider_root) if provider_config.provider_root else None)
    if root_path is None:
        console.print("[red]Error: no provider root given and none configured[/red]")
        raise typer.Exit(code=1)
    if not root_path.is_dir():
        console.print(f"[red]Error: provider root is not a folder: {root_path}[/red]")
        raise typer.Exit(code=1)

    if filter_xml is None:
        if provider_config.filter_xml:
            filter_xml = Path(provider_config.filter_xml)
        else:
            candidate = root_path.resolve().parent / DEFAULT_FILTER_LOCATION
            if candidate.exists():
                logger.debug(f"Using workspace filter {candidate}")
                filter_xml = candidate

    return FsResourceProvider(ProviderConfig(
        provider_root=str(root_path),
        filter_xml=str(filter_xml) if filter_xml else None,
        stat_cache_ttl=provider_config.stat_cache_ttl,
        content_cache_size=provider_config.content_cache_size,
    ))


def _plain(value: Any) -> Any:
    """Convert property values to YAML/JSON friendly types."""
    if isinstance(value, list):
        return [_plain(v) for v in value]
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return value


def _describe(resource: Resource) -> Dict[str, Any]:
    data = dict(resource.get_info())
    if isinstance(resource, ContentFileResource):
        data["properties"] = {k: _plain(v) for k, v in resource.properties.items()}
    return data


@app.command()
def get(
    path: str = typer.Argument("/", help="Resource path (e.g. /content/site/jcr:content)"),
    root: Optional[Path] = ROOT_OPTION,
    filter_xml: Optional[Path] = typer.Option(None, "--filter", "-f", help="Workspace filter.xml"),
    output_format: str = typer.Option("table", "--format", help="Output format: table, yaml, json"),
):
    """Show one resource and its properties.

    Examples:
        vaultfs get /content/site -r ./jcr_root
        vaultfs get /content/site/jcr:content -r ./jcr_root --format yaml
    """
    provider = _open_provider(root, filter_xml)
    try:
        resource = provider.get_resource(path)
    except PathError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    if resource is None:
        console.print(f"[red]Error: no resource at {path}[/red]")
        raise typer.Exit(code=1)

    data = _describe(resource)
    if output_format == "json":
        typer.echo(json.dumps(data, indent=2, default=str))
    elif output_format == "yaml":
        typer.echo(yaml.safe_dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False))
    elif output_format == "table":
        table = Table(title=resource.path)
        table.add_column("Key", style="cyan")
        table.add_column("Value")
        for key, value in data.items():
            if key == "properties":
                continue
            table.add_row(key, "" if value is None else str(value))
        for key, value in data.get("properties", {}).items():
            table.add_row(f"@{key}", str(value))
        console.print(table)
    else:
        console.print(f"[red]Error: unknown format '{output_format}'[/red]")
        raise typer.Exit(code=1)


@app.command()
def ls(
    path: str = typer.Argument("/", help="Resource path to list"),
    root: Optional[Path] = ROOT_OPTION,
    filter_xml: Optional[Path] = typer.Option(None, "--filter", "-f", help="Workspace filter.xml"),
):
    """List children of a resource.

    Examples:
        vaultfs ls / -r ./jcr_root
        vaultfs ls /content/site -r ./jcr_root
    """
    provider = _open_provider(root, filter_xml)
    try:
        children = provider.list_children(path)
    except (NotFoundError, PathError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    if not children:
        console.print("[yellow]No children[/yellow]")
        return

    table = Table(title=path)
    table.add_column("Name")
    table.add_column("Type", style="cyan")
    table.add_column("Details")
    for child in children:
        details = ""
        if isinstance(child, ContentFileResource):
            details = child.resource_type_name or ""
        elif isinstance(child, FileResource) and not child.is_directory():
            details = f"{child.size} bytes"
        table.add_row(f"[{_STYLES[child.resource_type]}]{escape(child.name)}[/]",
                      child.resource_type.value, details)
    console.print(table)


@app.command()
def tree(
    path: str = typer.Argument("/", help="Resource path to start at"),
    root: Optional[Path] = ROOT_OPTION,
    depth: Optional[int] = typer.Option(None, "--depth", "-d", help="Maximum depth"),
    filter_xml: Optional[Path] = typer.Option(None, "--filter", "-f", help="Workspace filter.xml"),
):
    """Print the resource tree.

    Examples:
        vaultfs tree /content -r ./jcr_root --depth 2
    """
    provider = _open_provider(root, filter_xml)
    try:
        walk = list(provider.walk(path, max_depth=depth))
    except (NotFoundError, PathError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    first_depth, first = walk[0]
    rich_tree = Tree(f"[{_STYLES[first.resource_type]}]{escape(first.path)}[/]")
    branches = {first_depth: rich_tree}
    for level, resource in walk[1:]:
        label = f"[{_STYLES[resource.resource_type]}]{escape(resource.name)}[/]"
        branches[level] = branches[level - 1].add(label)
    console.print(rich_tree)


@app.command(name="config")
def show_config():
    """Show the current configuration."""
    config = load_config()
    typer.echo(yaml.safe_dump(config.to_dict(), default_flow_style=False, sort_keys=False))


if __name__ == "__main__":
    app()
