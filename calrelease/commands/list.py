"""
List existing releases of the current repository.
"""

import click
from rich.console import Console
from rich.table import Table

from ..cli_utils import open_service, standard_command

console = Console()


@click.command('list')
@click.option('--limit', '-l', type=int, default=None, help='Show at most this many releases')
@click.option('--component', '-c', default=None, help='Only releases whose tag ends with -COMPONENT')
@click.option('--json', 'json_output', is_flag=True, help='Output as JSONL')
@click.option('--verbose', '-v', is_flag=True, help='Log every tag as it is loaded')
@standard_command(streaming=True)
def list_cmd(limit, component, json_output, verbose, config):
    """List release tags, newest first.

    Examples:

    \b
        calrelease list
        calrelease list -l 5
        calrelease list -c ui --json
    """
    service = open_service(config)

    releases = list(service.releases)
    if component:
        suffix = component if component.startswith('-') else f"-{component}"
        releases = [r for r in releases if r.tag.endswith(suffix)]
    if limit is not None:
        releases = releases[:limit]

    if json_output:
        return (release.to_dict() for release in releases)

    if not releases:
        console.print("[yellow]No releases found[/yellow]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Tag", style="green")
    table.add_column("Date", style="yellow")
    table.add_column("Released by", style="blue")
    table.add_column("Message")

    for release in releases:
        table.add_row(
            release.tag,
            release.date.strftime('%Y-%m-%d %H:%M'),
            release.released_by_string(),
            release.message,
        )

    console.print(table)
