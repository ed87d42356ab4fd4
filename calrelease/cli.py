#!/usr/bin/env python3

import click

from calrelease.commands.release import release_cmd, propose_cmd
from calrelease.commands.list import list_cmd
from calrelease.commands.config import config_cmd


@click.group(invoke_without_command=True)
@click.version_option(package_name='calrelease')
@click.pass_context
def cli(ctx):
    """calrelease - Calendar-versioned release tags for git repositories.

    Tags HEAD with the next free YYYY.MM.NNN-COMPONENT name and pushes it.
    Running without a command is the same as `calrelease release`.
    """
    if ctx.invoked_subcommand is None:
        ctx.invoke(release_cmd)


cli.add_command(release_cmd)
cli.add_command(propose_cmd)
cli.add_command(list_cmd)
cli.add_command(config_cmd)


def main():
    cli()

if __name__ == "__main__":
    main()
