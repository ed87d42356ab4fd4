"""
Release commands for calrelease.

`release` tags HEAD with the next CalVer name and pushes it; `propose`
only prints the name that would be used.
"""

import json
import sys

import click

from ..cli_utils import open_service, standard_command
from ..config import logger, resolve_identity
from ..infra.credentials import load_credential


@click.command('release')
@click.option('--component', '-c', default='',
              help="Component to tag, if not set will use 'release' which triggers all components to release")
@click.option('--remote', '-r', default=None, help='Git remote to push to (default: origin)')
@click.option('--msg', '-m', 'message', default='', help='Optional release message, will create an annotated git tag')
@click.option('--user', default='', help='Override user in ~/.gitconfig')
@click.option('--email', default='', help='Override email in ~/.gitconfig')
@click.option('--no-push', is_flag=True, help="Don't push the tag to the remote")
@click.option('--dry-run', '-n', is_flag=True, help="Don't create a release, just print what would be released")
@click.option('--ssh-key', default=None, help='Path to the ssh key used to push (default: ~/.ssh/id_rsa)')
@click.option('--json', 'json_output', is_flag=True, help='Output the outcome as JSON')
@click.option('--verbose', '-v', is_flag=True, help='Enable more output')
@standard_command()
def release_cmd(component, remote, message, user, email, no_push, dry_run,
                ssh_key, json_output, verbose, config):
    """Create the next CalVer release tag and push it.

    The tag is named YYYY.MM.NNN-COMPONENT, where NNN is the next number
    not yet used this month.

    Examples:

    \b
        calrelease release
        calrelease release -c ui -m "New dashboard"
        calrelease release --dry-run
        calrelease release --no-push -v
    """
    remote_config = config.get('remote', {})
    remote = remote or remote_config.get('name', 'origin')
    push = not no_push and remote_config.get('push', True)

    service = open_service(config)
    user, email = resolve_identity(config, user, email, git_client=service.git)
    auth = load_credential(ssh_key or remote_config.get('ssh_key'))

    outcome = service.release(
        component=component,
        message=message,
        user=user,
        email=email,
        push=push,
        remote=remote,
        auth=auth,
        dry_run=dry_run,
    )

    if json_output:
        click.echo(json.dumps(outcome.to_dict(), ensure_ascii=False))
    elif dry_run:
        click.echo(f"would create release:\n{outcome.name}")
        return
    else:
        click.echo(f"created release: {outcome.name}")
        if outcome.pushed:
            click.echo(outcome.push_message)
        elif not push and verbose:
            click.echo(f"\n{outcome.manual_push_hint()}")

    if outcome.push_error is not None:
        click.echo(outcome.manual_push_hint(), err=True)
        logger.debug(f"exiting with {outcome.push_error.exit_code} after failed push")
        sys.exit(outcome.push_error.exit_code)


@click.command('propose')
@click.option('--component', '-c', default='', help="Component name (default: 'release')")
@click.option('--json', 'json_output', is_flag=True, help='Output the proposal as JSON')
@click.option('--verbose', '-v', is_flag=True, help='Also show every candidate tried')
@standard_command()
def propose_cmd(component, json_output, verbose, config):
    """Print the next release name without creating anything.

    Examples:

    \b
        calrelease propose
        calrelease propose -c watcher --json
    """
    service = open_service(config)
    proposal = service.propose(component)

    if json_output:
        return proposal.to_dict()

    click.echo(proposal.name)
    if verbose:
        for candidate in proposal.tried:
            click.echo(f"  tried {candidate}", err=True)
