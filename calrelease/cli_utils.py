"""
Common CLI utilities and decorators for consistent command behavior.
"""

import json
import os
import sys
from functools import wraps
from typing import Any, Dict, Generator, Optional

import click

from .config import configure_logging, load_config, logger
from .exit_codes import INTERRUPTED, CommandError, ConfigError, get_exit_code_for_exception
from .infra.git_client import GitClient
from .services.release_service import ReleaseService, ReleaseSettings


def standard_command(streaming: bool = False):
    """
    Decorator that provides standard CLI behavior:
    - Configuration loaded once and passed as ``config``
    - Logging configured from config and the --verbose/-v flag
    - Returned dicts printed as JSON, generators and lists as JSONL
    - CommandError turned into its exit code, message on stderr

    Args:
        streaming: If True, print JSONL lines as the generator yields them.
                  If False, collect every item first so a failure part way
                  through prints nothing.
    """
    def decorator(func):

        @wraps(func)
        def wrapper(*args, **kwargs):
            verbose = kwargs.get('verbose', False)
            try:
                config = load_config()
                configure_logging(config.get('logging', {}).get('level', 'INFO'), verbose)
                kwargs['config'] = config

                result = func(*args, **kwargs)

                if result is None:
                    # Command handles its own output
                    pass
                elif isinstance(result, dict):
                    print(json.dumps(result, ensure_ascii=False), flush=True)
                elif isinstance(result, (Generator, list, tuple)):
                    items = result if streaming else list(result)
                    for item in items:
                        print(json.dumps(item, ensure_ascii=False), flush=True)
                else:
                    print(result, flush=True)

            except KeyboardInterrupt:
                click.echo("Interrupted by user", err=True)
                sys.exit(INTERRUPTED)
            except click.ClickException:
                raise
            except CommandError as e:
                logger.debug(f"{type(e).__name__} (exit code {e.exit_code})")
                click.echo(f"Error: {e}", err=True)
                sys.exit(e.exit_code)
            except Exception as e:
                logger.debug(f"command failed with {type(e).__name__}", exc_info=True)
                click.echo(f"Error: {e}", err=True)
                sys.exit(get_exit_code_for_exception(e))

        return wrapper

    return decorator


def open_service(
    config: Dict[str, Any],
    cwd: Optional[str] = None,
    git_client: Optional[GitClient] = None,
) -> ReleaseService:
    """Open the release service for the repository containing ``cwd``."""
    try:
        settings = ReleaseSettings.from_config(config)
        return ReleaseService.open(cwd or os.getcwd(), settings=settings, git_client=git_client)
    except ValueError as e:
        raise ConfigError(f"invalid release settings: {e}") from e
