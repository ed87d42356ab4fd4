"""
Push credentials for calrelease.

A credential is opaque to the release logic: it only knows how to turn
itself into environment variables for the git subprocess that pushes.
"""

import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Protocol
import logging

logger = logging.getLogger(__name__)


class Credential(Protocol):
    """Anything that can authenticate a push."""

    def env(self) -> Dict[str, str]:
        ...


@dataclass(frozen=True)
class NoAuth:
    """Use whatever credentials git would use on its own."""

    def env(self) -> Dict[str, str]:
        return {}


@dataclass(frozen=True)
class SshKeyAuth:
    """
    Authenticate with a specific SSH private key.

    Example:
        auth = SshKeyAuth("~/.ssh/id_rsa")
        client.push(repo, "origin", refspecs, env=auth.env())
    """
    key_path: str

    @property
    def resolved_path(self) -> Path:
        return Path(self.key_path).expanduser()

    def env(self) -> Dict[str, str]:
        key = self.resolved_path
        if not key.is_file():
            logger.debug(f"ssh key {key} not found, falling back to default git credentials")
            return {}
        command = f"ssh -i {shlex.quote(str(key))} -o IdentitiesOnly=yes"
        return {'GIT_SSH_COMMAND': command}


def default_ssh_key_path() -> str:
    return str(Path.home() / '.ssh' / 'id_rsa')


def load_credential(ssh_key: Optional[str]) -> Credential:
    """Build the credential for a push from an optional key path."""
    if ssh_key:
        return SshKeyAuth(ssh_key)
    return NoAuth()
