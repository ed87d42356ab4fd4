"""
Pushing release tags to a remote.
"""

import logging
from typing import Optional

from ..exit_codes import PushError, RemoteMissingError
from ..infra.credentials import Credential, NoAuth
from ..infra.git_client import GitClient

logger = logging.getLogger(__name__)


def tag_to_refspec(tag: str) -> str:
    return f"refs/tags/{tag}:refs/tags/{tag}"


def is_up_to_date(output: str) -> bool:
    """True if git reported that the remote already had the pushed refs."""
    if 'Everything up-to-date' in output:
        return True
    # Porcelain status flag '=' marks an up-to-date ref
    return any(line.startswith('=\t') for line in output.split('\n'))


class RemoteSync:
    """
    Pushes a single tag to a single remote.

    A push that finds the remote already up to date is a success. Any
    other failure raises PushError; the local tag is never removed.
    """

    def __init__(self, repo_path: str, git_client: Optional[GitClient] = None):
        self.repo_path = repo_path
        self.git = git_client or GitClient()

    def check_remote(self, remote: str) -> None:
        """
        Raises:
            RemoteMissingError: If ``remote`` is not configured
        """
        if remote not in self.git.remotes(self.repo_path):
            raise RemoteMissingError(remote)

    def push_tag(self, tag: str, remote: str, auth: Optional[Credential] = None) -> str:
        """
        Push ``tag`` to ``remote``.

        Returns:
            Message describing what happened

        Raises:
            PushError: If the push failed
        """
        auth = auth or NoAuth()
        ok, output = self.git.push(
            self.repo_path,
            remote,
            [tag_to_refspec(tag)],
            env=auth.env() or None,
        )
        if not ok:
            logger.debug(f"push output: {output}")
            raise PushError(tag, remote, output)
        if is_up_to_date(output):
            return f"nothing pushed, tag {tag} already existed and was up to date in remote {remote}"
        return f"pushed tag {tag} to remote {remote}"
