"""
Tag creation for calrelease.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from ..exit_codes import IdentityMissingError, TagCreationError
from ..infra.git_client import GitClient

logger = logging.getLogger(__name__)


def local_now() -> datetime:
    return datetime.now().astimezone()


@dataclass(frozen=True)
class TagRef:
    """A tag reference created by TagWriter."""
    name: str
    target: str
    annotated: bool = False

    @property
    def ref(self) -> str:
        return f"refs/tags/{self.name}"

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'ref': self.ref,
            'target': self.target,
            'annotated': self.annotated,
        }


class TagWriter:
    """
    Creates a tag on the current HEAD.

    An empty message gives a lightweight tag. A message gives an annotated
    tag, which needs both a name and an email for the tagger; there is no
    fallback once a message is given.
    """

    def __init__(
        self,
        repo_path: str,
        git_client: Optional[GitClient] = None,
        clock: Callable[[], datetime] = local_now,
    ):
        self.repo_path = repo_path
        self.git = git_client or GitClient()
        self.clock = clock

    def create_tag(self, name: str, message: str = "", user: str = "", email: str = "") -> TagRef:
        """
        Create tag ``name`` pointing at HEAD.

        Raises:
            IdentityMissingError: Message given without both user and email
            TagCreationError: HEAD unresolved, tag exists, or git refused
        """
        if message and (not user or not email):
            logger.debug(f"identity incomplete: name={user!r} email={email!r}")
            raise IdentityMissingError(user, email)

        head = self.git.head(self.repo_path)
        if head is None:
            raise TagCreationError(name, "HEAD could not be resolved")

        if self.git.rev_parse(self.repo_path, f"refs/tags/{name}") is not None:
            raise TagCreationError(name, "tag already exists")

        if message:
            ok, output = self.git.create_tag(
                self.repo_path,
                name,
                head,
                message=message,
                tagger_name=user,
                tagger_email=email,
                when=self.clock(),
            )
        else:
            ok, output = self.git.create_tag(self.repo_path, name, head)

        if not ok:
            raise TagCreationError(name, output or "git tag failed")

        logger.debug(f"created {'annotated' if message else 'lightweight'} tag {name} at {head}")
        return TagRef(name=name, target=head, annotated=bool(message))
