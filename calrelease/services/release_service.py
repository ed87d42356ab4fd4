"""
Release service for calrelease.

Orchestrates a release: load the tag inventory, propose the next name,
create the tag and optionally push it. Used by the CLI commands and
usable directly as a library.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional

from ..domain.release import ReleaseIndex
from ..exit_codes import PushError, RepositoryNotFoundError
from ..infra.credentials import Credential
from ..infra.git_client import GitClient
from .inventory import TagInventory
from .proposer import (
    DEFAULT_DATE_FORMAT,
    DEFAULT_INCREMENT_FORMAT,
    Proposal,
    VersionProposer,
)
from .remote_sync import RemoteSync
from .tag_writer import TagRef, TagWriter, local_now

logger = logging.getLogger(__name__)


@dataclass
class ReleaseSettings:
    """Options that shape proposed names."""
    date_format: str = DEFAULT_DATE_FORMAT
    increment_format: str = DEFAULT_INCREMENT_FORMAT
    always_include_number: bool = True
    default_component: str = "release"

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'ReleaseSettings':
        """Build settings from the 'release' section of a config dict."""
        section = config.get('release', {})
        defaults = cls()
        return cls(
            date_format=section.get('date_format', defaults.date_format),
            increment_format=section.get('increment_format', defaults.increment_format),
            always_include_number=bool(section.get('always_include_number', defaults.always_include_number)),
            default_component=section.get('default_component', defaults.default_component),
        )


@dataclass
class ReleaseOutcome:
    """What happened during one release."""
    proposal: Proposal
    remote: str = "origin"
    dry_run: bool = False
    tag: Optional[TagRef] = None
    pushed: bool = False
    push_message: str = ""
    push_error: Optional[PushError] = None

    @property
    def name(self) -> str:
        return self.proposal.name

    @property
    def created(self) -> bool:
        return self.tag is not None

    def manual_push_hint(self) -> str:
        """Instructions for dealing with a tag that was created but not pushed."""
        name = self.proposal.name
        if self.push_error is not None:
            return (
                f"the tag will still be in the local repo you can delete it with "
                f"`git tag -d {name}` or push it with `git push <REMOTE> {name}` "
                f"once you have resolved the issue preventing push"
            )
        return (
            f"to push, just run:\n"
            f"git push {self.remote} {name}\n"
            f"OR\n"
            f"git push {self.remote} --tags"
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            'name': self.name,
            'dry_run': self.dry_run,
            'created': self.created,
            'pushed': self.pushed,
            'remote': self.remote,
            'tried': list(self.proposal.tried),
        }
        if self.tag is not None:
            result['tag'] = self.tag.to_dict()
        if self.push_message:
            result['message'] = self.push_message
        if self.push_error is not None:
            result['error'] = str(self.push_error)
        return result


class ReleaseService:
    """
    Keeps the state needed to perform releases in one repository.

    The release index is loaded once when the service is created. It is a
    snapshot: call reload() before proposing again if tags may have been
    created since (release_components does this for you).

    Example:
        service = ReleaseService.open(os.getcwd())
        outcome = service.release("ui", push=False)
        print(outcome.name)  # e.g. '2020.07.004-ui'
    """

    def __init__(
        self,
        repo_path: str,
        settings: Optional[ReleaseSettings] = None,
        git_client: Optional[GitClient] = None,
        clock: Callable[[], datetime] = local_now,
        diagnostics: Optional[logging.Logger] = None,
    ):
        """
        Initialize ReleaseService.

        Args:
            repo_path: Repository root
            settings: Naming options (defaults if None)
            git_client: GitClient instance (creates new if None)
            clock: Source of "now" for proposals and tagger dates
            diagnostics: Logger for skipped-tag reports
        """
        self.repo_path = repo_path
        self.settings = settings or ReleaseSettings()
        self.git = git_client or GitClient()
        self.clock = clock

        self.inventory = TagInventory(self.git, diagnostics=diagnostics)
        self.proposer = VersionProposer(
            date_format=self.settings.date_format,
            increment_format=self.settings.increment_format,
            always_include_number=self.settings.always_include_number,
        )
        self.writer = TagWriter(repo_path, self.git, clock=clock)
        self.sync = RemoteSync(repo_path, self.git)

        self._releases = ReleaseIndex()
        self.reload()

    @classmethod
    def open(
        cls,
        cwd: str,
        settings: Optional[ReleaseSettings] = None,
        git_client: Optional[GitClient] = None,
        **kwargs
    ) -> 'ReleaseService':
        """
        Find the repository containing ``cwd`` and load its releases.

        Raises:
            RepositoryNotFoundError: If no repository is found upward of cwd
        """
        git = git_client or GitClient()
        logger.debug(f"searching for git directory in: {cwd}")
        repo_path = git.find_repo_root(cwd)
        if repo_path is None:
            raise RepositoryNotFoundError(cwd)
        return cls(repo_path, settings=settings, git_client=git, **kwargs)

    @property
    def releases(self) -> ReleaseIndex:
        return self._releases

    def reload(self) -> ReleaseIndex:
        """Reload the release index from the repository."""
        self._releases = self.inventory.load(self.repo_path)
        logger.debug(f"loaded {len(self._releases)} releases from {self.repo_path}")
        return self._releases

    def propose(self, component: str = "", now: Optional[datetime] = None) -> Proposal:
        """Propose the next tag name for ``component`` (default component if empty)."""
        component = component or self.settings.default_component
        proposal = self.proposer.propose(self._releases, now or self.clock(), component)
        logger.debug(f"tried candidates: {', '.join(proposal.tried)}")
        return proposal

    def create_tag(self, name: str, message: str = "", user: str = "", email: str = "") -> TagRef:
        return self.writer.create_tag(name, message, user, email)

    def check_remote(self, remote: str) -> None:
        self.sync.check_remote(remote)

    def push_tag(self, tag: str, remote: str, auth: Optional[Credential] = None) -> str:
        return self.sync.push_tag(tag, remote, auth)

    def release(
        self,
        component: str = "",
        message: str = "",
        user: str = "",
        email: str = "",
        push: bool = True,
        remote: str = "origin",
        auth: Optional[Credential] = None,
        dry_run: bool = False,
    ) -> ReleaseOutcome:
        """
        Propose, tag and optionally push one release.

        The remote is checked before anything is tagged, on dry runs too.
        A failed push is recorded on the outcome rather than raised; the
        tag stays local.

        Raises:
            RemoteMissingError: push requested and the remote is unknown
            IdentityMissingError: message given without user and email
            TagCreationError: the tag could not be created
        """
        if push:
            self.check_remote(remote)

        proposal = self.propose(component)
        outcome = ReleaseOutcome(proposal=proposal, remote=remote, dry_run=dry_run)
        if dry_run:
            return outcome

        outcome.tag = self.create_tag(proposal.name, message, user, email)
        logger.info(f"created release: {proposal.name}")

        if push:
            try:
                outcome.push_message = self.push_tag(proposal.name, remote, auth)
                outcome.pushed = True
            except PushError as e:
                logger.error(f"{e}: {e.output}" if e.output else str(e))
                outcome.push_error = e
        return outcome

    def release_components(self, components: Iterable[str], **kwargs) -> List[ReleaseOutcome]:
        """
        Release several components one after another.

        The index is reloaded before each release so every proposal sees
        the tags created by the previous ones.
        """
        outcomes = []
        for i, component in enumerate(components):
            if i > 0:
                self.reload()
            outcomes.append(self.release(component, **kwargs))
        return outcomes
