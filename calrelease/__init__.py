"""
calrelease - Calendar-versioned release tags for git repositories.

calrelease picks the next free YYYY.MM.NNN tag name for a component,
creates the tag on HEAD and pushes it to a remote.

Quick Start:
    import calrelease

    service = calrelease.ReleaseService.open(".")

    # What would the next release be called?
    print(service.propose("ui").name)       # e.g. 2020.07.004-ui

    # Tag and push
    outcome = service.release("ui", push=True, remote="origin")

Domain Objects:
    ReleaseRecord - One existing tag and its commit
    ReleaseIndex - Releases ordered newest first

Services:
    TagInventory - Loads tags into a ReleaseIndex
    VersionProposer - Finds the next free name
    TagWriter - Creates tags
    RemoteSync - Pushes tags
    ReleaseService - All of the above for one repository
"""

__version__ = "0.3.0"

from .domain import Signature, ReleaseRecord, ReleaseIndex

from .services import (
    TagInventory,
    VersionProposer,
    Proposal,
    TagWriter,
    TagRef,
    RemoteSync,
    ReleaseService,
    ReleaseSettings,
    ReleaseOutcome,
)

from .exit_codes import (
    CommandError,
    RepositoryNotFoundError,
    IdentityMissingError,
    TagCreationError,
    RemoteMissingError,
    PushError,
)

from .config import load_config, save_config

__all__ = [
    "__version__",
    # Domain objects
    "Signature",
    "ReleaseRecord",
    "ReleaseIndex",
    # Services
    "TagInventory",
    "VersionProposer",
    "Proposal",
    "TagWriter",
    "TagRef",
    "RemoteSync",
    "ReleaseService",
    "ReleaseSettings",
    "ReleaseOutcome",
    # Errors
    "CommandError",
    "RepositoryNotFoundError",
    "IdentityMissingError",
    "TagCreationError",
    "RemoteMissingError",
    "PushError",
    # Configuration
    "load_config",
    "save_config",
]
