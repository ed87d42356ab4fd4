"""
Service layer for calrelease.

Contains the release logic that works on domain objects through the
infrastructure layer:
- TagInventory: Loads tags into a ReleaseIndex
- VersionProposer: Finds the next free CalVer name
- TagWriter: Creates lightweight or annotated tags
- RemoteSync: Pushes a tag to a remote
- ReleaseService: Ties the above together for one repository
"""

from .inventory import TagInventory
from .proposer import VersionProposer, Proposal, normalize_component
from .tag_writer import TagWriter, TagRef
from .remote_sync import RemoteSync, tag_to_refspec
from .release_service import ReleaseService, ReleaseSettings, ReleaseOutcome

__all__ = [
    'TagInventory',
    'VersionProposer',
    'Proposal',
    'normalize_component',
    'TagWriter',
    'TagRef',
    'RemoteSync',
    'tag_to_refspec',
    'ReleaseService',
    'ReleaseSettings',
    'ReleaseOutcome',
]
