"""
Infrastructure layer for calrelease.

Contains abstractions for external systems:
- GitClient: Git command execution
- SshKeyAuth / NoAuth: Push credentials

These provide clean interfaces that can be mocked for testing.
"""

from .git_client import (
    GitClient,
    GitError,
    GitTagRef,
    GitCommitObject,
    GitTagObject,
)
from .credentials import Credential, NoAuth, SshKeyAuth, load_credential

__all__ = [
    'GitClient',
    'GitError',
    'GitTagRef',
    'GitCommitObject',
    'GitTagObject',
    'Credential',
    'NoAuth',
    'SshKeyAuth',
    'load_credential',
]
