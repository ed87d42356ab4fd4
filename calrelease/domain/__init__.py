"""
Domain layer for calrelease.

Contains pure domain objects with no I/O or side effects:
- Signature: Name, email and timestamp of a git identity
- ReleaseRecord: One existing tag and the commit it resolves to
- ReleaseIndex: Ordered, immutable collection of ReleaseRecords
"""

from .release import Signature, ReleaseRecord, ReleaseIndex

__all__ = [
    'Signature',
    'ReleaseRecord',
    'ReleaseIndex',
]
