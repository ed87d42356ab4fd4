"""
Release domain objects for calrelease.

A ReleaseRecord describes one tag found in the repository together with
the commit it resolves to. A ReleaseIndex is the ordered, immutable
collection of those records built once per load.

Ordering: newest commit first; records with the same commit date are
ordered by tag name ascending.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, overload

_IDENT_RE = re.compile(r'^(?P<name>.*?)\s*<(?P<email>[^>]*)>\s*(?P<ts>-?\d+)\s+(?P<tz>[+-]\d{4})$')
_LOOSE_IDENT_RE = re.compile(r'^(?P<name>.*?)\s*<(?P<email>[^>]*)>')

EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


@dataclass(frozen=True)
class Signature:
    """Who did something in git, and when."""
    name: str
    email: str
    when: datetime

    @classmethod
    def parse(cls, ident: str) -> 'Signature':
        """
        Parse a raw git identity line.

        Examples:
            Signature.parse("Jane Doe <jane@example.com> 1593561600 +0200")

        Raises:
            ValueError: If the line is not a git identity
        """
        match = _IDENT_RE.match(ident.strip())
        if not match:
            raise ValueError(f"not a git identity: {ident!r}")

        tz = match.group('tz')
        sign = -1 if tz[0] == '-' else 1
        offset = timedelta(hours=int(tz[1:3]), minutes=int(tz[3:5])) * sign
        when = datetime.fromtimestamp(int(match.group('ts')), tz=timezone(offset))
        return cls(name=match.group('name'), email=match.group('email'), when=when)

    @classmethod
    def parse_lenient(cls, ident: str) -> 'Signature':
        """
        Like parse(), but never fails.

        Whatever name and email can be found are kept; the rest is left
        empty and a missing or malformed date becomes the Unix epoch.
        """
        try:
            return cls.parse(ident or "")
        except ValueError:
            pass
        match = _LOOSE_IDENT_RE.match((ident or "").strip())
        if not match:
            return cls(name="", email="", when=EPOCH)
        return cls(name=match.group('name'), email=match.group('email'), when=EPOCH)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'email': self.email,
            'when': self.when.isoformat(),
        }

    def __str__(self) -> str:
        return f"{self.name} <{self.email}>"


@dataclass(frozen=True)
class ReleaseRecord:
    """
    One existing tag and the commit it points to.

    Attributes:
        tag: Tag name without the refs/tags/ prefix (e.g. "2020.07.003-release")
        commit_hash: Hash of the commit the tag resolves to
        release_message: Annotation text, empty for lightweight tags
        commit_message: Message of the underlying commit
        author: Author of the commit
        committer: Committer of the commit
        tagger: Creator of an annotated tag, None for lightweight tags
    """

    tag: str
    commit_hash: str
    commit_message: str
    author: Signature
    committer: Signature
    release_message: str = ""
    tagger: Optional[Signature] = None

    @property
    def is_annotated(self) -> bool:
        return self.tagger is not None

    @property
    def date(self) -> datetime:
        """
        Effective date of the release.

        Always the committer date, even for annotated tags: releases are
        ordered by the change they point at, not by when it was labelled.
        """
        return self.committer.when

    @property
    def released_by(self) -> Signature:
        """The tagger if there is one, otherwise the committer."""
        if self.tagger is not None:
            return self.tagger
        return self.committer

    def released_by_string(self, include_date: bool = False) -> str:
        rel_by = self.released_by
        if include_date:
            return f"{rel_by.name} <{rel_by.email}> on {rel_by.when.strftime('%Y-%m-%d %H:%M:%S')}"
        return f"{rel_by.name} <{rel_by.email}>"

    @property
    def message(self) -> str:
        """Release message if set, otherwise the first line of the commit message."""
        if self.release_message:
            return self.release_message
        return self.commit_message.split('\n', 1)[0]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            'tag': self.tag,
            'commit': self.commit_hash,
            'date': self.date.isoformat(),
            'annotated': self.is_annotated,
            'message': self.message,
            'released_by': self.released_by_string(),
            'author': self.author.to_dict(),
            'committer': self.committer.to_dict(),
        }
        if self.tagger is not None:
            result['tagger'] = self.tagger.to_dict()
        return result


def _sort_key(record: ReleaseRecord) -> Tuple[float, str]:
    # Date descending, tag ascending
    return (-record.date.timestamp(), record.tag)


class ReleaseIndex:
    """
    Immutable, ordered sequence of ReleaseRecords.

    The index is a point-in-time snapshot: tags created after it was built
    are not visible until the inventory is loaded again.

    Example:
        index = ReleaseIndex(records)
        if index.contains_substring("2020.07.001"):
            ...
    """

    __slots__ = ('_records',)

    def __init__(self, records: Iterable[ReleaseRecord] = ()):
        self._records: Tuple[ReleaseRecord, ...] = tuple(sorted(records, key=_sort_key))

    def __iter__(self) -> Iterator[ReleaseRecord]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    @overload
    def __getitem__(self, item: int) -> ReleaseRecord: ...

    @overload
    def __getitem__(self, item: slice) -> Tuple[ReleaseRecord, ...]: ...

    def __getitem__(self, item):
        return self._records[item]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ReleaseIndex):
            return NotImplemented
        return self._records == other._records

    def __repr__(self) -> str:
        return f"ReleaseIndex({len(self._records)} releases)"

    def tags(self) -> List[str]:
        """Tag names in index order."""
        return [record.tag for record in self._records]

    def contains_substring(self, text: str) -> bool:
        """True if any tag in the index contains ``text`` anywhere in its name."""
        return any(text in record.tag for record in self._records)
