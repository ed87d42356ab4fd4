"""
Version proposal for calrelease.

Generates the next free CalVer tag name: a date prefix rendered from
"now" (year and month by default), an optional zero-padded ordinal and
an optional component suffix.

    2020.07          bare prefix (only when numbers are optional)
    2020.07.003      prefix + ordinal
    2020.07.003-ui   prefix + ordinal + component

Collision check:
    A candidate is taken when ANY existing tag contains it as a
    substring. This is broader than an exact match: an existing
    "2020.07.010-release" also blocks the candidate "2020.07.01".
    Tests pin this behaviour; narrowing it changes which names are issued.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Tuple

from ..domain.release import ReleaseIndex

DEFAULT_DATE_FORMAT = '%Y.%m'
DEFAULT_INCREMENT_FORMAT = '.%03d'


@dataclass(frozen=True)
class Proposal:
    """A proposed tag name and every candidate tried to reach it."""
    name: str
    version: str
    tried: Tuple[str, ...]

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'version': self.version,
            'tried': list(self.tried),
        }

    def __str__(self) -> str:
        return self.name


def normalize_component(component: str) -> str:
    """Return the tag suffix for a component: '' or '-<component>'."""
    component = (component or '').strip()
    if component and not component.startswith('-'):
        return f"-{component}"
    return component


class VersionProposer:
    """
    Finds the next unused CalVer name.

    Args:
        date_format: strftime pattern for the prefix (default: '%Y.%m')
        increment_format: %-style pattern for the ordinal (default: '.%03d')
        always_include_number: Never propose the bare date prefix

    Example:
        proposer = VersionProposer(always_include_number=True)
        proposal = proposer.propose(index, datetime(2020, 7, 1), "release")
        proposal.name  # '2020.07.001-release'
    """

    def __init__(
        self,
        date_format: str = DEFAULT_DATE_FORMAT,
        increment_format: str = DEFAULT_INCREMENT_FORMAT,
        always_include_number: bool = False,
    ):
        try:
            distinct = increment_format % 1 != increment_format % 2
        except (TypeError, ValueError) as e:
            raise ValueError(f"invalid increment format {increment_format!r}: {e}") from e
        if not distinct:
            raise ValueError(f"increment format {increment_format!r} does not use the number")

        self.date_format = date_format
        self.increment_format = increment_format
        self.always_include_number = always_include_number

    def prefix(self, now: datetime) -> str:
        return now.strftime(self.date_format)

    def candidate(self, prefix: str, idx: int) -> str:
        if idx == 0:
            return prefix
        return prefix + self.increment_format % idx

    def propose(self, index: ReleaseIndex, now: datetime, component: str = "") -> Proposal:
        """
        Propose the next tag name.

        Args:
            index: Existing releases
            now: Time the release is made
            component: Component name, with or without a leading hyphen

        Returns:
            Proposal with the final name and the candidates tried
        """
        prefix = self.prefix(now)
        idx = 1 if self.always_include_number else 0
        tried: List[str] = []

        while True:
            candidate = self.candidate(prefix, idx)
            tried.append(candidate)
            if not index.contains_substring(candidate):
                break
            idx += 1

        return Proposal(
            name=candidate + normalize_component(component),
            version=candidate,
            tried=tuple(tried),
        )
