"""
Tag inventory for calrelease.

Reads every tag in a repository and builds a ReleaseIndex. Only a tag
whose commit cannot be found is left out; it is logged and skipped, and
one bad tag never stops the rest of the load. A tag with an unreadable
identity line is kept with a blank identity so it still blocks its name.
"""

import logging
from typing import Dict, List, Optional

from ..domain.release import ReleaseIndex, ReleaseRecord, Signature
from ..infra.git_client import GitClient, GitCommitObject, GitObject, GitTagObject, GitTagRef

logger = logging.getLogger(__name__)


class TagInventory:
    """
    Loads the tags of a repository into a ReleaseIndex.

    Each reference is first resolved as a lightweight tag (pointing
    directly at a commit). If that fails it is read as an annotated tag
    object and dereferenced to its commit.

    All objects are read in bulk: one call lists the references, one
    reads what they point at and one reads the commits behind annotated
    tags, however many tags there are.

    Example:
        inventory = TagInventory(GitClient())
        index = inventory.load("/path/to/repo")
        for release in index:
            print(release.tag, release.date)
    """

    def __init__(
        self,
        git_client: Optional[GitClient] = None,
        diagnostics: Optional[logging.Logger] = None
    ):
        """
        Initialize TagInventory.

        Args:
            git_client: GitClient instance (creates new if None)
            diagnostics: Logger that receives skipped-tag reports
        """
        self.git = git_client or GitClient()
        self.log = diagnostics or logger

    def load(self, repo_path: str) -> ReleaseIndex:
        """
        Build a fresh ReleaseIndex from the tags in ``repo_path``.

        Raises:
            GitError: If the tag references or objects cannot be read at all
        """
        refs = self.git.tag_refs(repo_path)
        if not refs:
            return ReleaseIndex()

        objects = self.git.read_objects(repo_path, [ref.target for ref in refs])
        tag_targets = [obj.target for obj in objects.values() if isinstance(obj, GitTagObject)]
        if tag_targets:
            objects.update(self.git.read_objects(repo_path, tag_targets))

        records: List[ReleaseRecord] = []
        for ref in refs:
            record = self._resolve(ref, objects)
            if record is None:
                continue
            records.append(record)
            self.log.debug(
                f"loaded tag: {record.tag} "
                f"(hash={record.commit_hash}, releaser={record.released_by_string(True)})"
            )
        return ReleaseIndex(records)

    def _resolve(self, ref: GitTagRef, objects: Dict[str, GitObject]) -> Optional[ReleaseRecord]:
        target = objects.get(ref.target)
        if isinstance(target, GitCommitObject):
            return self._record(ref.short_name, target)
        if isinstance(target, GitTagObject):
            return self._resolve_annotated(ref, target, objects)

        self.log.error(f"failed to load {ref.target} for tag {ref.short_name}, skipping")
        return None

    def _resolve_annotated(
        self,
        ref: GitTagRef,
        tag: GitTagObject,
        objects: Dict[str, GitObject],
    ) -> Optional[ReleaseRecord]:
        name = tag.name or ref.short_name
        commit = objects.get(tag.target)
        if not isinstance(commit, GitCommitObject):
            self.log.error(
                f"failed to load commit {tag.target} for tag {name}, this looks bad, skipping"
            )
            return None

        return self._record(
            name,
            commit,
            release_message=tag.message,
            tagger=self._signature(tag.tagger, name, 'tagger'),
        )

    def _record(
        self,
        name: str,
        commit: GitCommitObject,
        release_message: str = "",
        tagger: Optional[Signature] = None,
    ) -> ReleaseRecord:
        return ReleaseRecord(
            tag=name,
            commit_hash=commit.hash,
            commit_message=commit.message,
            author=self._signature(commit.author, name, 'author'),
            committer=self._signature(commit.committer, name, 'committer'),
            release_message=release_message,
            tagger=tagger,
        )

    def _signature(self, ident: str, tag: str, role: str) -> Signature:
        try:
            return Signature.parse(ident)
        except ValueError:
            self.log.warning(f"unreadable {role} on tag {tag}, keeping it with a blank identity: {ident!r}")
            return Signature.parse_lenient(ident)
