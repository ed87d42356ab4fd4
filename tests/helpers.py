"""Test helpers: record builders and an in-memory GitClient."""

from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from calrelease.domain.release import ReleaseRecord, Signature
from calrelease.infra.git_client import (
    GitCommitObject,
    GitTagObject,
    GitTagRef,
    format_git_date,
)

UTC = timezone.utc


def ident(name: str, email: str, when: datetime) -> str:
    return f"{name} <{email}> {format_git_date(when)}"


def make_record(tag: str, when: Optional[datetime] = None, message: str = "change") -> ReleaseRecord:
    """A lightweight ReleaseRecord with the given committer date."""
    when = when or datetime(2020, 1, 1, tzinfo=UTC)
    sig = Signature("Dev", "dev@example.com", when)
    return ReleaseRecord(
        tag=tag,
        commit_hash="0" * 40,
        commit_message=message,
        author=sig,
        committer=sig,
    )


class FakeGitClient:
    """In-memory stand-in for GitClient."""

    def __init__(self):
        self.objects: Dict[str, object] = {}
        self.refs: Dict[str, str] = {}
        self.head_sha: Optional[str] = None
        self.remote_names: List[str] = ['origin']
        self.push_result: Tuple[bool, str] = (True, "To origin\n*\trefs/tags/x:refs/tags/x\t[new tag]\nDone")
        self.pushed: List[tuple] = []
        self.identity: Dict[str, str] = {}
        self.batch_reads = 0
        self._counter = 0

    def _sha(self) -> str:
        self._counter += 1
        return f"{self._counter:040x}"

    def add_commit(self, message: str = "change", when: Optional[datetime] = None) -> str:
        when = when or datetime(2020, 1, 1, tzinfo=UTC)
        sha = self._sha()
        who = ident("Dev", "dev@example.com", when)
        self.objects[sha] = GitCommitObject(hash=sha, author=who, committer=who, message=message)
        self.head_sha = sha
        return sha

    def add_lightweight_tag(self, name: str, target: str) -> None:
        self.refs[name] = target

    def add_annotated_tag(self, name: str, target: str, message: str, tagger: Optional[str] = None) -> str:
        sha = self._sha()
        if tagger is None:
            tagger = ident("Tagger", "tagger@example.com", datetime(2020, 2, 2, tzinfo=UTC))
        self.objects[sha] = GitTagObject(
            hash=sha, name=name, target=target, target_type='commit', tagger=tagger, message=message,
        )
        self.refs[name] = sha
        return sha

    # GitClient interface

    def find_repo_root(self, path):
        return path

    def tag_refs(self, path):
        return [GitTagRef(ref=f"refs/tags/{name}", target=sha) for name, sha in sorted(self.refs.items())]

    def read_objects(self, path, shas):
        self.batch_reads += 1
        return {sha: self.objects[sha] for sha in shas if sha in self.objects}

    def head(self, path):
        return self.head_sha

    def rev_parse(self, path, ref):
        if ref.startswith('refs/tags/'):
            return self.refs.get(ref[len('refs/tags/'):])
        return None

    def create_tag(self, path, name, target, message=None, tagger_name=None, tagger_email=None, when=None):
        if name in self.refs:
            return False, f"fatal: tag '{name}' already exists"
        if message:
            self.add_annotated_tag(name, target, message, ident(tagger_name, tagger_email, when))
        else:
            self.add_lightweight_tag(name, target)
        return True, ""

    def push(self, path, remote, refspecs, env=None):
        self.pushed.append((remote, list(refspecs), env))
        return self.push_result

    def remotes(self, path):
        return list(self.remote_names)

    def global_config(self, key):
        return self.identity.get(key)


