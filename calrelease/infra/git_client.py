"""
Git client infrastructure for calrelease.

Provides a clean abstraction over git command execution.
All git operations go through this client, making them:
- Easy to mock for testing
- Consistent in error handling
- Isolated from business logic
"""

import os
import subprocess
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union
import logging

logger = logging.getLogger(__name__)

# Trailing signature blocks git appends to signed tag messages
_SIGNATURE_MARKERS = (
    '-----BEGIN PGP SIGNATURE-----',
    '-----BEGIN SSH SIGNATURE-----',
    '-----BEGIN SIGNED MESSAGE-----',
)


class GitError(Exception):
    """A git command failed or returned something unexpected."""


@dataclass
class GitTagRef:
    """A reference under refs/tags/ and the object it points at."""
    ref: str
    target: str

    @property
    def short_name(self) -> str:
        return self.ref[len('refs/tags/'):] if self.ref.startswith('refs/tags/') else self.ref


@dataclass
class GitCommitObject:
    """A raw commit object. Identities are unparsed git ident lines."""
    hash: str
    author: str
    committer: str
    message: str

    @classmethod
    def from_raw(cls, sha: str, raw: str) -> 'GitCommitObject':
        headers, message = parse_raw_object(raw)
        return cls(
            hash=sha,
            author=headers.get('author', ''),
            committer=headers.get('committer', ''),
            message=message,
        )


@dataclass
class GitTagObject:
    """A raw annotated tag object. ``tagger`` is empty if the header is absent."""
    hash: str
    name: str
    target: str
    target_type: str
    tagger: str
    message: str

    @classmethod
    def from_raw(cls, sha: str, raw: str) -> 'GitTagObject':
        headers, message = parse_raw_object(raw)
        return cls(
            hash=sha,
            name=headers.get('tag', ''),
            target=headers.get('object', ''),
            target_type=headers.get('type', ''),
            tagger=headers.get('tagger', ''),
            message=strip_signature(message),
        )


GitObject = Union[GitCommitObject, GitTagObject]


def parse_raw_object(raw: str) -> Tuple[Dict[str, str], str]:
    """
    Split the body of a commit or tag object into headers and message.

    Multi-line headers (gpgsig, mergetag) are skipped; only the first
    occurrence of a header is kept.

    Returns:
        Tuple of (headers, message)
    """
    headers: Dict[str, str] = {}
    lines = raw.split('\n')
    i = 0
    while i < len(lines):
        line = lines[i]
        i += 1
        if line == '':
            break
        if line.startswith(' '):
            continue
        key, _, value = line.partition(' ')
        headers.setdefault(key, value)
    message = '\n'.join(lines[i:]).rstrip('\n')
    return headers, message


def parse_batch_output(data: bytes) -> Dict[str, GitObject]:
    """
    Parse the output of ``git cat-file --batch``.

    Each object is a ``<sha> <type> <size>`` line followed by exactly
    ``size`` bytes and a newline. Missing objects only get a
    ``<sha> missing`` line. Objects other than commits and tags are left out.
    """
    objects: Dict[str, GitObject] = {}
    pos = 0
    while pos < len(data):
        end = data.find(b'\n', pos)
        if end == -1:
            break
        header = data[pos:end].decode('utf-8', errors='replace')
        pos = end + 1

        parts = header.split()
        if len(parts) != 3:
            logger.debug(f"cat-file: {header}")
            continue

        sha, obj_type, size = parts[0], parts[1], int(parts[2])
        raw = data[pos:pos + size].decode('utf-8', errors='replace')
        pos += size + 1

        if obj_type == 'commit':
            objects[sha] = GitCommitObject.from_raw(sha, raw)
        elif obj_type == 'tag':
            objects[sha] = GitTagObject.from_raw(sha, raw)
        else:
            logger.debug(f"ignoring {obj_type} object {sha}")
    return objects


def strip_signature(message: str) -> str:
    """Remove a trailing signature block from a tag message."""
    for marker in _SIGNATURE_MARKERS:
        pos = message.find(marker)
        if pos != -1:
            message = message[:pos]
    return message.rstrip('\n')


def format_git_date(when: datetime) -> str:
    """Render a datetime in git's internal ``<unix> <tz>`` date format."""
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return f"{int(when.timestamp())} {when.strftime('%z')}"


class GitClient:
    """
    Abstraction over git commands.

    Provides methods for the git operations calrelease needs with consistent
    error handling and return types.

    Example:
        client = GitClient()
        root = client.find_repo_root(os.getcwd())
        for ref in client.tag_refs(root):
            print(ref.short_name, ref.target)
    """

    def __init__(self, timeout: int = 30, push_timeout: int = 300):
        """
        Initialize GitClient.

        Args:
            timeout: Command timeout in seconds (default: 30)
            push_timeout: Timeout for network operations in seconds (default: 300)
        """
        self.timeout = timeout
        self.push_timeout = push_timeout


    def _run(
        self,
        args: List[str],
        cwd: Optional[str] = None,
        capture_stderr: bool = False,
        env: Optional[Dict[str, str]] = None,
        timeout: Optional[int] = None,
    ) -> Tuple[Optional[str], int]:
        """
        Run a git command.

        Args:
            args: Git arguments (e.g., ['tag', '-l'])
            cwd: Working directory
            capture_stderr: Include stderr in output
            env: Extra environment variables for this command only
            timeout: Override the default timeout

        Returns:
            Tuple of (stdout, returncode)
        """
        cmd = ['git'] + args
        run_env = None
        if env:
            run_env = os.environ.copy()
            run_env.update(env)

        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                text=True,
                env=run_env,
                timeout=timeout or self.timeout
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"Git command timed out: {' '.join(cmd)}")
            return None, -1
        except OSError as e:
            logger.error(f"Git command failed: {' '.join(cmd)} - {e}")
            return None, -1

        output = result.stdout
        if capture_stderr and result.stderr:
            output += result.stderr

        logger.debug(f"git {' '.join(args)} -> {result.returncode}")
        return output.strip() if output else None, result.returncode

    def _run_batch(self, args: List[str], stdin: bytes, cwd: Optional[str] = None) -> Tuple[Optional[bytes], int]:
        """
        Run a git command that reads stdin and writes binary output.

        Returns:
            Tuple of (raw stdout, returncode)
        """
        cmd = ['git'] + args
        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                input=stdin,
                capture_output=True,
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"Git command timed out: {' '.join(cmd)}")
            return None, -1
        except OSError as e:
            logger.error(f"Git command failed: {' '.join(cmd)} - {e}")
            return None, -1

        logger.debug(f"git {' '.join(args)} -> {result.returncode}")
        return result.stdout, result.returncode

    def is_git_repo(self, path: str) -> bool:
        """Check if path is a git repository."""
        git_dir = Path(path) / ".git"
        return git_dir.exists()

    def find_repo_root(self, path: str) -> Optional[str]:
        """
        Find the repository root in ``path`` or any parent directory.

        Returns:
            Repository root or None if no .git is found
        """
        current = Path(path).resolve()
        for candidate in (current, *current.parents):
            if self.is_git_repo(str(candidate)):
                return str(candidate)
        return None

    def tag_refs(self, path: str) -> List[GitTagRef]:
        """
        List every reference under refs/tags/.

        Raises:
            GitError: If the references cannot be listed
        """
        output, code = self._run(
            ['for-each-ref', '--format=%(objectname) %(refname)', 'refs/tags'],
            cwd=path,
        )
        if code != 0:
            raise GitError(f"failed to list tags in {path}")
        if not output:
            return []

        refs = []
        for line in output.split('\n'):
            target, _, ref = line.strip().partition(' ')
            if target and ref:
                refs.append(GitTagRef(ref=ref, target=target))
        return refs

    def read_objects(self, path: str, shas: Iterable[str]) -> Dict[str, GitObject]:
        """
        Read many objects with a single ``git cat-file --batch`` call.

        Returns:
            Dict of hash to parsed commit or tag object. Missing objects and
            objects of other types are not included.

        Raises:
            GitError: If cat-file could not be run
        """
        unique = list(dict.fromkeys(sha for sha in shas if sha))
        if not unique:
            return {}

        stdin = ('\n'.join(unique) + '\n').encode()
        output, code = self._run_batch(['cat-file', '--batch'], stdin, cwd=path)
        if code != 0 or output is None:
            raise GitError(f"failed to read objects in {path}")
        return parse_batch_output(output)

    def head(self, path: str) -> Optional[str]:
        """Hash of the commit HEAD points at, or None (e.g. empty repository)."""
        output, code = self._run(['rev-parse', '--verify', '--quiet', 'HEAD^{commit}'], cwd=path)
        if code == 0 and output:
            return output.strip()
        return None

    def rev_parse(self, path: str, ref: str) -> Optional[str]:
        """Resolve a reference to an object hash."""
        output, code = self._run(['rev-parse', '--verify', '--quiet', ref], cwd=path)
        if code == 0 and output:
            return output.strip()
        return None

    def create_tag(
        self,
        path: str,
        name: str,
        target: str,
        message: Optional[str] = None,
        tagger_name: Optional[str] = None,
        tagger_email: Optional[str] = None,
        when: Optional[datetime] = None,
    ) -> Tuple[bool, str]:
        """
        Create a tag pointing at ``target``.

        Without a message the tag is lightweight. With a message an
        annotated tag is created; the tagger identity and date are passed
        through the committer environment variables git reads for tags.

        Returns:
            Tuple of (success, output)
        """
        env = None
        if message:
            args = ['tag', '-a', name, '-m', message, target]
            env = {}
            if tagger_name:
                env['GIT_COMMITTER_NAME'] = tagger_name
            if tagger_email:
                env['GIT_COMMITTER_EMAIL'] = tagger_email
            if when is not None:
                env['GIT_COMMITTER_DATE'] = format_git_date(when)
        else:
            args = ['tag', name, target]

        output, code = self._run(args, cwd=path, capture_stderr=True, env=env)
        return code == 0, output or ''

    def push(
        self,
        path: str,
        remote: str,
        refspecs: List[str],
        env: Optional[Dict[str, str]] = None,
    ) -> Tuple[bool, str]:
        """
        Push refspecs to a remote.

        Uses --porcelain so up-to-date refs are reported in a stable format.

        Returns:
            Tuple of (success, combined stdout/stderr)
        """
        output, code = self._run(
            ['push', '--porcelain', remote] + refspecs,
            cwd=path,
            capture_stderr=True,
            env=env,
            timeout=self.push_timeout,
        )
        return code == 0, output or ''

    def remotes(self, path: str) -> List[str]:
        """Names of all configured remotes."""
        output, code = self._run(['remote'], cwd=path)
        if code != 0 or not output:
            return []
        return [line.strip() for line in output.split('\n') if line.strip()]

    def global_config(self, key: str) -> Optional[str]:
        """Read a value from the user's global git configuration."""
        output, code = self._run(['config', '--global', '--get', key])
        if code == 0 and output:
            return output.strip()
        return None
