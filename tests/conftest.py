"""Shared fixtures for calrelease tests."""

import shutil
import subprocess
from pathlib import Path

import pytest

from tests.helpers import FakeGitClient


@pytest.fixture
def fake_git():
    return FakeGitClient()


def run_git(cwd: Path, *args: str) -> str:
    result = subprocess.run(['git', *args], cwd=cwd, capture_output=True, text=True, check=True)
    return result.stdout.strip()


@pytest.fixture
def git_repo(tmp_path, monkeypatch):
    """
    A real repository with one commit and two April 2020 tags:
    2020.04.001-release (lightweight) and 2020.04.002-release (annotated).
    """
    if shutil.which('git') is None:
        pytest.skip("git executable not available")

    home = tmp_path / 'home'
    home.mkdir()
    monkeypatch.setenv('HOME', str(home))
    monkeypatch.setenv('GIT_CONFIG_NOSYSTEM', '1')
    monkeypatch.setenv('GIT_AUTHOR_NAME', 'Fixture Author')
    monkeypatch.setenv('GIT_AUTHOR_EMAIL', 'author@example.com')
    monkeypatch.setenv('GIT_COMMITTER_NAME', 'Fixture Committer')
    monkeypatch.setenv('GIT_COMMITTER_EMAIL', 'committer@example.com')
    monkeypatch.setenv('GIT_AUTHOR_DATE', '1586000000 +0000')
    monkeypatch.setenv('GIT_COMMITTER_DATE', '1586000000 +0000')
    monkeypatch.delenv('CALRELEASE_CONFIG', raising=False)

    repo = tmp_path / 'repo'
    repo.mkdir()
    run_git(repo, 'init', '-q')
    run_git(repo, 'config', 'tag.gpgSign', 'false')
    run_git(repo, 'commit', '-q', '--allow-empty', '-m', 'First change\n\nWith a body')
    run_git(repo, 'tag', '2020.04.001-release')
    run_git(repo, 'tag', '-a', '2020.04.002-release', '-m', 'Second release')
    return repo


@pytest.fixture
def bare_remote(tmp_path, git_repo):
    """A bare repository registered as 'origin' of git_repo."""
    remote = tmp_path / 'remote.git'
    run_git(tmp_path, 'init', '-q', '--bare', str(remote))
    run_git(git_repo, 'remote', 'add', 'origin', str(remote))
    return remote
