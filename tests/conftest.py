"""Shared test fixtures for multi-committer tests."""
import shutil
import subprocess
from pathlib import Path

import pytest

from multicommitter.core.config import RuntimeConfig, set_config

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
requires_rsync = pytest.mark.skipif(shutil.which("rsync") is None, reason="rsync not installed")


def run_git(repo: Path, *args: str) -> str:
    """Run git with a throwaway identity."""
    result = subprocess.run(
        [
            "git",
            "-c", "user.email=test@example.com",
            "-c", "user.name=Test",
            "-c", "commit.gpgsign=false",
            *args,
        ],
        cwd=repo,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout


def write_files(root: Path, files: dict) -> None:
    for rel_path, content in files.items():
        path = root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)


@pytest.fixture(autouse=True)
def local_runtime_config(monkeypatch, tmp_path):
    """Use the pure-Python copier and a temp profile path in every test."""
    monkeypatch.setenv("MULTI_COMMITTER_CONFIG", str(tmp_path / "profile.yml"))
    set_config(RuntimeConfig(copy_backend="local"))
    yield
    set_config(None)


@pytest.fixture
def make_repo(tmp_path):
    """Create a real git repository with an initial commit."""

    def _make(name: str, files: dict = None) -> Path:
        repo = tmp_path / name
        repo.mkdir(parents=True)
        run_git(repo, "init", "-q")
        if files:
            write_files(repo, files)
            run_git(repo, "add", "-A")
            run_git(repo, "commit", "-q", "-m", "initial")
        return repo

    return _make


@pytest.fixture
def fake_repo(tmp_path):
    """Create a directory that looks like a git repo (.git dir only)."""

    def _make(name: str, files: dict = None) -> Path:
        repo = tmp_path / name
        (repo / ".git").mkdir(parents=True)
        write_files(repo, files or {})
        return repo

    return _make
