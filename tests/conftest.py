"""Pytest configuration and fixtures for difftreecheck tests."""

import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Generator, List

import pytest

GIT_IDENTITY = {
    "GIT_AUTHOR_NAME": "Test User",
    "GIT_AUTHOR_EMAIL": "test@example.com",
    "GIT_COMMITTER_NAME": "Test User",
    "GIT_COMMITTER_EMAIL": "test@example.com",
}


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    temp_path = Path(tempfile.mkdtemp(prefix="difftreecheck_test_"))
    try:
        yield temp_path
    finally:
        if temp_path.exists():
            shutil.rmtree(temp_path, ignore_errors=True)


class GitRepoHelper:
    """Helper class for git repository operations in tests."""

    def __init__(self, repo_path: Path):
        self.repo_path = repo_path
        self.env = os.environ.copy()
        self.env.update(GIT_IDENTITY)

    def run_git(self, args: List[str]) -> subprocess.CompletedProcess:
        """Run git command in the repository."""
        return subprocess.run(
            ["git"] + args,
            cwd=self.repo_path,
            env=self.env,
            check=True,
            capture_output=True,
            text=True,
        )

    def init(self) -> None:
        self.run_git(["init", "-q"])
        self.run_git(["config", "user.name", "Test User"])
        self.run_git(["config", "user.email", "test@example.com"])
        self.run_git(["config", "core.symlinks", "true"])

    def create_file(self, path: str, content: str) -> None:
        """Create a file with content."""
        file_path = self.repo_path / path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content)

    def modify_file(self, path: str, content: str) -> None:
        """Modify an existing file."""
        self.create_file(path, content)

    def delete_file(self, path: str) -> None:
        """Delete a file."""
        file_path = self.repo_path / path
        if file_path.is_symlink() or file_path.exists():
            file_path.unlink()

    def replace_with_symlink(self, path: str, target: str) -> None:
        """Turn ``path`` into a symlink pointing at ``target``."""
        self.delete_file(path)
        link = self.repo_path / path
        link.parent.mkdir(parents=True, exist_ok=True)
        os.symlink(target, link)

    def make_executable(self, path: str) -> None:
        file_path = self.repo_path / path
        file_path.chmod(0o755)

    def add_and_commit(self, message: str) -> str:
        """Stage everything and commit, return commit SHA."""
        self.run_git(["add", "-A"])
        self.run_git(["commit", "-q", "--allow-empty", "-m", message])
        return self.get_current_sha()

    def get_current_sha(self) -> str:
        """Get current commit SHA."""
        result = self.run_git(["rev-parse", "HEAD"])
        return result.stdout.strip()


@pytest.fixture
def empty_git_repo(temp_dir: Path) -> Path:
    """An initialized repository without commits."""
    repo_path = temp_dir / "test_repo"
    repo_path.mkdir()
    GitRepoHelper(repo_path).init()
    return repo_path


@pytest.fixture
def git_repo(empty_git_repo: Path) -> Path:
    """A repository with a single initial commit."""
    helper = GitRepoHelper(empty_git_repo)
    helper.create_file("README.md", "# Test Repository\n")
    helper.add_and_commit("Initial commit")
    return empty_git_repo


@pytest.fixture
def git_helper(git_repo: Path) -> GitRepoHelper:
    """Create a git repository helper."""
    return GitRepoHelper(git_repo)


@pytest.fixture
def history_repo(git_helper: GitRepoHelper) -> GitRepoHelper:
    """A repository whose history exercises every supported change shape."""
    git_helper.create_file("a/b.txt", "hello\n")
    git_helper.create_file("script.sh", "echo hi\n")
    git_helper.create_file("link", "plain file\n")
    git_helper.create_file("gone.txt", "bye\n")
    git_helper.add_and_commit("Add files")

    git_helper.modify_file("a/b.txt", "hello world\n")
    git_helper.delete_file("gone.txt")
    git_helper.make_executable("script.sh")
    git_helper.create_file("gitweb/test/Märchen", "Es war einmal\n")
    git_helper.add_and_commit("Modify, delete, chmod, non-ASCII name")

    git_helper.replace_with_symlink("link", "a/b.txt")
    git_helper.add_and_commit("File becomes a symlink")

    git_helper.delete_file("link")
    git_helper.create_file("link", "plain again\n")
    git_helper.create_file("日本/語.txt", "nihongo\n")
    git_helper.add_and_commit("Symlink becomes a file, CJK name")

    git_helper.delete_file("a/b.txt")
    git_helper.create_file("a/b.txt/inner", "now a directory\n")
    git_helper.add_and_commit("File becomes a directory")
    return git_helper
