"""Shared fixtures for git-next-tag tests."""

import shutil
import subprocess
from pathlib import Path

import pytest
from loguru import logger


class GitRepo:
    """Throwaway git repository driven through the git executable."""

    def __init__(self, root: Path):
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)
        self.git("-c", "init.defaultBranch=main", "init", "-q")
        self.git("config", "user.name", "Test User")
        self.git("config", "user.email", "test@example.com")
        self.git("config", "commit.gpgsign", "false")
        self.git("config", "tag.gpgsign", "false")
        self._counter = 0

    def git(self, *args: str) -> str:
        result = subprocess.run(
            ["git", *args],
            cwd=self.root,
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout.strip()

    def commit(self, message: str, files: list[str] | None = None) -> str:
        """Commit the given files (default: one new file at the root).

        Files that already exist are committed with their current contents.
        """
        self._counter += 1
        if files is None:
            files = [f"file{self._counter}.txt"]
        for name in files:
            path = self.root / name
            if not path.exists():
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(f"change {self._counter}\n")
            self.git("add", name)
        self.git("commit", "-q", "-m", message)
        return self.git("rev-parse", "HEAD")

    def tag(self, name: str, message: str | None = None) -> None:
        if message is None:
            self.git("tag", name)
        else:
            self.git("tag", "-a", name, "-m", message)


@pytest.fixture
def git_repo(tmp_path):
    """Create an empty repository at <tmp_path>/project."""
    if shutil.which("git") is None:
        pytest.skip("git not installed")
    return GitRepo(tmp_path / "project")


@pytest.fixture
def log_messages():
    """Capture loguru messages at WARNING and above."""
    messages: list[str] = []
    handler_id = logger.add(lambda msg: messages.append(msg.record["message"]), level="WARNING")
    yield messages
    logger.remove(handler_id)


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop sinks added by the CLI so they don't outlive captured streams."""
    yield
    logger.remove()
