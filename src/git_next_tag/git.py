"""Read-only git operations for git-next-tag."""

import subprocess
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

# Separators used in git log output
FIELD_SEPARATOR = "\x1f"
RECORD_SEPARATOR = "\x1e"


class GitError(Exception):
    """Raised when git operations fail."""

    pass


@dataclass(frozen=True)
class CommitRecord:
    """A commit as seen by the commit walk."""

    sha: str
    message: str
    parents: tuple[str, ...]

    @property
    def is_root(self) -> bool:
        return not self.parents


def get_git_root(path: Path) -> Path:
    """Get the working tree root of the repository containing a path.

    Args:
        path: File or directory inside the repository

    Returns:
        Path to git repository root

    Raises:
        GitError: If not in a git repository or the repository is bare
    """
    cwd = path if path.is_dir() else path.parent
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=str(cwd),
            capture_output=True,
            text=True,
            check=True,
        )
    except subprocess.CalledProcessError as e:
        error_msg = e.stderr.strip()
        if "not a git repository" in error_msg.lower():
            raise GitError(
                f"Not in a git repository: {path}\n"
                "To initialise a git repository, run: git init"
            )
        if "work tree" in error_msg.lower():
            raise GitError(f"Bare repositories are not supported: {path}")
        raise GitError(f"Git command failed: {error_msg}")
    except FileNotFoundError:
        raise GitError("Git not found. Please ensure git is installed.")

    toplevel = result.stdout.strip()
    if not toplevel:
        raise GitError(f"Bare repositories are not supported: {path}")
    return Path(toplevel).resolve()


def _run_git_command(args: list[str], cwd: Path | str) -> str:
    """Run a git command and return output.

    Args:
        args: Git command arguments (e.g., ['log', '--oneline'])
        cwd: Working directory for git command

    Returns:
        Command output as string

    Raises:
        GitError: If git command fails
    """
    try:
        result = subprocess.run(
            ["git"] + args,
            cwd=str(cwd),
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout.strip()
    except subprocess.CalledProcessError as e:
        raise GitError(f"Git command failed: {e.stderr.strip()}")
    except FileNotFoundError:
        raise GitError("Git not found. Please ensure git is installed.")


def list_tags(pattern: str, cwd: Path) -> list[str]:
    """List tag names matching a glob, sorted by refname.

    Args:
        pattern: Glob pattern (e.g., 'v*')
        cwd: Repository directory

    Returns:
        Matching tag names, possibly empty
    """
    output = _run_git_command(
        ["tag", "--list", "--sort=refname", pattern],
        cwd=cwd,
    )
    if not output:
        return []
    return output.split("\n")


def resolve_commit(revision: str, cwd: Path) -> str:
    """Resolve a revision expression to a commit id.

    Args:
        revision: Branch, tag or commit expression
        cwd: Repository directory

    Returns:
        Full commit sha

    Raises:
        GitError: If the revision does not name a commit
    """
    try:
        return _run_git_command(
            ["rev-parse", "--verify", f"{revision}^{{commit}}"],
            cwd=cwd,
        )
    except GitError as e:
        raise GitError(f"Unable to resolve revision '{revision}': {e}") from e


def iter_commits(head: str, since: str | None, cwd: Path) -> Iterator[CommitRecord]:
    """Iterate commits reachable from head, newest first.

    Args:
        head: Commit id to start from (inclusive)
        since: Commit id whose ancestry is excluded (None = full history)
        cwd: Repository directory

    Yields:
        Commit records

    Raises:
        GitError: If git operations fail
    """
    range_spec = f"{since}..{head}" if since else head
    output = _run_git_command(
        [
            "log",
            f"--format=%H{FIELD_SEPARATOR}%P{FIELD_SEPARATOR}%B{RECORD_SEPARATOR}",
            range_spec,
            "--",
        ],
        cwd=cwd,
    )

    for record in output.split(RECORD_SEPARATOR):
        record = record.lstrip("\n")
        if not record:
            continue
        # Trailing separators may have been stripped along with whitespace
        sha, _, rest = record.partition(FIELD_SEPARATOR)
        parents, _, message = rest.partition(FIELD_SEPARATOR)
        yield CommitRecord(
            sha=sha,
            message=message.strip(),
            parents=tuple(parents.split()),
        )


def changed_files(commit: str, cwd: Path, root: bool = False) -> list[str]:
    """List files changed by a commit relative to its single parent.

    Args:
        commit: Commit id
        cwd: Repository directory
        root: The commit has no parent; list every file it introduces

    Returns:
        Paths relative to the repository root
    """
    args = ["diff-tree", "--no-commit-id", "--name-only", "-r", "-z"]
    if root:
        args.append("--root")
    output = _run_git_command(args + [commit], cwd=cwd)
    return [name for name in output.split("\0") if name]
