"""Commit message analysis for determining the version bump."""

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from loguru import logger

from git_next_tag.config import ReleaseRules
from git_next_tag.git import CommitRecord, changed_files
from git_next_tag.version import ChangeType

# Conventional commit subject: type(scope)!: description
SUBJECT_PATTERN = re.compile(
    r"^(?P<type>\w+)(?:\((?P<scope>[^()\r\n]+)\))?(?P<breaking>!)?:[ \t]+(?P<description>\S.*)$"
)

# Breaking change footer in the commit body
BREAKING_FOOTER_PATTERN = re.compile(r"^BREAKING[ -]CHANGE:", re.MULTILINE)


@dataclass(frozen=True)
class ConventionalCommit:
    """Successfully parsed conventional commit."""

    type: str
    scope: str
    breaking: bool
    description: str


@dataclass(frozen=True)
class MalformedCommit:
    """Commit message that does not follow the conventional commit grammar."""

    message: str
    reason: str


ParseResult = ConventionalCommit | MalformedCommit


@dataclass
class CommitAnalysis:
    """Outcome of walking the commit range."""

    change: ChangeType = ChangeType.NONE
    commits_checked: int = 0
    summary: dict[str, int] = field(default_factory=dict)


def parse_commit_message(message: str) -> ParseResult:
    """Parse a conventional commit message.

    Args:
        message: Full commit message (subject and optional body)

    Returns:
        ConventionalCommit on success, MalformedCommit otherwise
    """
    message = message.strip()
    if not message:
        return MalformedCommit(message=message, reason="empty commit message")

    subject, _, body = message.partition("\n")
    match = SUBJECT_PATTERN.match(subject.strip())
    if match is None:
        return MalformedCommit(
            message=message, reason="subject is not 'type(scope)!: description'"
        )

    breaking = match.group("breaking") == "!"
    if body and BREAKING_FOOTER_PATTERN.search(body):
        breaking = True

    return ConventionalCommit(
        type=match.group("type"),
        scope=match.group("scope") or "",
        breaking=breaking,
        description=match.group("description").strip(),
    )


def classification_key(commit: ConventionalCommit) -> str:
    """Build the key matched against the configured commit types.

    Examples: 'feat', 'feat(api)', 'feat!', 'feat(api)!'.
    """
    key = commit.type
    if commit.scope:
        key += f"({commit.scope})"
    if commit.breaking:
        key += "!"
    return key


def classify_commit(commit: ConventionalCommit, rules: ReleaseRules) -> ChangeType:
    """Determine the change type of a single commit.

    Args:
        commit: Parsed commit
        rules: Configured commit types per bump level

    Returns:
        Change type for this commit
    """
    key = classification_key(commit)

    if commit.breaking or key in rules.major:
        return ChangeType.MAJOR
    if key in rules.minor:
        return ChangeType.MINOR
    if key in rules.patch:
        return ChangeType.PATCH
    return ChangeType.NONE


def touches_path(files: Iterable[str], sub_path: PurePosixPath) -> bool:
    """Check whether any changed file lies at or below sub_path.

    Args:
        files: Paths relative to the repository root
        sub_path: Path relative to the repository root

    Returns:
        True if at least one file is sub_path itself or inside it
    """
    for name in files:
        file_path = PurePosixPath(name)
        if file_path == sub_path or sub_path in file_path.parents:
            return True
    return False


def relative_sub_path(path: Path, git_root: Path) -> PurePosixPath | None:
    """Return the path filter for a scoped path.

    Args:
        path: Absolute scoped path
        git_root: Repository root

    Returns:
        Repository relative path, or None when the path is the repository root
    """
    relative = path.relative_to(git_root)
    if relative == Path("."):
        return None
    return PurePosixPath(relative.as_posix())


def _record_change(
    record: CommitRecord, rules: ReleaseRules, summary: dict[str, int]
) -> ChangeType:
    """Classify one commit of the walk and count its key in summary."""
    parsed = parse_commit_message(record.message)
    if isinstance(parsed, MalformedCommit):
        logger.warning(
            f"Skipping commit {record.sha} due to commit message error: {parsed.reason}"
        )
        return ChangeType.NONE

    key = classification_key(parsed)
    summary[key] = summary.get(key, 0) + 1

    change = classify_commit(parsed, rules)
    if change is ChangeType.MAJOR:
        logger.info(f"{record.sha} commit contains a breaking change.")
    elif change is ChangeType.NONE:
        logger.info(f"{record.sha} commit of type {key} skipped")
    else:
        logger.info(f"{record.sha} commit contains a {change.name.lower()} change.")
    return change


def analyse_commits(
    commits: Iterable[CommitRecord],
    rules: ReleaseRules,
    git_root: Path,
    sub_path: PurePosixPath | None = None,
    bounded: bool = True,
) -> CommitAnalysis:
    """Analyse commits and determine the change type.

    Args:
        commits: Commits to inspect, newest first
        rules: Configured commit types per bump level
        git_root: Repository root, used to diff commits against their parent
        sub_path: Only count commits touching this repository relative path
        bounded: False when walking the full history (no tag); the walk then
            stops after the first root commit

    Returns:
        Analysis with the strongest change type found
    """
    analysis = CommitAnalysis()

    for record in commits:
        analysis.commits_checked += 1

        # Merge commits have no single tree to diff against
        if (
            sub_path is not None
            and len(record.parents) <= 1
            and not touches_path(
                changed_files(record.sha, git_root, root=record.is_root), sub_path
            )
        ):
            logger.info(f"Commit {record.sha} contains no file changed for path {sub_path}")
        else:
            change = _record_change(record, rules, analysis.summary)
            analysis.change = max(analysis.change, change)
            if change is ChangeType.MAJOR:
                break

        if record.is_root and not bounded:
            logger.debug(f"Reached root commit {record.sha}, stopping")
            break

    logger.info(f"Checked {analysis.commits_checked} commits.")
    return analysis
