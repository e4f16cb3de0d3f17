"""Resolve the current version from existing git tags."""

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from loguru import logger
from packaging.version import Version

from git_next_tag.git import list_tags, resolve_commit
from git_next_tag.template import CompiledTemplate
from git_next_tag.version import ZERO_VERSION, VersionError, parse_version


@dataclass(frozen=True)
class ResolvedState:
    """Governing tag and the version it carries.

    ``tag`` is empty and ``commit`` is None when no tag matched.
    """

    version: Version
    tag: str
    commit: str | None


def select_governing_tag(
    tags: Iterable[str], compiled: CompiledTemplate
) -> tuple[Version, str]:
    """Pick the tag carrying the highest version.

    Tags whose name does not match the extraction pattern, or whose embedded
    text is not a valid version, are skipped with a warning. Among tags with
    equal versions the first one enumerated wins.

    Args:
        tags: Candidate tag names in enumeration order
        compiled: Compiled input template

    Returns:
        Tuple of the highest version and its tag ('' and 0.0.0 if none)
    """
    version = ZERO_VERSION
    found_tag = ""

    for tag in tags:
        version_text = compiled.extract_version(tag)
        if version_text is None:
            logger.warning(f"Version not found in tag: {tag}")
            continue

        try:
            tag_version = parse_version(version_text)
        except VersionError as e:
            logger.warning(f"Skipping tag {tag}: {e}")
            continue

        logger.debug(f"Checking tag {tag} with version {tag_version}")
        if not found_tag or tag_version > version:
            version = tag_version
            found_tag = tag

    return version, found_tag


def resolve_current_version(compiled: CompiledTemplate, git_root: Path) -> ResolvedState:
    """Resolve the current version from the repository tags.

    Args:
        compiled: Compiled input template
        git_root: Repository root

    Returns:
        Resolved state; version 0.0.0 with no tag when nothing matched

    Raises:
        GitError: If git operations fail
    """
    candidates = list_tags(compiled.glob, git_root)
    logger.debug(f"Found {len(candidates)} possible tag candidates.")

    version, tag = select_governing_tag(candidates, compiled)
    if not tag:
        logger.info(f"No tag matches {compiled.template}, starting from {version}")
        return ResolvedState(version=version, tag="", commit=None)

    commit = resolve_commit(f"refs/tags/{tag}", git_root)
    logger.debug(f"Version: {version} Commit: {commit} Tag: {tag}")
    return ResolvedState(version=version, tag=tag, commit=commit)
