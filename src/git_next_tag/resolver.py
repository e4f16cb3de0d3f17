"""Next version calculation pipeline."""

from dataclasses import dataclass
from pathlib import Path

from loguru import logger
from packaging.version import Version

from git_next_tag.analyser import CommitAnalysis, analyse_commits, relative_sub_path
from git_next_tag.config import SUPPORTED_SOURCES, ConfigError, VersionConfig
from git_next_tag.git import get_git_root, iter_commits, resolve_commit
from git_next_tag.tags import ResolvedState, resolve_current_version
from git_next_tag.template import compile_template
from git_next_tag.variables import (
    build_variables,
    path_variables,
    render_template,
)
from git_next_tag.version import ChangeType, bump_version


@dataclass(frozen=True)
class NextVersion:
    """Result of a next version calculation."""

    output: str
    version: Version
    tag: str
    previous: ResolvedState
    analysis: CommitAnalysis
    variables: dict[str, str]

    @property
    def change(self) -> ChangeType:
        return self.analysis.change


def _prepare(config: VersionConfig) -> tuple[Path, dict[str, str]]:
    """Locate the repository and build the user variable map."""
    if config.source not in SUPPORTED_SOURCES:
        raise ConfigError(f"Unsupported version source '{config.source}'")

    logger.info(f"Path: {config.path}")
    git_root = get_git_root(config.path)

    if not config.path.is_relative_to(git_root):
        raise ConfigError(f"Path {config.path} is outside repository {git_root}")

    variables = build_variables(path_variables(config.path, git_root), config.variables)
    return git_root, variables


def current_version(config: VersionConfig) -> ResolvedState:
    """Resolve the governing tag and version without analysing commits.

    Args:
        config: Run configuration

    Returns:
        Resolved state

    Raises:
        ConfigError: If configuration is invalid
        GitError: If git operations fail
    """
    git_root, variables = _prepare(config)
    compiled = compile_template(config.input_template, variables)
    return resolve_current_version(compiled, git_root)


def calculate_next_version(config: VersionConfig) -> NextVersion:
    """Calculate the next version and render the output template.

    Args:
        config: Run configuration

    Returns:
        Next version result

    Raises:
        ConfigError: If configuration or templates are invalid
        GitError: If git operations fail
    """
    git_root, variables = _prepare(config)
    compiled = compile_template(config.input_template, variables)

    head = resolve_commit(config.head, git_root)
    previous = resolve_current_version(compiled, git_root)

    if previous.commit:
        logger.info(f"Checking commits between: {previous.commit}..{head}")
    else:
        logger.info(f"Checking commits before: {head}")

    analysis = analyse_commits(
        iter_commits(head, previous.commit, git_root),
        config.rules,
        git_root,
        sub_path=relative_sub_path(config.path, git_root),
        bounded=previous.commit is not None,
    )

    version = bump_version(previous.version, analysis.change)
    logger.info(f"Next version: {version}")

    engine = {
        "previous-version": str(previous.version),
        "previous-tag": previous.tag,
        "version": str(version),
    }
    engine["tag"] = render_template(
        config.input_template, build_variables(variables, engine=engine)
    )
    final_variables = build_variables(variables, engine=engine)

    return NextVersion(
        output=render_template(config.output_template, final_variables),
        version=version,
        tag=engine["tag"],
        previous=previous,
        analysis=analysis,
        variables=final_variables,
    )
