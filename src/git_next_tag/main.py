"""CLI interface for git-next-tag."""

import sys
from pathlib import Path

import click
from click.shell_completion import get_completion_class
from loguru import logger

from git_next_tag import __version__
from git_next_tag.config import (
    ConfigError,
    VersionConfig,
    build_config,
    find_config_file,
    generate_config_template,
    load_config_file,
    parse_key_value,
    split_types,
)
from git_next_tag.git import GitError, get_git_root
from git_next_tag.logging_config import resolve_log_level, setup_logging
from git_next_tag.resolver import calculate_next_version, current_version
from git_next_tag.version import ChangeType, VersionError


def add_help_option(f):
    """Custom decorator to add '-h' as an alias for '--help'."""
    f = click.help_option("--help", "-h")(f)
    return f


def version_options(f):
    """Options shared by commands that resolve versions."""
    options = [
        click.argument("path", default=".", type=click.Path()),
        click.option(
            "--config",
            "-c",
            default=None,
            help="Path to configuration file (default: git-next-tag.yaml in git root, if present)",
        ),
        click.option(
            "--head-ref",
            default=None,
            help="Revision whose history is analysed (default: HEAD)",
        ),
        click.option(
            "--input-template",
            default=None,
            help="Template existing tags are matched against (default: output template)",
        ),
        click.option(
            "--output-template",
            default=None,
            help="Template used to render the result (default: v{version})",
        ),
        click.option(
            "--set",
            "variables",
            multiple=True,
            metavar="KEY=VALUE",
            help="Set a template variable (repeatable)",
        ),
        click.option(
            "--major-types",
            multiple=True,
            help="Comma separated commit types forcing a major bump (default: none)",
        ),
        click.option(
            "--minor-types",
            multiple=True,
            help="Comma separated commit types forcing a minor bump (default: feat)",
        ),
        click.option(
            "--patch-types",
            multiple=True,
            help="Comma separated commit types forcing a patch bump (default: fix)",
        ),
        click.option(
            "--verbose",
            "-v",
            is_flag=True,
            help="Show detailed information on stderr",
        ),
        click.option(
            "--log-level",
            type=click.Choice(
                ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False
            ),
            default=None,
            help="Log level (default: LOG_LEVEL environment variable or WARNING)",
        ),
    ]
    for option in reversed(options):
        f = option(f)
    return f


def load_version_config(
    path: str,
    config: str | None,
    head_ref: str | None,
    input_template: str | None,
    output_template: str | None,
    variables: tuple[str, ...],
    major_types: tuple[str, ...],
    minor_types: tuple[str, ...],
    patch_types: tuple[str, ...],
) -> VersionConfig:
    """Combine configuration file and command-line options.

    Raises:
        ConfigError: If configuration is invalid
        GitError: If the default configuration file cannot be located
    """
    if config is not None:
        file_config = load_config_file(config)
    else:
        file_config = {}
        if Path(path).exists():
            default_file = find_config_file(get_git_root(Path(path).resolve()))
            if default_file is not None:
                logger.info(f"Using configuration file {default_file}")
                file_config = load_config_file(default_file)

    return build_config(
        path=path,
        file_config=file_config,
        head=head_ref,
        input_template=input_template,
        output_template=output_template,
        overrides=[parse_key_value(v) for v in variables],
        major_types=split_types(major_types) if major_types else None,
        minor_types=split_types(minor_types) if minor_types else None,
        patch_types=split_types(patch_types) if patch_types else None,
    )


@click.group(name="git-next-tag")
@add_help_option
@click.version_option(__version__, "--version")
def cli():
    """git-next-tag - Next semantic version from git tags and conventional commits."""
    pass


@cli.command()
@add_help_option
@version_options
def next_version(
    path: str,
    config: str | None,
    head_ref: str | None,
    input_template: str | None,
    output_template: str | None,
    variables: tuple[str, ...],
    major_types: tuple[str, ...],
    minor_types: tuple[str, ...],
    patch_types: tuple[str, ...],
    verbose: bool,
    log_level: str | None,
):
    """Calculate the next version for PATH (default: current directory).

    Finds the highest version among tags matching the input template,
    analyses the conventional commits made since that tag and prints the
    output template rendered with the next version.
    """
    try:
        setup_logging(resolve_log_level(log_level, verbose))
        version_config = load_version_config(
            path,
            config,
            head_ref,
            input_template,
            output_template,
            variables,
            major_types,
            minor_types,
            patch_types,
        )
        result = calculate_next_version(version_config)

        if verbose:
            if result.previous.tag:
                click.echo(
                    f"Current version: {result.previous.version} (tag {result.previous.tag})",
                    err=True,
                )
            else:
                click.echo("No matching tags found in repository", err=True)

            click.echo(
                f"Checked {result.analysis.commits_checked} commits", err=True
            )
            for key, count in sorted(result.analysis.summary.items()):
                click.echo(f"  {key}: {count}", err=True)

            if result.change is not ChangeType.NONE:
                click.echo(f"Determined change type: {result.change.name.lower()}", err=True)
                click.echo(
                    f"Version bump: {result.previous.version} → {result.version}",
                    err=True,
                )
            else:
                click.echo("No version bump (no relevant commits)", err=True)

        click.echo(result.output)

    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)
    except GitError as e:
        click.echo(f"Git error: {e}", err=True)
        sys.exit(1)
    except VersionError as e:
        click.echo(f"Version error: {e}", err=True)
        sys.exit(1)


@cli.command()
@add_help_option
@version_options
def current_version_cmd(
    path: str,
    config: str | None,
    head_ref: str | None,
    input_template: str | None,
    output_template: str | None,
    variables: tuple[str, ...],
    major_types: tuple[str, ...],
    minor_types: tuple[str, ...],
    patch_types: tuple[str, ...],
    verbose: bool,
    log_level: str | None,
):
    """Show the governing tag and its version for PATH.

    Prints the version, followed by the tag it was read from when a
    matching tag exists.
    """
    try:
        setup_logging(resolve_log_level(log_level, verbose))
        version_config = load_version_config(
            path,
            config,
            head_ref,
            input_template,
            output_template,
            variables,
            major_types,
            minor_types,
            patch_types,
        )
        state = current_version(version_config)

        if state.tag:
            click.echo(f"{state.version} {state.tag}")
        else:
            click.echo(str(state.version))

    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)
    except GitError as e:
        click.echo(f"Git error: {e}", err=True)
        sys.exit(1)


@cli.command()
@add_help_option
def generate_config():
    """Generate a documented configuration file template.

    Usage:
        git-next-tag generate-config > git-next-tag.yaml
    """
    click.echo(generate_config_template())


@cli.command()
@add_help_option
@click.argument(
    "shell",
    type=click.Choice(["bash", "zsh", "fish"], case_sensitive=False),
)
def completion(shell: str):
    """Generate shell completion script.

    Usage:
        git-next-tag completion bash > ~/.git-next-tag-completion.bash
        echo ". ~/.git-next-tag-completion.bash" >> ~/.bashrc
    """
    complete_class = get_completion_class(shell.lower())
    complete = complete_class(
        cli=cli,
        ctx_args={},
        prog_name=cli.name,
        complete_var=f"_{cli.name.replace('-', '_').upper()}_COMPLETE",
    )
    click.echo(complete.source())


if __name__ == "__main__":
    cli()
