"""Configuration loading and parsing for git-next-tag."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

DEFAULT_CONFIG_FILENAME = "git-next-tag.yaml"

DEFAULT_HEAD = "HEAD"
DEFAULT_TEMPLATE = "v{version}"
DEFAULT_MAJOR_TYPES: tuple[str, ...] = ()
DEFAULT_MINOR_TYPES: tuple[str, ...] = ("feat",)
DEFAULT_PATCH_TYPES: tuple[str, ...] = ("fix",)

# Only git tags are supported as a version source
SUPPORTED_SOURCES = ("git",)

# Keys accepted in the YAML configuration file
CONFIG_KEYS = {
    "head-ref": str,
    "input-template": str,
    "output-template": str,
    "variables": dict,
    "major-types": list,
    "minor-types": list,
    "patch-types": list,
    "source": str,
}


class ConfigError(Exception):
    """Raised when configuration is invalid or cannot be loaded."""

    pass


@dataclass(frozen=True)
class ReleaseRules:
    """Conventional commit classification keys for each bump level."""

    major: frozenset[str] = frozenset(DEFAULT_MAJOR_TYPES)
    minor: frozenset[str] = frozenset(DEFAULT_MINOR_TYPES)
    patch: frozenset[str] = frozenset(DEFAULT_PATCH_TYPES)


@dataclass(frozen=True)
class VersionConfig:
    """Resolved, immutable configuration for one run."""

    path: Path
    head: str = DEFAULT_HEAD
    input_template: str = DEFAULT_TEMPLATE
    output_template: str = DEFAULT_TEMPLATE
    variables: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType({})
    )
    rules: ReleaseRules = field(default_factory=ReleaseRules)
    source: str = "git"


def parse_key_value(value: str) -> tuple[str, str]:
    """Parse a KEY=VALUE pair.

    Args:
        value: String such as 'env=prod'

    Returns:
        Tuple of key and value (value may contain '=')

    Raises:
        ConfigError: If no '=' is present or the key is empty
    """
    key, sep, val = value.partition("=")
    if not sep:
        raise ConfigError(f"Invalid KEY=VALUE: no '=' found in '{value}'")
    if not key:
        raise ConfigError(f"Invalid KEY=VALUE: empty key in '{value}'")
    return key, val


def split_types(values: Iterable[str]) -> list[str]:
    """Split comma separated commit type options into a flat list.

    Args:
        values: Option values, each possibly comma separated

    Returns:
        List of commit types with empty entries removed
    """
    types = []
    for value in values:
        types.extend(item.strip() for item in value.split(",") if item.strip())
    return types


def load_config_file(config_path: str | Path) -> dict[str, Any]:
    """Load and validate a YAML configuration file.

    Args:
        config_path: Path to configuration file

    Returns:
        Validated configuration dictionary

    Raises:
        ConfigError: If config file doesn't exist or is invalid
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        return {}

    _validate_config(data)
    return data


def _validate_config(data: Any) -> None:
    """Validate the structure of a configuration file."""
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")

    unknown = sorted(set(data) - set(CONFIG_KEYS))
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

    for key, expected in CONFIG_KEYS.items():
        if key in data and not isinstance(data[key], expected):
            raise ConfigError(f"'{key}' must be a {expected.__name__}")

    for key in ("major-types", "minor-types", "patch-types"):
        if key in data and not all(isinstance(t, str) for t in data[key]):
            raise ConfigError(f"'{key}' must be a list of strings")

    for name, value in data.get("variables", {}).items():
        if not isinstance(value, (str, int, float)) or isinstance(value, bool):
            raise ConfigError(f"Variable '{name}' must be a string or number")


def find_config_file(git_root: Path) -> Path | None:
    """Return the default configuration file in the repository root, if any."""
    candidate = git_root / DEFAULT_CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def build_config(
    path: str | Path = ".",
    file_config: Mapping[str, Any] | None = None,
    head: str | None = None,
    input_template: str | None = None,
    output_template: str | None = None,
    overrides: Iterable[tuple[str, str]] = (),
    major_types: Iterable[str] | None = None,
    minor_types: Iterable[str] | None = None,
    patch_types: Iterable[str] | None = None,
) -> VersionConfig:
    """Build the immutable run configuration.

    Command-line values take precedence over values from the configuration
    file, which take precedence over the built-in defaults. An empty input
    template falls back to the output template.

    Args:
        path: Scoped filesystem path
        file_config: Validated configuration file contents
        head: Head revision
        input_template: Template used to find existing tags
        output_template: Template used to render the result
        overrides: KEY=VALUE variable overrides from the command line
        major_types: Commit types forcing a major bump
        minor_types: Commit types forcing a minor bump
        patch_types: Commit types forcing a patch bump

    Returns:
        Resolved configuration

    Raises:
        ConfigError: If the path does not exist or the source is unsupported
    """
    file_config = file_config or {}

    resolved_path = Path(path).expanduser()
    if not resolved_path.exists():
        raise ConfigError(f"Path does not exist: {path}")
    resolved_path = resolved_path.resolve()

    source = file_config.get("source", "git")
    if source not in SUPPORTED_SOURCES:
        raise ConfigError(
            f"Unsupported version source '{source}'. "
            f"Supported sources: {', '.join(SUPPORTED_SOURCES)}"
        )

    output = output_template or file_config.get("output-template") or DEFAULT_TEMPLATE
    template_in = input_template or file_config.get("input-template") or output

    variables = {str(k): str(v) for k, v in file_config.get("variables", {}).items()}
    variables.update(overrides)

    def _types(cli_value: Iterable[str] | None, key: str, default: tuple[str, ...]):
        if cli_value is not None:
            return frozenset(cli_value)
        if key in file_config:
            return frozenset(file_config[key])
        return frozenset(default)

    rules = ReleaseRules(
        major=_types(major_types, "major-types", DEFAULT_MAJOR_TYPES),
        minor=_types(minor_types, "minor-types", DEFAULT_MINOR_TYPES),
        patch=_types(patch_types, "patch-types", DEFAULT_PATCH_TYPES),
    )

    return VersionConfig(
        path=resolved_path,
        head=head or file_config.get("head-ref") or DEFAULT_HEAD,
        input_template=template_in,
        output_template=output,
        variables=MappingProxyType(variables),
        rules=rules,
        source=source,
    )


def generate_config_template() -> str:
    """Generate a configuration file template with all parameters documented.

    Returns:
        YAML configuration template as a string with inline documentation
    """
    template = """# git-next-tag configuration
#
# Place this file in the repository root as git-next-tag.yaml, or pass it
# with --config. Command-line options override every value below.

# ============================================================================
# VERSION SOURCE
# ============================================================================

# Where the current version comes from
# Type: string
# Default: "git" (the only supported source)
source: git

# ============================================================================
# TEMPLATES
# ============================================================================

# Revision whose history is analysed
# Type: string
# Default: "HEAD"
head-ref: HEAD

# Template rendered to produce the output
# Type: string containing {version}
# Default: "v{version}"
output-template: "v{version}"

# Template existing tags are matched against
# Type: string containing {version}
# Default: same as output-template
input-template: "v{version}"

# ============================================================================
# VARIABLES
# ============================================================================

# Values for {name} placeholders in the templates
# Type: mapping of name to string
# Default: {} (empty)
#
# Built-in variables:
#   {version}, {tag}, {previous-version}, {previous-tag}
#   {path[0]} .. {path[N]}  path components, path[0] is the repository directory
#   {path[-1]} .. {path[-N]}  path components from the end, path[-1] is the leaf
variables: {}
  # env: prod

# ============================================================================
# RELEASE RULES
# ============================================================================

# Commit classification keys are "type", "type(scope)", with a trailing "!"
# for breaking commits. Breaking commits always produce a major bump.

# Major version bump (x.0.0)
# Type: list of strings
# Default: [] (empty)
major-types: []

# Minor version bump (0.x.0)
# Type: list of strings
# Default: [feat]
minor-types:
  - feat

# Patch version bump (0.0.x)
# Type: list of strings
# Default: [fix]
patch-types:
  - fix
"""
    return template
