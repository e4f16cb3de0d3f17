"""Template variables and rendering."""

import re
from collections.abc import Mapping
from pathlib import Path

from loguru import logger

# Matches a {name} placeholder; names may not contain braces
PLACEHOLDER_PATTERN = re.compile(r"\{([^{}]*)\}")

# Variables computed by the resolver; user overrides never replace these
ENGINE_VARIABLES = ("previous-version", "previous-tag", "version", "tag")


def render_template(template: str, variables: Mapping[str, str]) -> str:
    """Replace every known {name} placeholder with its value.

    Placeholders without a matching variable are left untouched. Inserted
    values are not scanned for further placeholders.

    Args:
        template: Template string (e.g., 'v{version}-{env}')
        variables: Mapping of placeholder name to value

    Returns:
        Rendered string
    """

    def _substitute(match: re.Match[str]) -> str:
        name = match.group(1)
        if name in variables:
            logger.debug(f"Replace {{{name}}} with {variables[name]}")
            return variables[name]
        return match.group(0)

    output = PLACEHOLDER_PATTERN.sub(_substitute, template)
    logger.debug(f"Render template {template} to {output}")
    return output


def path_variables(path: Path, git_root: Path) -> dict[str, str]:
    """Derive path[...] variables from the scoped path.

    The path is taken relative to the parent of the repository root, so the
    first component is always the repository directory name. Each component
    is registered twice:

    - ``path[i]``: 0-based from the first component (``path[0]`` is the
      repository directory name)
    - ``path[-i]``: 1-based from the end (``path[-1]`` is the leaf)

    Args:
        path: Absolute, resolved path inside the repository
        git_root: Repository root directory

    Returns:
        Dictionary of path variables
    """
    parts = path.relative_to(git_root.parent).parts
    logger.info(f"Add path {path} to variables")

    variables: dict[str, str] = {}
    for index, part in enumerate(parts):
        variables[f"path[{index}]"] = part
        variables[f"path[{index - len(parts)}]"] = part
    return variables


def build_variables(
    *layers: Mapping[str, str], engine: Mapping[str, str] | None = None
) -> dict[str, str]:
    """Merge variable layers into a new variable map.

    Later layers override earlier ones. Entries of the user supplied layers
    that collide with engine variable names are dropped; the ``engine``
    mapping is applied last.

    Args:
        *layers: Variable mappings, lowest precedence first
        engine: Engine computed variables (version, tag, previous-*)

    Returns:
        Merged variable map
    """
    merged: dict[str, str] = {}
    for layer in layers:
        for name, value in layer.items():
            if name in ENGINE_VARIABLES:
                logger.warning(f"Ignoring variable '{name}': it is set by git-next-tag")
                continue
            merged[name] = value

    if engine:
        merged.update(engine)

    return merged
