"""Compile naming templates into tag globs and version extraction patterns."""

import re
from collections.abc import Mapping
from dataclasses import dataclass

from loguru import logger

from git_next_tag.config import ConfigError
from git_next_tag.variables import PLACEHOLDER_PATTERN
from git_next_tag.version import SEMVER_PATTERN

VERSION_PLACEHOLDER = "{version}"

# Named group capturing the embedded version
VERSION_GROUP = f"(?P<version>{SEMVER_PATTERN})"

# Later {version} occurrences must repeat the captured version
VERSION_BACKREFERENCE = "(?P=version)"

# Unresolved placeholders match anything, as little as possible
WILDCARD = ".*?"


class TemplateError(ConfigError):
    """Raised when a template cannot be compiled into a pattern."""

    pass


@dataclass(frozen=True)
class CompiledTemplate:
    """Tag glob and version extraction regex derived from a template."""

    template: str
    glob: str
    regex: re.Pattern[str]

    def extract_version(self, tag: str) -> str | None:
        """Return the version text embedded in a tag name.

        Args:
            tag: Tag name

        Returns:
            Captured version text, or None if the tag does not match or the
            template has no {version} placeholder
        """
        match = self.regex.fullmatch(tag)
        if match is None or "version" not in self.regex.groupindex:
            return None
        return match.group("version")


def tag_glob(template: str) -> str:
    """Build the glob used to list candidate tags.

    Args:
        template: Naming template

    Returns:
        Glob with every placeholder replaced by '*'
    """
    return PLACEHOLDER_PATTERN.sub("*", template)


def version_regex_source(template: str, variables: Mapping[str, str]) -> str:
    """Build the source of the version extraction regex.

    Variable values are escaped, so they only ever match literally. The
    literal text of the template is used as regex syntax.

    Args:
        template: Naming template
        variables: Known variables (without 'version')

    Returns:
        Regular expression source
    """
    seen_version = False

    def _substitute(match: re.Match[str]) -> str:
        nonlocal seen_version
        name = match.group(1)
        if name == "version":
            if seen_version:
                return VERSION_BACKREFERENCE
            seen_version = True
            return VERSION_GROUP
        if name in variables:
            return re.escape(variables[name])
        return WILDCARD

    return PLACEHOLDER_PATTERN.sub(_substitute, template)


def compile_template(
    template: str, variables: Mapping[str, str]
) -> CompiledTemplate:
    """Compile a naming template.

    Args:
        template: Naming template (e.g., 'v{version}-{env}')
        variables: Known variables used to resolve placeholders

    Returns:
        Compiled template with glob and regex

    Raises:
        TemplateError: If the resulting pattern is not a valid regular expression
    """
    source = version_regex_source(template, variables)
    logger.debug(f"Pattern used for version matching: {source}")

    try:
        regex = re.compile(source)
    except re.error as e:
        raise TemplateError(f"Invalid template '{template}': {e}") from e

    glob = tag_glob(template)
    logger.debug(f"Pattern used for tag matching: {glob}")

    if VERSION_PLACEHOLDER not in template:
        logger.warning(
            f"Template '{template}' has no {VERSION_PLACEHOLDER} placeholder, "
            "no tag will provide a version"
        )

    return CompiledTemplate(template=template, glob=glob, regex=regex)
