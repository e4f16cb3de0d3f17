"""git-next-tag - Next semantic version from git tags and conventional commits."""

from importlib.metadata import version

try:
    __version__ = version("git-next-tag")
except Exception:
    __version__ = "0.0.0-dev"
