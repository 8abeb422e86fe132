"""Top-level package for appnest."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("appnest")
except PackageNotFoundError:
    # Fallback for development environments where package isn't installed
    __version__ = "dev"
