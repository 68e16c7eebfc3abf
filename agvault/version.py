"""Version resolution from installed package metadata."""

from importlib.metadata import PackageNotFoundError, version as _package_version

try:
    __version__ = _package_version("agvault")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = ["__version__"]
