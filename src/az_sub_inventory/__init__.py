"""Azure subscription inventory."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("az-sub-inventory")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"
