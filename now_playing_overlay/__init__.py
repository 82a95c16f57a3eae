"""Now Playing Overlay"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("now-playing-overlay")
except PackageNotFoundError:
    __version__ = "dev"
