"""
Detecting the package's own version.

The version is determined only once when the code is loaded,
and is used for the ``User-Agent`` header of the API requests.
"""
import importlib.metadata
from typing import Optional

version: Optional[str] = None

try:
    name, *_ = __name__.split('.')  # usually "kready", unless renamed/forked.
    version = importlib.metadata.version(name)
except importlib.metadata.PackageNotFoundError:
    pass  # running from a source tree without installation.
