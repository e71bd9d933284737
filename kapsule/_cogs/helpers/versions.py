"""
Detecting the library's own version.

The codebase does not contain the version directly, as it would require
code changes on every release. The version is taken from the installed
distribution's metadata, and is determined only once when the code is loaded.

It is used to self-identify in the API requests (the ``User-Agent`` header).
"""
from typing import Optional

version: Optional[str] = None

try:
    import importlib.metadata
except ImportError:
    pass
else:
    try:
        name, *_ = __name__.split('.')  # usually "kapsule", unless renamed/forked.
        version = importlib.metadata.version(name)
    except importlib.metadata.PackageNotFoundError:
        pass  # not installed, e.g. run from a source checkout.
