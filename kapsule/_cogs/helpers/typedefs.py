"""
Rudimentary type [re-]definitions for cross-versioned Python & mypy.

New mypy versions bring type-sheds with StdLib types defined as generics,
while the old Python runtime does not support the subscripted syntax.
Example: logging.LoggerAdapter.

This modules defines them in a reusable way. Plus it adds some common
plain type definitions used across the codebase (for convenience).
"""
import logging
from typing import TYPE_CHECKING, Any, Mapping, MutableMapping, Union

if TYPE_CHECKING:
    LoggerAdapter = logging.LoggerAdapter[Any]
else:
    LoggerAdapter = logging.LoggerAdapter

# As publicly exposed: we only promise that it is based on one of the built-in loggable classes.
Logger = Union[logging.Logger, LoggerAdapter]

# The generic attribute map of the configuration layer: one nested block, flattened.
Attributes = MutableMapping[str, Any]
RawAttributes = Mapping[str, Any]
