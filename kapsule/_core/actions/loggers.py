"""
Logging of the library and of the per-resource messages.

All messages about a specific cluster or pool go through a :class:`ResourceLogger`,
which carries the resource's reference (region, kind, id) in every log record.
The references are rendered as ``[region/id]`` prefixes in the text logs,
and as a separate JSON field in the JSON logs (for the log parsers).
"""
import copy
import enum
import logging
from typing import TYPE_CHECKING, Any, Dict, MutableMapping, Optional, TextIO, Tuple

# The JSON formatter moved between the modules in python-json-logger 3.1.
try:
    # python-json-logger>=3.1.0
    from pythonjsonlogger.core import RESERVED_ATTRS as _pjl_RESERVED_ATTRS
    from pythonjsonlogger.json import JsonFormatter as _pjl_JsonFormatter
except ImportError:
    # python-json-logger<3.1.0
    from pythonjsonlogger.jsonlogger import JsonFormatter as _pjl_JsonFormatter  # type: ignore
    from pythonjsonlogger.jsonlogger import RESERVED_ATTRS as _pjl_RESERVED_ATTRS  # type: ignore

from kapsule._cogs.helpers import typedefs
from kapsule._cogs.structs import regions

logger = logging.getLogger('kapsule.resources')

# A key for resource references in JSON logs, as seen by the log parsers.
DEFAULT_JSON_REFKEY = 'object'


class LogFormat(enum.Enum):
    """ Log formats, as chosen with `--log-format` in the CLI. """
    PLAIN = '%(message)s'
    FULL = '[%(asctime)s] %(name)-20.20s [%(levelname)-8.8s] %(message)s'
    JSON = '-json-'  # not used for formatting, only for detection


class ResourceFormatter(logging.Formatter):
    pass


class ResourceTextFormatter(ResourceFormatter, logging.Formatter):
    pass


class ResourceJsonFormatter(ResourceFormatter, _pjl_JsonFormatter):
    def __init__(
            self,
            *args: Any,
            refkey: Optional[str] = None,
            **kwargs: Any,
    ) -> None:
        # The resource reference is rendered under its own key, not as an extra field.
        reserved_attrs = set(kwargs.pop('reserved_attrs', _pjl_RESERVED_ATTRS))
        reserved_attrs |= {'kapsule_ref'}
        kwargs['reserved_attrs'] = reserved_attrs
        kwargs.setdefault('timestamp', True)
        super().__init__(*args, **kwargs)
        self._refkey: str = refkey or DEFAULT_JSON_REFKEY

    def add_fields(
            self,
            log_record: Dict[str, object],
            record: logging.LogRecord,
            message_dict: Dict[str, object],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        if self._refkey and hasattr(record, 'kapsule_ref'):
            log_record[self._refkey] = getattr(record, 'kapsule_ref')

        if 'severity' not in log_record:
            log_record['severity'] = (
                "debug" if record.levelno <= logging.DEBUG else
                "info" if record.levelno <= logging.INFO else
                "warn" if record.levelno <= logging.WARNING else
                "error" if record.levelno <= logging.ERROR else
                "fatal")


class ResourcePrefixingMixin(ResourceFormatter):
    def format(self, record: logging.LogRecord) -> str:
        if hasattr(record, 'kapsule_ref'):
            ref = getattr(record, 'kapsule_ref')
            region = ref.get('region', '')
            id = ref.get('id', '')
            prefix = f"[{region}/{id}]" if region else f"[{id}]"
            record = copy.copy(record)  # shallow
            record.msg = f"{prefix} {record.msg}"
        return super().format(record)


class ResourcePrefixingTextFormatter(ResourcePrefixingMixin, ResourceTextFormatter):
    pass


class ResourcePrefixingJsonFormatter(ResourcePrefixingMixin, ResourceJsonFormatter):
    pass


class ResourceLogger(typedefs.LoggerAdapter):
    """
    A logger/adapter to carry the resource identifiers for formatting.

    Constructed once per waited/projected resource, and passed down
    to the engines & clients as their ``logger``.
    """

    def __init__(self, *, region: regions.Region, kind: str, id: str) -> None:
        super().__init__(logger, dict(
            kapsule_ref=dict(
                region=region,
                kind=kind,
                id=id,
            ),
        ))

    def process(
            self,
            msg: str,
            kwargs: MutableMapping[str, Any],
    ) -> Tuple[str, MutableMapping[str, Any]]:
        # Keep the per-call extras (e.g. from the API client) next to the resource reference.
        kwargs["extra"] = dict(self.extra or {}, **kwargs.get('extra', {}))
        return msg, kwargs


# Used to identify and remove our own handlers on re-runs (e.g. in the CLI tests with Click's runner,
# which intercepts the stderr; the handlers of the previous runs can have their streams closed).
if TYPE_CHECKING:
    class _KapsuleStreamHandler(logging.StreamHandler[TextIO]):
        pass
else:
    class _KapsuleStreamHandler(logging.StreamHandler):
        pass


def configure(
        debug: Optional[bool] = None,
        verbose: Optional[bool] = None,
        quiet: Optional[bool] = None,
        log_format: LogFormat = LogFormat.FULL,
        log_prefix: Optional[bool] = False,
        log_refkey: Optional[str] = None,
) -> None:
    log_level = 'DEBUG' if debug or verbose else 'WARNING' if quiet else 'INFO'
    formatter = make_formatter(log_format=log_format, log_prefix=log_prefix, log_refkey=log_refkey)
    handler = _KapsuleStreamHandler()
    handler.setFormatter(formatter)
    root = logging.getLogger()
    root.handlers[:] = [h for h in root.handlers if not isinstance(h, _KapsuleStreamHandler)]
    root.addHandler(handler)
    root.setLevel(log_level)

    # The event loop & HTTP internals are too noisy for the CLI output, except when debugging.
    for name in ['asyncio', 'aiohttp']:
        lowlevel = logging.getLogger(name)
        lowlevel.propagate = bool(debug)
        if not debug:
            lowlevel.handlers[:] = [logging.NullHandler()]


def make_formatter(
        log_format: LogFormat = LogFormat.FULL,
        log_prefix: Optional[bool] = False,
        log_refkey: Optional[str] = None,
) -> ResourceFormatter:
    log_prefix = log_prefix if log_prefix is not None else bool(log_format is not LogFormat.JSON)
    if log_format is LogFormat.JSON:
        if log_prefix:
            return ResourcePrefixingJsonFormatter(refkey=log_refkey)
        else:
            return ResourceJsonFormatter(refkey=log_refkey)
    elif isinstance(log_format, LogFormat):
        if log_prefix:
            return ResourcePrefixingTextFormatter(log_format.value)
        else:
            return ResourceTextFormatter(log_format.value)
    else:
        raise ValueError(f"Unsupported log format: {log_format!r}")
