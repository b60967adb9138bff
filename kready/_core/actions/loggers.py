"""
Logging of the per-object activities and the logging setup for the callers.

Every message about a specific object carries the object's reference
in the ``k8s_ref`` extra field. It is used for the ``[namespace/name]`` prefixes
in the text formats, and as a separate key in the JSON format.
"""
import copy
import enum
import logging
from typing import TYPE_CHECKING, Any, Dict, Mapping, MutableMapping, \
                   Optional, TextIO, Tuple, Type, Union

# The module layout of python-json-logger has changed in 3.1.0.
try:
    from pythonjsonlogger.core import RESERVED_ATTRS as _pjl_RESERVED_ATTRS
    from pythonjsonlogger.json import JsonFormatter as _pjl_JsonFormatter
except ImportError:
    from pythonjsonlogger.jsonlogger import JsonFormatter as _pjl_JsonFormatter  # type: ignore
    from pythonjsonlogger.jsonlogger import RESERVED_ATTRS as _pjl_RESERVED_ATTRS  # type: ignore

from kready._cogs.helpers import typedefs
from kready._cogs.structs import references

logger = logging.getLogger('kready.objects')

# The JSON key for the object references unless overridden by the callers.
DEFAULT_JSON_REFKEY = 'object'

# Severities as understood by the log collectors, from the lowest level up.
_SEVERITIES = [
    (logging.DEBUG, 'debug'),
    (logging.INFO, 'info'),
    (logging.WARNING, 'warn'),
    (logging.ERROR, 'error'),
]

# Third-party loggers that are too chatty unless debugging.
_SILENCED_LOGGERS = ['asyncio']


class LogFormat(enum.Enum):
    """ Log formats for `configure`. """
    PLAIN = '%(message)s'
    FULL = '[%(asctime)s] %(name)-20.20s [%(levelname)-8.8s] %(message)s'
    JSON = '-json-'  # a marker only, never used as a format string


class ObjectFormatter(logging.Formatter):
    """ A base class to recognise our own formatters among others. """


class ObjectTextFormatter(ObjectFormatter, logging.Formatter):
    pass


class ObjectJsonFormatter(ObjectFormatter, _pjl_JsonFormatter):
    """
    Render the records as JSON, with the object reference under its own key.
    """

    def __init__(
            self,
            *args: Any,
            refkey: Optional[str] = None,
            **kwargs: Any,
    ) -> None:
        # The raw reference is re-exposed under the refkey, so it is never rendered as is.
        reserved_attrs = set(kwargs.pop('reserved_attrs', _pjl_RESERVED_ATTRS)) | {'k8s_ref'}
        kwargs.setdefault('timestamp', True)
        super().__init__(*args, reserved_attrs=reserved_attrs, **kwargs)
        self._refkey: str = refkey or DEFAULT_JSON_REFKEY

    def add_fields(
            self,
            log_record: Dict[str, object],
            record: logging.LogRecord,
            message_dict: Dict[str, object],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        k8s_ref = getattr(record, 'k8s_ref', None)
        if k8s_ref is not None:
            log_record[self._refkey] = k8s_ref
        log_record.setdefault('severity', _get_severity(record.levelno))


class ObjectPrefixingMixin(ObjectFormatter):
    """
    Prepend the object's ``[namespace/name]`` to the messages about the objects.

    The record itself is shared by all handlers, so a copy of it is modified.
    """

    def format(self, record: logging.LogRecord) -> str:
        k8s_ref = getattr(record, 'k8s_ref', None)
        if k8s_ref is not None:
            record = copy.copy(record)
            record.msg = f"{_make_prefix(k8s_ref)} {record.msg}"
        return super().format(record)


class ObjectPrefixingTextFormatter(ObjectPrefixingMixin, ObjectTextFormatter):
    pass


class ObjectPrefixingJsonFormatter(ObjectPrefixingMixin, ObjectJsonFormatter):
    pass


class ObjectLogger(typedefs.LoggerAdapter):
    """
    A logger/adapter to carry the object identifiers for formatting.

    Constructed for every object operation of the resource controllers.
    The structure of the reference is the same as of an object reference
    in the API (``apiVersion``, ``kind``, ``namespace``, ``name``).
    """

    def __init__(self, *, ref: references.ObjectReference) -> None:
        k8s_ref = {
            'apiVersion': ref.resource.api_version,
            'kind': ref.resource.kind,
            'name': ref.name,
            'namespace': ref.namespace,
        }
        super().__init__(logger, {'k8s_ref': k8s_ref})

    def process(
            self,
            msg: str,
            kwargs: MutableMapping[str, Any],
    ) -> Tuple[str, MutableMapping[str, Any]]:
        # The per-message extras are added to the adapter's ones, not replaced by them.
        kwargs['extra'] = {**(self.extra or {}), **kwargs.get('extra', {})}
        return msg, kwargs


if TYPE_CHECKING:
    class _KreadyStreamHandler(logging.StreamHandler[TextIO]):
        pass
else:
    class _KreadyStreamHandler(logging.StreamHandler):
        pass


def configure(
        debug: Optional[bool] = None,
        verbose: Optional[bool] = None,
        quiet: Optional[bool] = None,
        log_format: Union[LogFormat, str] = LogFormat.FULL,
        log_prefix: Optional[bool] = None,
        log_refkey: Optional[str] = None,
) -> None:
    """
    Install one stream handler to the root logger, replacing our previous one.

    The handlers added by other parties are left intact.
    """
    if debug or verbose:
        log_level = logging.DEBUG
    elif quiet:
        log_level = logging.WARNING
    else:
        log_level = logging.INFO

    handler = _KreadyStreamHandler()
    handler.setFormatter(make_formatter(log_format=log_format,
                                        log_prefix=log_prefix,
                                        log_refkey=log_refkey))

    root_logger = logging.getLogger()
    for old_handler in root_logger.handlers[:]:
        if isinstance(old_handler, _KreadyStreamHandler):
            root_logger.removeHandler(old_handler)
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    # The null handlers prevent the last-resort printing of the non-propagated messages.
    for name in _SILENCED_LOGGERS:
        silenced_logger = logging.getLogger(name)
        silenced_logger.propagate = bool(debug)
        if not debug:
            silenced_logger.handlers[:] = [logging.NullHandler()]


def make_formatter(
        log_format: Union[LogFormat, str] = LogFormat.FULL,
        log_prefix: Optional[bool] = None,
        log_refkey: Optional[str] = None,
) -> ObjectFormatter:
    """
    Build a formatter for the format; JSON records are not prefixed by default.
    """
    is_json = log_format is LogFormat.JSON
    prefixed = log_prefix if log_prefix is not None else not is_json
    if is_json:
        json_cls = ObjectPrefixingJsonFormatter if prefixed else ObjectJsonFormatter
        return json_cls(refkey=log_refkey)

    fmt: str
    if isinstance(log_format, LogFormat):
        fmt = log_format.value
    elif isinstance(log_format, str):
        fmt = log_format
    else:
        raise ValueError(f"Unsupported log format: {log_format!r}")
    text_cls: Type[ObjectFormatter] = ObjectPrefixingTextFormatter if prefixed else ObjectTextFormatter
    return text_cls(fmt)


def _get_severity(levelno: int) -> str:
    for threshold, severity in _SEVERITIES:
        if levelno <= threshold:
            return severity
    return 'fatal'


def _make_prefix(k8s_ref: Mapping[str, Any]) -> str:
    namespace = k8s_ref.get('namespace')
    name = k8s_ref.get('name', '')
    return f"[{namespace}/{name}]" if namespace else f"[{name}]"
