import logging
from typing import Collection

import pytest

from kapsule._core.actions.loggers import LogFormat, ResourceFormatter, ResourceJsonFormatter, \
                                          ResourcePrefixingJsonFormatter, \
                                          ResourcePrefixingTextFormatter, ResourceTextFormatter, \
                                          configure, make_formatter


def _get_own_handlers(logger: logging.Logger) -> Collection[logging.Handler]:
    return [
        handler for handler in logger.handlers
        if isinstance(handler, logging.StreamHandler) and
           isinstance(handler.formatter, ResourceFormatter)
    ]


def test_own_formatter_is_used():
    configure()
    own_handlers = _get_own_handlers(logging.getLogger())
    assert len(own_handlers) == 1


def test_own_handler_is_replaced_on_reconfiguration():
    configure()
    configure(log_format=LogFormat.JSON)
    own_handlers = _get_own_handlers(logging.getLogger())
    assert len(own_handlers) == 1
    assert isinstance(own_handlers[0].formatter, ResourceJsonFormatter)


@pytest.mark.parametrize('log_format', [LogFormat.FULL, LogFormat.PLAIN])
def test_formatter_nonprefixed_text(log_format):
    configure(log_format=log_format, log_prefix=False)
    own_handlers = _get_own_handlers(logging.getLogger())
    assert type(own_handlers[0].formatter) is ResourceTextFormatter


@pytest.mark.parametrize('log_format', [LogFormat.FULL, LogFormat.PLAIN])
def test_formatter_prefixed_text(log_format):
    configure(log_format=log_format, log_prefix=True)
    own_handlers = _get_own_handlers(logging.getLogger())
    assert type(own_handlers[0].formatter) is ResourcePrefixingTextFormatter


def test_formatter_nonprefixed_json():
    configure(log_format=LogFormat.JSON, log_prefix=False)
    own_handlers = _get_own_handlers(logging.getLogger())
    assert type(own_handlers[0].formatter) is ResourceJsonFormatter


def test_formatter_prefixed_json():
    configure(log_format=LogFormat.JSON, log_prefix=True)
    own_handlers = _get_own_handlers(logging.getLogger())
    assert type(own_handlers[0].formatter) is ResourcePrefixingJsonFormatter


def test_json_has_no_prefix_by_default():
    assert type(make_formatter(log_format=LogFormat.JSON, log_prefix=None)) is ResourceJsonFormatter


def test_text_has_prefix_by_default():
    formatter = make_formatter(log_format=LogFormat.FULL, log_prefix=None)
    assert type(formatter) is ResourcePrefixingTextFormatter


def test_unsupported_format():
    with pytest.raises(ValueError):
        make_formatter(log_format='%(message)s')  # type: ignore


@pytest.mark.parametrize('kwargs, level', [
    (dict(), logging.INFO),
    (dict(verbose=True), logging.DEBUG),
    (dict(debug=True), logging.DEBUG),
    (dict(quiet=True), logging.WARNING),
])
def test_levels(kwargs, level):
    configure(**kwargs)
    assert logging.getLogger().level == level


def test_lowlevel_loggers_are_silenced():
    configure()
    assert not logging.getLogger('asyncio').propagate
    assert not logging.getLogger('aiohttp').propagate


def test_lowlevel_loggers_are_propagated_in_debug():
    configure(debug=True)
    assert logging.getLogger('asyncio').propagate
    assert logging.getLogger('aiohttp').propagate
