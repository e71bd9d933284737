import logging

import pytest

from kapsule._core.actions.loggers import ResourceFormatter


@pytest.fixture(autouse=True)
def _clear_own_handlers():
    root = logging.getLogger()
    lowlevels = {name: logging.getLogger(name) for name in ['asyncio', 'aiohttp']}
    original_level = root.level
    original_handlers = [
        handler for handler in root.handlers
        if not isinstance(handler.formatter, ResourceFormatter)
    ]
    original_lowlevels = {name: (lowlevel.propagate, lowlevel.handlers[:])
                          for name, lowlevel in lowlevels.items()}
    root.handlers[:] = original_handlers
    yield
    root.handlers[:] = original_handlers
    root.setLevel(original_level)
    for name, (propagate, handlers) in original_lowlevels.items():
        lowlevels[name].propagate = propagate
        lowlevels[name].handlers[:] = handlers
