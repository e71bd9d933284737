import functools
import logging

import click.testing
import pytest

from kapsule.cli import main


@pytest.fixture(autouse=True)
def _restore_logging():
    # The commands configure the logging globally, with the handlers bound to the runner's streams.
    root = logging.getLogger()
    original_level = root.level
    original_handlers = root.handlers[:]
    lowlevels = [logging.getLogger(name) for name in ['asyncio', 'aiohttp']]
    original_lowlevels = [(lowlevel.propagate, lowlevel.handlers[:]) for lowlevel in lowlevels]
    yield
    root.handlers[:] = original_handlers
    root.setLevel(original_level)
    for lowlevel, (propagate, handlers) in zip(lowlevels, original_lowlevels):
        lowlevel.propagate = propagate
        lowlevel.handlers[:] = handlers


@pytest.fixture()
def runner():
    runner = click.testing.CliRunner()
    return runner


@pytest.fixture()
def invoke(runner):
    env = {
        'SCW_SECRET_KEY': 'fake-secret-key',
        'SCW_DEFAULT_REGION': None,
        'SCW_API_URL': None,
    }
    return functools.partial(runner.invoke, main, env=env)
