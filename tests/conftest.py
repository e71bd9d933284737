import logging
import re

import pytest

from kapsule._cogs.configs.configuration import KapsuleSettings
from kapsule._cogs.structs.regions import Region
from kapsule._core.actions.loggers import ResourceLogger


@pytest.fixture()
def settings():
    return KapsuleSettings()


@pytest.fixture()
def region():
    return Region('fr-par')


@pytest.fixture()
def logger(region):
    return ResourceLogger(region=region, kind='cluster', id='cluster-id')


@pytest.fixture()
def hostname():
    return 'api.fake.scw.test'


@pytest.fixture()
def api_settings(settings, hostname):
    """ The settings of an API client pointing to the fake API server (see `aresponses`). """
    settings.networking.api_url = f'http://{hostname}'
    settings.networking.error_backoffs = []  # no retries unless the test wants them
    settings.credentials.secret_key = 'fake-secret-key'
    return settings


@pytest.fixture()
def assert_logs(caplog):
    """
    A function to assert the logs are present (by pattern).

    The listed message patterns MUST be present, in the order specified.
    Other unspecified messages can be present too.
    """
    def assert_logs_fn(patterns, prohibited=[], strict=False):
        __traceback_hide__ = True
        remaining_patterns = list(patterns)
        for message in caplog.messages:
            # The expected pattern is at position 0.
            # Looking-ahead: if one of the following patterns matches, while the
            # 0th does not, then the log message is missing, and we fail the test.
            for idx, pattern in enumerate(remaining_patterns):
                m = re.search(pattern, message)
                if m:
                    if idx == 0:
                        remaining_patterns[:1] = []
                        break  # out of `remaining_patterns` cycle
                    else:
                        skipped_patterns = remaining_patterns[:idx]
                        raise AssertionError(f"Few patterns were skipped: {skipped_patterns!r}")
                elif strict:
                    raise AssertionError(f"Unexpected log message: {message!r}")

            # Check that the prohibited patterns do not appear in any message.
            for pattern in prohibited:
                m = re.search(pattern, message)
                if m:
                    raise AssertionError(f"Prohibited log pattern found: {message!r} ~ {pattern!r}")

        # If all patterns have been matched in order, we are done.
        # if some are left, but the messages are over, then we fail.
        if remaining_patterns:
            raise AssertionError(f"Few patterns were missed: {remaining_patterns!r}")

    caplog.set_level(logging.DEBUG)
    return assert_logs_fn
