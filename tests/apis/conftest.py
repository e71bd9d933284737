from unittest.mock import AsyncMock

import aresponses as aresponses_lib
import pytest


@pytest.fixture()
async def aresponses():
    """ A fake API server for all the requests made via aiohttp. """
    async with aresponses_lib.ResponsesMockServer() as server:
        yield server


@pytest.fixture()
def resp_mocker():
    """
    A factory of server-side callbacks for `aresponses` with mocking/spying.

    The callbacks remember the requests as seen by the server, so that
    the tests could assert on the URLs, query params, and headers::

        def test_me(resp_mocker, aresponses, hostname):
            callback = resp_mocker(return_value=aiohttp.web.json_response({'a': 'b'}))
            aresponses.add(hostname, '/path', 'get', callback)
            do_something()
            assert callback.call_count == 1
            assert callback.call_args[0][0].query['page'] == '1'
    """
    def resp_maker(*args, **kwargs):
        return AsyncMock(*args, **kwargs)
    return resp_maker
