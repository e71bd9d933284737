import pytest

from kapsule._cogs.clients.errors import APINotFoundError
from kapsule._core.engines.waiting import ConvergenceTimeoutError, UnexpectedTerminalStateError, \
                                          wait_for_pool_deleted, wait_for_pool_ready

pytestmark = pytest.mark.looptime


def pool(status):
    return {'id': 'pid', 'cluster_id': 'cid', 'status': status}


async def test_pool_scaled_and_ready(looptime, settings, region, logger, read_pool):
    read_pool.side_effect = [pool('scaling'), pool('scaling'), pool('ready')]
    result = await wait_for_pool_ready('pid', region=region, settings=settings, logger=logger)
    assert result == pool('ready')
    assert looptime == 2 * settings.waiting.retry_interval
    assert read_pool.call_args.kwargs['pool_id'] == 'pid'


@pytest.mark.parametrize('status', ['warning', 'locked', 'deleted'])
async def test_pool_stable_but_not_ready(settings, region, logger, read_pool, status):
    read_pool.side_effect = [pool('upgrading'), pool(status)]
    with pytest.raises(UnexpectedTerminalStateError) as err:
        await wait_for_pool_ready('pid', region=region, settings=settings, logger=logger)
    assert err.value.resource_id == 'pid'
    assert err.value.observed == status
    assert str(err.value) == f"The pool pid has status {status}, wants ready."


async def test_pool_timeout_is_longer_than_for_clusters(looptime, settings, region, logger, read_pool):
    read_pool.return_value = pool('scaling')
    with pytest.raises(ConvergenceTimeoutError):
        await wait_for_pool_ready('pid', region=region, settings=settings, logger=logger)
    assert looptime == 15 * 60


async def test_pool_not_found_is_an_error(settings, region, logger, read_pool):
    read_pool.side_effect = APINotFoundError(None, status=404)
    with pytest.raises(APINotFoundError):
        await wait_for_pool_ready('pid', region=region, settings=settings, logger=logger)


async def test_pool_deleted_when_not_found(settings, region, logger, read_pool):
    read_pool.side_effect = [pool('deleting'), APINotFoundError(None, status=404)]
    result = await wait_for_pool_deleted('pid', region=region, settings=settings, logger=logger)
    assert result is None


async def test_pool_not_deleted_but_ready(settings, region, logger, read_pool):
    read_pool.side_effect = [pool('deleting'), pool('ready')]
    with pytest.raises(UnexpectedTerminalStateError) as err:
        await wait_for_pool_deleted('pid', region=region, settings=settings, logger=logger)
    assert err.value.observed == 'ready'
    assert list(err.value.desired) == ['deleted']
