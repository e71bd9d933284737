import pytest


@pytest.fixture()
def read_cluster(mocker):
    return mocker.patch('kapsule._cogs.clients.fetching.read_cluster')


@pytest.fixture()
def read_pool(mocker):
    return mocker.patch('kapsule._cogs.clients.fetching.read_pool')


@pytest.fixture()
def list_pools(mocker):
    return mocker.patch('kapsule._cogs.clients.fetching.list_pools')
