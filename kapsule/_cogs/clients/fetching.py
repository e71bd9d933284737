from typing import List, Optional

from kapsule._cogs.clients import api
from kapsule._cogs.configs import configuration
from kapsule._cogs.helpers import typedefs
from kapsule._cogs.structs import bodies, regions


def get_url(region: regions.Region, *parts: str) -> str:
    return '/'.join(['/k8s/v1/regions', region, *parts])


async def read_cluster(
        *,
        region: regions.Region,
        cluster_id: str,
        settings: configuration.KapsuleSettings,
        logger: typedefs.Logger,
) -> bodies.RawCluster:
    rsp: bodies.RawCluster = await api.get(
        url=get_url(region, 'clusters', cluster_id),
        settings=settings,
        logger=logger,
    )
    return rsp


async def read_pool(
        *,
        region: regions.Region,
        pool_id: str,
        settings: configuration.KapsuleSettings,
        logger: typedefs.Logger,
) -> bodies.RawPool:
    rsp: bodies.RawPool = await api.get(
        url=get_url(region, 'pools', pool_id),
        settings=settings,
        logger=logger,
    )
    return rsp


async def list_pools(
        *,
        region: regions.Region,
        cluster_id: str,
        settings: configuration.KapsuleSettings,
        logger: typedefs.Logger,
) -> List[bodies.RawPool]:
    return [
        pool async for pool in api.iter_pages(
            url=get_url(region, 'clusters', cluster_id, 'pools'),
            key='pools',
            settings=settings,
            logger=logger,
        )
    ]


async def list_nodes(
        *,
        region: regions.Region,
        cluster_id: str,
        pool_id: Optional[str] = None,
        settings: configuration.KapsuleSettings,
        logger: typedefs.Logger,
) -> List[bodies.RawNode]:
    """
    List all nodes of a cluster, optionally of one pool only, from all pages.
    """
    return [
        node async for node in api.iter_pages(
            url=get_url(region, 'clusters', cluster_id, 'nodes'),
            key='nodes',
            params={'pool_id': pool_id} if pool_id else None,
            settings=settings,
            logger=logger,
        )
    ]


async def list_versions(
        *,
        region: regions.Region,
        settings: configuration.KapsuleSettings,
        logger: typedefs.Logger,
) -> List[bodies.RawVersion]:
    """
    List the catalog of the available Kubernetes versions, in the API's order.

    The API does not paginate the versions at the moment, but if it starts,
    all the pages are fetched anyway (see :func:`api.iter_pages`).
    """
    return [
        version async for version in api.iter_pages(
            url=get_url(region, 'versions'),
            key='versions',
            settings=settings,
            logger=logger,
        )
    ]


async def read_kubeconfig(
        *,
        region: regions.Region,
        cluster_id: str,
        settings: configuration.KapsuleSettings,
        logger: typedefs.Logger,
) -> bodies.RawKubeconfig:
    rsp: bodies.RawKubeconfig = await api.get(
        url=get_url(region, 'clusters', cluster_id, 'kubeconfig'),
        settings=settings,
        logger=logger,
    )
    return rsp
