"""
Waiting for the remote resources to converge to their expected states.

All mutations of clusters & pools in the Kapsule API are asynchronous:
the API accepts the request and returns immediately, while the resource
goes through the transitional statuses (creating, updating, scaling, etc.)
for minutes. The callers mutate the resources, then wait here until the result
is observable, and only then project the final state for the configuration.

There is one generic poller (:func:`wait_for`), and a few call-sites with
their specific acceptance rules & timeouts (the timeouts are not tunable
by the callers, only via the settings).

The poller stops in one of four ways:

* the resource reaches an accepted status -- the last snapshot is returned;
* the timeout is reached -- :class:`ConvergenceTimeoutError`;
* the caller's stopper is set -- :class:`ConvergenceCancelledError`;
* the fetching fails -- the error is escalated as is, with no retries.
  The transient network errors are retried by the API client, not here:
  here, only the "still converging" resources are re-fetched.

The only exception to the last rule is the deletion: if the resource is not
found, it is treated as the successful end of the waiting (absence is success).

Besides, the asyncio task of the waiting can be cancelled at any time;
the cancellation is escalated as is (it is not converted to our errors).
"""
import asyncio
from typing import Any, Awaitable, Callable, Collection, NamedTuple, Optional, TypeVar

from kapsule._cogs.aiokits import aiotime
from kapsule._cogs.clients import errors, fetching
from kapsule._cogs.configs import configuration
from kapsule._cogs.helpers import typedefs
from kapsule._cogs.structs import bodies, regions

_SnapshotT = TypeVar('_SnapshotT')

# Statuses at which the resources are considered to be done with their transitions.
CLUSTER_STABLE_STATUSES = frozenset({
    bodies.ClusterStatus.READY,
    bodies.ClusterStatus.LOCKED,
    bodies.ClusterStatus.DELETED,
    bodies.ClusterStatus.POOL_REQUIRED,
})
CLUSTER_POOLED_STATUSES = CLUSTER_STABLE_STATUSES - {bodies.ClusterStatus.POOL_REQUIRED}
POOL_STABLE_STATUSES = frozenset({
    bodies.PoolStatus.READY,
    bodies.PoolStatus.WARNING,
    bodies.PoolStatus.LOCKED,
    bodies.PoolStatus.DELETED,
})


class ConvergenceError(Exception):
    """ A base for all the failures of waiting (except the API errors). """

    def __init__(
            self,
            message: str,
            *,
            resource_id: str,
            observed: Optional[str],
            desired: Collection[str],
    ) -> None:
        super().__init__(message)
        self.resource_id = resource_id
        self.observed = observed
        self.desired = desired


class ConvergenceTimeoutError(ConvergenceError, TimeoutError):
    pass


class ConvergenceCancelledError(ConvergenceError):
    pass


class UnexpectedTerminalStateError(ConvergenceError):
    pass


def _render(statuses: Collection[str]) -> str:
    return '/'.join(sorted(str(status) for status in statuses))


async def wait_for(
        fetch: Callable[[], Awaitable[_SnapshotT]],
        *,
        accepted: Callable[[_SnapshotT], bool],
        observe: Callable[[_SnapshotT], Optional[str]],
        resource: str,
        resource_id: str,
        desired: Collection[str],
        timeout: float,
        retry_interval: float,
        stopper: Optional[asyncio.Event] = None,
        missing_ok: bool = False,
        logger: typedefs.Logger,
) -> Optional[_SnapshotT]:
    """
    Fetch the resource's snapshot again and again until it is accepted.

    ``observe`` extracts the status to be reported in logs & errors,
    ``desired`` is used only for reporting (``accepted`` decides on its own).

    The stopper is checked at every iteration boundary: before and after
    every fetch; the sleep itself is woken up by the stopper. Once set,
    the stopper prevails over the timeout, even if the deadline has been
    reached during a slow fetch.
    The sleeps never go beyond the deadline, so the timeout is precise
    up to the duration of one fetch.

    Returns the accepted snapshot, or ``None`` if the resource is not found
    and this is allowed (``missing_ok``).
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    observed: Optional[str] = None

    def check_stopper() -> None:
        if stopper is not None and stopper.is_set():
            logger.info(f"Stopped waiting for {resource} {resource_id} at status {observed}.")
            raise ConvergenceCancelledError(
                f"Waiting for {resource} {resource_id} was cancelled "
                f"at status {observed}, wants {_render(desired)}.",
                resource_id=resource_id, observed=observed, desired=desired)

    while True:
        check_stopper()

        try:
            snapshot = await fetch()
        except errors.APINotFoundError:
            if not missing_ok:
                raise
            logger.debug(f"The {resource} {resource_id} is not found; considered as gone.")
            return None

        observed = observe(snapshot)
        if accepted(snapshot):
            logger.debug(f"The {resource} {resource_id} has reached status {observed}.")
            return snapshot

        # A slow fetch can end past the deadline; a stopper set meanwhile prevails over the timeout.
        check_stopper()

        remaining = deadline - loop.time()
        if remaining <= 0:
            logger.error(f"Timed out waiting for {resource} {resource_id} at status {observed}.")
            raise ConvergenceTimeoutError(
                f"Timed out after {timeout}s waiting for {resource} {resource_id}: "
                f"it has status {observed}, wants {_render(desired)}.",
                resource_id=resource_id, observed=observed, desired=desired)

        delay = min(retry_interval, remaining)
        logger.debug(f"The {resource} {resource_id} has status {observed}; "
                     f"wants {_render(desired)}; re-checking in {delay}s.")
        await aiotime.sleep(delay, wakeup=stopper)  # if woken up, the stopper is checked above.


async def wait_for_cluster(
        cluster_id: str,
        *,
        region: regions.Region,
        settings: configuration.KapsuleSettings,
        logger: typedefs.Logger,
        stopper: Optional[asyncio.Event] = None,
) -> bodies.RawCluster:
    """
    Wait until the cluster leaves its transitional statuses.

    It does not matter which of the stable statuses is reached:
    the callers decide what to do with e.g. a locked cluster.
    """
    cluster = await wait_for(
        lambda: fetching.read_cluster(
            region=region, cluster_id=cluster_id, settings=settings, logger=logger),
        accepted=lambda cluster: cluster.get('status') in CLUSTER_STABLE_STATUSES,
        observe=lambda cluster: cluster.get('status'),
        resource='cluster',
        resource_id=cluster_id,
        desired=CLUSTER_STABLE_STATUSES,
        timeout=settings.waiting.cluster_timeout,
        retry_interval=settings.waiting.retry_interval,
        stopper=stopper,
        logger=logger,
    )
    assert cluster is not None  # only with missing_ok=True
    return cluster


class _PooledCluster(NamedTuple):
    cluster: bodies.RawCluster
    pools: Collection[bodies.RawPool]


async def wait_for_cluster_pool(
        cluster_id: str,
        *,
        region: regions.Region,
        settings: configuration.KapsuleSettings,
        logger: typedefs.Logger,
        stopper: Optional[asyncio.Event] = None,
) -> bodies.RawCluster:
    """
    Wait until the cluster and all its pools are stable.

    A ready cluster must have at least one pool, and all of them stable.
    A cluster in the ``pool_required`` status still waits for its required
    (default) pool. A locked or deleted cluster is final as is:
    its pools are neither listed nor awaited.
    """

    async def fetch() -> _PooledCluster:
        cluster = await fetching.read_cluster(
            region=region, cluster_id=cluster_id, settings=settings, logger=logger)
        if cluster.get('status') != bodies.ClusterStatus.READY:
            return _PooledCluster(cluster, [])  # do not list the pools needlessly.
        pools = await fetching.list_pools(
            region=region, cluster_id=cluster_id, settings=settings, logger=logger)
        return _PooledCluster(cluster, pools)

    def accepted(snapshot: _PooledCluster) -> bool:
        status = snapshot.cluster.get('status')
        if status in [bodies.ClusterStatus.LOCKED, bodies.ClusterStatus.DELETED]:
            return True
        return (
            status == bodies.ClusterStatus.READY and
            bool(snapshot.pools) and
            all(pool.get('status') in POOL_STABLE_STATUSES for pool in snapshot.pools)
        )

    def observe(snapshot: _PooledCluster) -> Optional[str]:
        status = snapshot.cluster.get('status')
        pool_statuses = ','.join(str(pool.get('status')) for pool in snapshot.pools)
        return f"{status} (pools: {pool_statuses or 'none'})"

    snapshot = await wait_for(
        fetch,
        accepted=accepted,
        observe=observe,
        resource='cluster',
        resource_id=cluster_id,
        desired=CLUSTER_POOLED_STATUSES,
        timeout=settings.waiting.cluster_pool_timeout,
        retry_interval=settings.waiting.retry_interval,
        stopper=stopper,
        logger=logger,
    )
    assert snapshot is not None  # only with missing_ok=True
    return snapshot.cluster


async def wait_for_cluster_deleted(
        cluster_id: str,
        *,
        region: regions.Region,
        settings: configuration.KapsuleSettings,
        logger: typedefs.Logger,
        stopper: Optional[asyncio.Event] = None,
) -> None:
    """
    Wait until the cluster is gone: either not found, or in the deleted status.

    Any other stable status means that the deletion did not happen
    (e.g. the cluster got locked meanwhile), and this is an error.
    """
    cluster = await wait_for(
        lambda: fetching.read_cluster(
            region=region, cluster_id=cluster_id, settings=settings, logger=logger),
        accepted=lambda cluster: cluster.get('status') in CLUSTER_STABLE_STATUSES,
        observe=lambda cluster: cluster.get('status'),
        resource='cluster',
        resource_id=cluster_id,
        desired=[bodies.ClusterStatus.DELETED],
        timeout=settings.waiting.cluster_deleted_timeout,
        retry_interval=settings.waiting.retry_interval,
        stopper=stopper,
        missing_ok=True,
        logger=logger,
    )
    _check_deleted(cluster, 'cluster', cluster_id, bodies.ClusterStatus.DELETED, logger=logger)


async def wait_for_pool_ready(
        pool_id: str,
        *,
        region: regions.Region,
        settings: configuration.KapsuleSettings,
        logger: typedefs.Logger,
        stopper: Optional[asyncio.Event] = None,
) -> bodies.RawPool:
    """
    Wait until the pool is ready; fail if it is stable in any other status.
    """
    pool = await wait_for(
        lambda: fetching.read_pool(
            region=region, pool_id=pool_id, settings=settings, logger=logger),
        accepted=lambda pool: pool.get('status') in POOL_STABLE_STATUSES,
        observe=lambda pool: pool.get('status'),
        resource='pool',
        resource_id=pool_id,
        desired=[bodies.PoolStatus.READY],
        timeout=settings.waiting.pool_ready_timeout,
        retry_interval=settings.waiting.retry_interval,
        stopper=stopper,
        logger=logger,
    )
    assert pool is not None  # only with missing_ok=True

    status = pool.get('status')
    if status != bodies.PoolStatus.READY:
        logger.error(f"The pool {pool_id} has settled at status {status}, not ready.")
        raise UnexpectedTerminalStateError(
            f"The pool {pool_id} has status {status}, wants {bodies.PoolStatus.READY}.",
            resource_id=pool_id, observed=status, desired=[bodies.PoolStatus.READY])
    return pool


async def wait_for_pool_deleted(
        pool_id: str,
        *,
        region: regions.Region,
        settings: configuration.KapsuleSettings,
        logger: typedefs.Logger,
        stopper: Optional[asyncio.Event] = None,
) -> None:
    """
    Wait until the pool is gone: either not found, or in the deleted status.
    """
    pool = await wait_for(
        lambda: fetching.read_pool(
            region=region, pool_id=pool_id, settings=settings, logger=logger),
        accepted=lambda pool: pool.get('status') in POOL_STABLE_STATUSES,
        observe=lambda pool: pool.get('status'),
        resource='pool',
        resource_id=pool_id,
        desired=[bodies.PoolStatus.DELETED],
        timeout=settings.waiting.pool_ready_timeout,
        retry_interval=settings.waiting.retry_interval,
        stopper=stopper,
        missing_ok=True,
        logger=logger,
    )
    _check_deleted(pool, 'pool', pool_id, bodies.PoolStatus.DELETED, logger=logger)


def _check_deleted(
        snapshot: Optional[Any],
        resource: str,
        resource_id: str,
        deleted: str,
        *,
        logger: typedefs.Logger,
) -> None:
    if snapshot is None:
        return
    status = snapshot.get('status')
    if status != deleted:
        logger.error(f"The {resource} {resource_id} has settled at status {status}, not deleted.")
        raise UnexpectedTerminalStateError(
            f"The {resource} {resource_id} has status {status}, wants {deleted}.",
            resource_id=resource_id, observed=status, desired=[deleted])
