import asyncio
import dataclasses
import functools
import signal
from typing import Any, Awaitable, Callable, Optional, TypeVar

import aiohttp
import click
import yaml

from kapsule._cogs.clients import auth, errors, fetching
from kapsule._cogs.configs import configuration
from kapsule._cogs.structs import kubeconfigs, regions
from kapsule._core.actions import flattening, loggers
from kapsule._core.engines import versioning, waiting

_T = TypeVar('_T')


@dataclasses.dataclass()
class CLIControls:
    """ Controls impossible to pass via CLI: for embedding & testing. """
    settings: Optional[configuration.KapsuleSettings] = None
    stopper: Optional[asyncio.Event] = None


class LogFormatParamType(click.Choice):

    def __init__(self) -> None:
        super().__init__(choices=[v.name.lower() for v in loggers.LogFormat])

    def convert(self, value: Any, param: Any, ctx: Any) -> loggers.LogFormat:
        name: str = super().convert(value, param, ctx)
        return loggers.LogFormat[name.upper()]


def logging_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """ A decorator to configure logging in all commands the same way."""
    @click.option('-v', '--verbose', is_flag=True)
    @click.option('-d', '--debug', is_flag=True)
    @click.option('-q', '--quiet', is_flag=True)
    @click.option('--log-format', type=LogFormatParamType(), default='full')
    @click.option('--log-refkey', type=str)
    @click.option('--log-prefix/--no-log-prefix', default=None)
    @functools.wraps(fn)  # to preserve other opts/args
    def wrapper(verbose: bool, quiet: bool, debug: bool,
                log_format: loggers.LogFormat = loggers.LogFormat.FULL,
                log_prefix: Optional[bool] = False,
                log_refkey: Optional[str] = None,
                *args: Any, **kwargs: Any) -> Any:
        loggers.configure(debug=debug, verbose=verbose, quiet=quiet,
                          log_format=log_format, log_refkey=log_refkey, log_prefix=log_prefix)
        return fn(*args, **kwargs)

    return wrapper


def api_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """ A decorator to configure the API access in all commands the same way."""
    @click.option('-r', '--region', type=str, envvar='SCW_DEFAULT_REGION',
                  default=configuration.DEFAULT_REGION, show_default=True)
    @click.option('--secret-key', type=str, envvar='SCW_SECRET_KEY')
    @click.option('--api-url', type=str, envvar='SCW_API_URL',
                  default=configuration.DEFAULT_API_URL, show_default=True)
    @click.make_pass_decorator(CLIControls, ensure=True)
    @functools.wraps(fn)  # to preserve other opts/args
    def wrapper(__controls: CLIControls,
                region: str, secret_key: Optional[str], api_url: str,
                *args: Any, **kwargs: Any) -> Any:
        settings = __controls.settings or configuration.KapsuleSettings()
        settings.credentials.default_region = region
        settings.credentials.secret_key = secret_key or settings.credentials.secret_key
        settings.networking.api_url = api_url
        return fn(*args, settings=settings, stopper=__controls.stopper, **kwargs)

    return wrapper


def run(
        fn: Callable[..., Awaitable[_T]],
        *,
        settings: configuration.KapsuleSettings,
        stopper: Optional[asyncio.Event],
) -> _T:
    """
    Run an API-using coroutine in a new event loop, stoppable with SIGINT/SIGTERM.

    The signals set the stopper, so that the waiting ends with a proper
    cancellation error rather than a stack trace of a cancelled task.
    """
    async def main() -> _T:
        actual_stopper = stopper if stopper is not None else asyncio.Event()
        loop = asyncio.get_running_loop()
        for signum in [signal.SIGINT, signal.SIGTERM]:
            try:
                loop.add_signal_handler(signum, actual_stopper.set)
            except (NotImplementedError, RuntimeError, ValueError):
                pass  # not supported: e.g. on Windows, or in a non-main thread.
        async with auth.connected(settings):
            return await fn(stopper=actual_stopper)

    try:
        return asyncio.run(main())
    except (waiting.ConvergenceError,
            versioning.VersionError,
            flattening.MalformedInputError,
            kubeconfigs.MalformedKubeconfigError,
            regions.MalformedIDError,
            errors.APIError,
            auth.LoginError) as e:
        raise click.ClickException(str(e)) from e
    except (aiohttp.ClientConnectionError, asyncio.TimeoutError) as e:
        # Retries are exhausted by now; str() of these is often empty.
        raise click.ClickException(f"The API is unreachable: {e!r}") from e


def parse_id(value: str, settings: configuration.KapsuleSettings) -> regions.RegionalID:
    try:
        return regions.parse_regional_id(value, default_region=settings.credentials.default_region)
    except regions.MalformedIDError as e:
        raise click.BadParameter(str(e)) from e


def dump(data: Any) -> None:
    click.echo(yaml.safe_dump(data, sort_keys=True, default_flow_style=False).rstrip())


@click.version_option(prog_name='kapsule')
@click.group(name='kapsule', context_settings=dict(
    auto_envvar_prefix='KAPSULE',
))
def main() -> None:
    pass


@main.command('resolve-version')
@logging_options
@api_options
@click.argument('minor')
def resolve_version(
        minor: str,
        settings: configuration.KapsuleSettings,
        stopper: Optional[asyncio.Event],
) -> None:
    """ Resolve a minor version (x.y) to the available full version (x.y.z). """
    region = regions.Region(settings.credentials.default_region)
    logger = loggers.ResourceLogger(region=region, kind='version', id=minor)
    version = run(
        lambda stopper: versioning.resolve_version(
            minor, region=region, settings=settings, logger=logger),
        settings=settings,
        stopper=stopper,
    )
    click.echo(version)


@main.group()
def wait() -> None:
    """ Wait until a cluster or a pool converges. """


@wait.command('cluster')
@logging_options
@api_options
@click.option('--with-pools', is_flag=True, help="Also wait for the cluster's pools.")
@click.argument('cluster_id')
def wait_cluster(
        cluster_id: str,
        with_pools: bool,
        settings: configuration.KapsuleSettings,
        stopper: Optional[asyncio.Event],
) -> None:
    """ Wait until the cluster is stable, and print its projected attributes. """
    ref = parse_id(cluster_id, settings)
    logger = loggers.ResourceLogger(region=ref.region, kind='cluster', id=ref.id)
    fn = waiting.wait_for_cluster_pool if with_pools else waiting.wait_for_cluster
    cluster = run(
        lambda stopper: fn(
            ref.id, region=ref.region, settings=settings, logger=logger, stopper=stopper),
        settings=settings,
        stopper=stopper,
    )
    dump({
        'id': str(ref),
        'status': cluster.get('status'),
        'version': cluster.get('version'),
        'autoscaler_config': flattening.flatten_autoscaler_config(cluster),
        'auto_upgrade': flattening.flatten_auto_upgrade(cluster),
        'open_id_connect_config': flattening.flatten_open_id_connect_config(cluster),
    })


@wait.command('pool')
@logging_options
@api_options
@click.argument('pool_id')
def wait_pool(
        pool_id: str,
        settings: configuration.KapsuleSettings,
        stopper: Optional[asyncio.Event],
) -> None:
    """ Wait until the pool is ready, and print its projected attributes. """
    ref = parse_id(pool_id, settings)
    logger = loggers.ResourceLogger(region=ref.region, kind='pool', id=ref.id)
    pool = run(
        lambda stopper: waiting.wait_for_pool_ready(
            ref.id, region=ref.region, settings=settings, logger=logger, stopper=stopper),
        settings=settings,
        stopper=stopper,
    )
    dump({
        'id': str(ref),
        'status': pool.get('status'),
        'upgrade_policy': flattening.flatten_pool_upgrade_policy(pool),
        'kubelet_args': flattening.flatten_kubelet_args(pool.get('kubelet_args')),
    })


@wait.command('deleted')
@logging_options
@api_options
@click.option('--pool', 'is_pool', is_flag=True, help="The ID is of a pool, not of a cluster.")
@click.argument('resource_id')
def wait_deleted(
        resource_id: str,
        is_pool: bool,
        settings: configuration.KapsuleSettings,
        stopper: Optional[asyncio.Event],
) -> None:
    """ Wait until the cluster (or the pool) is gone. """
    ref = parse_id(resource_id, settings)
    kind = 'pool' if is_pool else 'cluster'
    logger = loggers.ResourceLogger(region=ref.region, kind=kind, id=ref.id)
    fn = waiting.wait_for_pool_deleted if is_pool else waiting.wait_for_cluster_deleted
    run(
        lambda stopper: fn(
            ref.id, region=ref.region, settings=settings, logger=logger, stopper=stopper),
        settings=settings,
        stopper=stopper,
    )
    click.echo(f"The {kind} {ref} is deleted.")


@main.command()
@logging_options
@api_options
@click.argument('pool_id')
def nodes(
        pool_id: str,
        settings: configuration.KapsuleSettings,
        stopper: Optional[asyncio.Event],
) -> None:
    """ List the nodes of the pool with their statuses and addresses. """
    ref = parse_id(pool_id, settings)
    logger = loggers.ResourceLogger(region=ref.region, kind='pool', id=ref.id)

    async def fetch_nodes(stopper: asyncio.Event) -> Any:
        pool = await fetching.read_pool(
            region=ref.region, pool_id=ref.id, settings=settings, logger=logger)
        return await fetching.list_nodes(
            region=ref.region, cluster_id=pool['cluster_id'], pool_id=ref.id,
            settings=settings, logger=logger)

    dump(flattening.flatten_nodes(run(fetch_nodes, settings=settings, stopper=stopper)))


@main.command()
@logging_options
@api_options
@click.argument('cluster_id')
def kubeconfig(
        cluster_id: str,
        settings: configuration.KapsuleSettings,
        stopper: Optional[asyncio.Event],
) -> None:
    """ Print the API server & its CA of the cluster (from its kubeconfig). """
    ref = parse_id(cluster_id, settings)
    logger = loggers.ResourceLogger(region=ref.region, kind='cluster', id=ref.id)

    async def fetch_kubeconfig(stopper: asyncio.Event) -> Any:
        raw = await fetching.read_kubeconfig(
            region=ref.region, cluster_id=ref.id, settings=settings, logger=logger)
        parsed = kubeconfigs.parse_kubeconfig(kubeconfigs.decode_kubeconfig(raw.get('content', '')))
        return flattening.flatten_kubeconfig(parsed)

    [attrs] = run(fetch_kubeconfig, settings=settings, stopper=stopper)
    dump({'host': attrs['host'], 'cluster_ca_certificate': attrs['cluster_ca_certificate']})
