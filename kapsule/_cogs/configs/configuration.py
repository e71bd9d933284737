"""
All configuration flags, options, settings to fine-tune the library.

All settings are grouped semantically just for convenience
(instead of a flat mega-object with all the values in it).

Some of the settings are flags, some are scalars, some are optional,
some are not (but all of them have reasonable defaults).

The waiting timeouts are fixed per call-site in the engines:
the callers of e.g. :func:`kapsule.wait_for_pool_ready` cannot pass them.
They are still settings, so that the tests and the CLI can shorten them.
"""
import dataclasses
from typing import Iterable, Optional

DEFAULT_API_URL = 'https://api.scaleway.com'
DEFAULT_REGION = 'fr-par'


@dataclasses.dataclass
class WaitingSettings:
    """
    Timeouts & intervals of polling the resources until they converge.

    All values are in seconds.
    """

    cluster_timeout: float = 10 * 60
    """
    How long to wait for a cluster to reach a stable status.
    """

    cluster_pool_timeout: float = 10 * 60
    """
    How long to wait for a cluster *and* its required pool to become stable.
    """

    cluster_deleted_timeout: float = 10 * 60
    """
    How long to wait for a cluster to disappear after its deletion.
    """

    pool_ready_timeout: float = 15 * 60
    """
    How long to wait for a pool to become ready (also: to disappear).

    Pools take longer than clusters, as they boot and register the nodes.
    """

    retry_interval: float = 5
    """
    How long to sleep between the fetches while the resource is converging.

    The same interval is used for all kinds of waiting. It is the interval
    between the polls of the "still converging" resources only: the transient
    API errors are retried by the API client (see :class:`NetworkingSettings`).
    """


@dataclasses.dataclass
class NetworkingSettings:

    api_url: str = DEFAULT_API_URL
    """
    The root of the Scaleway API. The Kapsule paths are appended to it.
    """

    request_timeout: Optional[float] = 5 * 60  # == aiohttp.client.DEFAULT_TIMEOUT
    """
    A timeout for all API requests (the whole request, from connect to read).
    """

    connect_timeout: Optional[float] = None
    """
    A timeout for connection establishing. If ``None``, the request timeout applies.
    """

    error_backoffs: Iterable[float] = (1, 1, 2, 3, 5, 8)
    """
    Backoff intervals in case of connection errors and server-side errors (5xx).

    The number of retries equals to the number of intervals. Client-side errors
    (4xx) are never retried: they are escalated to the caller immediately.

    To disable the retries (on your own risk), set it to ``[]`` or ``()``.
    """

    page_size: int = 100
    """
    How many items to request per page when listing the paginated resources.
    """


@dataclasses.dataclass
class CredentialsSettings:

    secret_key: Optional[str] = None
    """
    The API secret key, sent as ``X-Auth-Token``. Usually from ``SCW_SECRET_KEY``.
    """

    default_region: str = DEFAULT_REGION
    """
    The region to use when the resource ID is not regional (e.g. a bare UUID).
    """


@dataclasses.dataclass
class KapsuleSettings:
    waiting: WaitingSettings = dataclasses.field(default_factory=WaitingSettings)
    networking: NetworkingSettings = dataclasses.field(default_factory=NetworkingSettings)
    credentials: CredentialsSettings = dataclasses.field(default_factory=CredentialsSettings)
