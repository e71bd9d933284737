"""
The main Kapsule module for all the exported functions & classes.
"""
# isort: skip_file

# Unlike all other places, where we import other modules and refer
# the functions via the modules, this is the library's top-level interface,
# as it is seen by the users. So, we export the individual functions.

from kapsule._cogs.clients.auth import (
    APIContext,
    LoginError,
    connected,
)
from kapsule._cogs.clients.errors import (
    APIError,
    APIClientError,
    APIServerError,
    APIUnauthorizedError,
    APIForbiddenError,
    APINotFoundError,
    APIConflictError,
)
from kapsule._cogs.clients.fetching import (
    read_cluster,
    read_pool,
    list_pools,
    list_nodes,
    list_versions,
    read_kubeconfig,
)
from kapsule._cogs.configs.configuration import (
    KapsuleSettings,
    WaitingSettings,
    NetworkingSettings,
    CredentialsSettings,
)
from kapsule._cogs.helpers.typedefs import (
    Logger,
    Attributes,
)
from kapsule._cogs.helpers.versions import (
    version as __version__,
)
from kapsule._cogs.structs.bodies import (
    ClusterStatus,
    PoolStatus,
    NodeStatus,
    RawCluster,
    RawPool,
    RawNode,
    RawVersion,
    RawAutoscalerConfig,
    RawOpenIDConnectConfig,
    RawAutoUpgrade,
    RawUpgradePolicy,
)
from kapsule._cogs.structs.kubeconfigs import (
    Kubeconfig,
    MalformedKubeconfigError,
    parse_kubeconfig,
    decode_kubeconfig,
)
from kapsule._cogs.structs.regions import (
    Region,
    RegionalID,
    MalformedIDError,
    parse_regional_id,
)
from kapsule._core.actions.flattening import (
    Block,
    MalformedInputError,
    flatten_autoscaler_config,
    flatten_open_id_connect_config,
    flatten_auto_upgrade,
    flatten_pool_upgrade_policy,
    flatten_nodes,
    flatten_kubelet_args,
    flatten_kubeconfig,
    expand_kubelet_args,
    expand_autoscaler_config,
    expand_open_id_connect_config,
    expand_auto_upgrade,
    expand_pool_upgrade_policy,
)
from kapsule._core.actions.loggers import (
    LogFormat,
    ResourceLogger,
    configure as configure_logging,
)
from kapsule._core.engines.versioning import (
    VersionError,
    MalformedVersionError,
    MalformedUpstreamVersionError,
    VersionNotFoundError,
    resolve_version,
    get_minor_version,
)
from kapsule._core.engines.waiting import (
    ConvergenceError,
    ConvergenceTimeoutError,
    ConvergenceCancelledError,
    UnexpectedTerminalStateError,
    wait_for,
    wait_for_cluster,
    wait_for_cluster_pool,
    wait_for_cluster_deleted,
    wait_for_pool_ready,
    wait_for_pool_deleted,
)

__all__ = [
    'APIContext', 'LoginError', 'connected',
    'APIError', 'APIClientError', 'APIServerError',
    'APIUnauthorizedError', 'APIForbiddenError', 'APINotFoundError', 'APIConflictError',
    'read_cluster', 'read_pool', 'list_pools', 'list_nodes', 'list_versions', 'read_kubeconfig',
    'KapsuleSettings', 'WaitingSettings', 'NetworkingSettings', 'CredentialsSettings',
    'Logger', 'Attributes',
    'ClusterStatus', 'PoolStatus', 'NodeStatus',
    'RawCluster', 'RawPool', 'RawNode', 'RawVersion',
    'RawAutoscalerConfig', 'RawOpenIDConnectConfig', 'RawAutoUpgrade', 'RawUpgradePolicy',
    'Kubeconfig', 'MalformedKubeconfigError', 'parse_kubeconfig', 'decode_kubeconfig',
    'Region', 'RegionalID', 'MalformedIDError', 'parse_regional_id',
    'Block', 'MalformedInputError',
    'flatten_autoscaler_config', 'flatten_open_id_connect_config', 'flatten_auto_upgrade',
    'flatten_pool_upgrade_policy', 'flatten_nodes', 'flatten_kubelet_args', 'flatten_kubeconfig',
    'expand_kubelet_args', 'expand_autoscaler_config', 'expand_open_id_connect_config',
    'expand_auto_upgrade', 'expand_pool_upgrade_policy',
    'LogFormat', 'ResourceLogger', 'configure_logging',
    'VersionError', 'MalformedVersionError', 'MalformedUpstreamVersionError',
    'VersionNotFoundError', 'resolve_version', 'get_minor_version',
    'ConvergenceError', 'ConvergenceTimeoutError', 'ConvergenceCancelledError',
    'UnexpectedTerminalStateError',
    'wait_for', 'wait_for_cluster', 'wait_for_cluster_pool', 'wait_for_cluster_deleted',
    'wait_for_pool_ready', 'wait_for_pool_deleted',
]
