"""
All the structures coming from the Kapsule API as JSON objects.

The raw bodies are only typed (:class:`typing.TypedDict`), not wrapped:
the engines and projections access them as plain mappings, and the tests
can pass plain dicts. The fields are those of the API's v1 schema
that this library uses; the API sends more, and they are kept as is.

The statuses are enums of strings (``str``-based), so that they are equal
to the raw values in the bodies and render as such in the messages.
"""
import enum
from typing import List, Mapping, Optional

from typing_extensions import TypedDict


class ClusterStatus(str, enum.Enum):
    UNKNOWN = 'unknown'
    CREATING = 'creating'
    READY = 'ready'
    DELETING = 'deleting'
    DELETED = 'deleted'
    UPDATING = 'updating'
    LOCKED = 'locked'
    POOL_REQUIRED = 'pool_required'

    def __str__(self) -> str:
        return str(self.value)


class PoolStatus(str, enum.Enum):
    UNKNOWN = 'unknown'
    READY = 'ready'
    DELETING = 'deleting'
    DELETED = 'deleted'
    SCALING = 'scaling'
    WARNING = 'warning'
    LOCKED = 'locked'
    UPGRADING = 'upgrading'

    def __str__(self) -> str:
        return str(self.value)


class NodeStatus(str, enum.Enum):
    UNKNOWN = 'unknown'
    CREATING = 'creating'
    NOT_READY = 'not_ready'
    READY = 'ready'
    DELETING = 'deleting'
    DELETED = 'deleted'
    LOCKED = 'locked'
    REBOOTING = 'rebooting'
    CREATION_ERROR = 'creation_error'
    UPGRADING = 'upgrading'
    STARTING = 'starting'
    REGISTERING = 'registering'

    def __str__(self) -> str:
        return str(self.value)


class RawAutoscalerConfig(TypedDict, total=False):
    scale_down_disabled: bool
    scale_down_delay_after_add: str
    estimator: str
    expander: str
    ignore_daemonsets_utilization: bool
    balance_similar_node_groups: bool
    expendable_pods_priority_cutoff: int
    scale_down_unneeded_time: str
    scale_down_utilization_threshold: float
    max_graceful_termination_sec: int


class RawOpenIDConnectConfig(TypedDict, total=False):
    issuer_url: str
    client_id: str
    username_claim: str
    username_prefix: str
    groups_claim: List[str]
    groups_prefix: str
    required_claim: List[str]


class RawMaintenanceWindow(TypedDict, total=False):
    start_hour: int
    day: str


class RawAutoUpgrade(TypedDict, total=False):
    enabled: bool
    maintenance_window: RawMaintenanceWindow


class RawUpgradePolicy(TypedDict, total=False):
    max_unavailable: int
    max_surge: int


class RawCluster(TypedDict, total=False):
    id: str
    name: str
    status: str
    version: str
    region: str
    autoscaler_config: RawAutoscalerConfig
    auto_upgrade: RawAutoUpgrade
    open_id_connect_config: RawOpenIDConnectConfig


class RawPool(TypedDict, total=False):
    id: str
    cluster_id: str
    name: str
    status: str
    version: str
    region: str
    upgrade_policy: Optional[RawUpgradePolicy]
    kubelet_args: Mapping[str, str]


class RawNode(TypedDict, total=False):
    id: str
    pool_id: str
    cluster_id: str
    name: str
    status: str
    region: str
    public_ip_v4: Optional[str]
    public_ip_v6: Optional[str]


class RawVersion(TypedDict, total=False):
    name: str
    label: str
    region: str


class RawKubeconfig(TypedDict, total=False):
    name: str
    content_type: str
    content: str  # base64-encoded YAML
