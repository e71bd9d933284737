"""
Projections of the API objects to the flat attributes and back.

The configuration layer stores the nested blocks as lists of maps,
with at most one item in a list (an "optional block" convention).
So every flattening function returns a one-item list with a fresh map,
and every expanding function accepts a zero-or-one-item list.

All functions here are pure: no API calls, no logging, no mutations
of the inputs. Most of them are straightforward renames of the fields.
"""
import collections.abc
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from kapsule._cogs.helpers import typedefs
from kapsule._cogs.structs import bodies, kubeconfigs

Block = List[typedefs.Attributes]

# How the absent IP addresses are rendered by the API's client libraries. Treated as no address.
NO_ADDRESS = '<nil>'


class MalformedInputError(ValueError):
    pass


def flatten_autoscaler_config(cluster: bodies.RawCluster) -> Block:
    config = cluster.get('autoscaler_config') or {}

    # A 32-bit float in the API. Widened via text, so that 0.7 stays 0.7, not 0.699999988079071.
    try:
        threshold = float(f"{config.get('scale_down_utilization_threshold'):f}")
    except (TypeError, ValueError):
        return []  # should never happen; but better no block than a partial one.

    return [{
        'disable_scale_down': config.get('scale_down_disabled'),
        'scale_down_delay_after_add': config.get('scale_down_delay_after_add'),
        'scale_down_unneeded_time': config.get('scale_down_unneeded_time'),
        'estimator': config.get('estimator'),
        'expander': config.get('expander'),
        'ignore_daemonsets_utilization': config.get('ignore_daemonsets_utilization'),
        'balance_similar_node_groups': config.get('balance_similar_node_groups'),
        'expendable_pods_priority_cutoff': config.get('expendable_pods_priority_cutoff'),
        'scale_down_utilization_threshold': threshold,
        'max_graceful_termination_sec': config.get('max_graceful_termination_sec'),
    }]


def flatten_open_id_connect_config(cluster: bodies.RawCluster) -> Block:
    config = cluster.get('open_id_connect_config') or {}
    return [{
        'issuer_url': config.get('issuer_url'),
        'client_id': config.get('client_id'),
        'username_claim': config.get('username_claim'),
        'username_prefix': config.get('username_prefix'),
        'groups_claim': config.get('groups_claim'),
        'groups_prefix': config.get('groups_prefix'),
        'required_claim': config.get('required_claim'),
    }]


def flatten_auto_upgrade(cluster: bodies.RawCluster) -> Block:
    auto_upgrade = cluster.get('auto_upgrade') or {}
    window = auto_upgrade.get('maintenance_window') or {}
    return [{
        'enable': auto_upgrade.get('enabled'),
        'maintenance_window_start_hour': window.get('start_hour'),
        'maintenance_window_day': window.get('day'),
    }]


def flatten_pool_upgrade_policy(pool: bodies.RawPool) -> Block:
    """
    Flatten the pool's upgrade policy; an absent policy is an empty block.

    The block is never absent itself: the empty map means "use the defaults".
    """
    policy = pool.get('upgrade_policy')
    attrs: typedefs.Attributes = {}
    if policy is not None:
        attrs['max_surge'] = policy.get('max_surge')
        attrs['max_unavailable'] = policy.get('max_unavailable')
    return [attrs]


def flatten_nodes(nodes: Iterable[bodies.RawNode]) -> List[typedefs.Attributes]:
    """
    Convert the nodes to the maps, keeping the API's order.

    The IP addresses are omitted from the maps if the nodes have none
    (instead of having the keys with ``None``): e.g., the IPv6-less nodes.
    """
    result: List[typedefs.Attributes] = []
    for node in nodes:
        attrs: typedefs.Attributes = {
            'name': node.get('name'),
            'status': str(node.get('status')),
        }
        public_ip = _render_address(node.get('public_ip_v4'))
        if public_ip is not None:
            attrs['public_ip'] = public_ip
        public_ip_v6 = _render_address(node.get('public_ip_v6'))
        if public_ip_v6 is not None:
            attrs['public_ip_v6'] = public_ip_v6
        result.append(attrs)
    return result


def _render_address(address: Optional[object]) -> Optional[str]:
    if address is None:
        return None
    rendered = str(address)
    return rendered if rendered and rendered != NO_ADDRESS else None


def flatten_kubelet_args(args: Optional[Mapping[str, str]]) -> typedefs.Attributes:
    return {key: value for key, value in (args or {}).items()}


def expand_kubelet_args(args: Optional[typedefs.RawAttributes]) -> Dict[str, str]:
    if args is not None and not isinstance(args, collections.abc.Mapping):
        raise MalformedInputError(f"Kubelet args must be a mapping, got {args!r}.")
    kubelet_args: Dict[str, str] = {}
    for key, value in (args or {}).items():
        if not isinstance(key, str) or not isinstance(value, str):
            raise MalformedInputError(f"Kubelet args must be strings, got {key!r}={value!r}.")
        kubelet_args[key] = value
    return kubelet_args


def flatten_kubeconfig(kubeconfig: kubeconfigs.Kubeconfig) -> Block:
    """
    Extract the connection details of the cluster from its kubeconfig.

    Kapsule issues the kubeconfigs with exactly one cluster & one user.
    """
    if not kubeconfig['clusters'] or not kubeconfig['users']:
        raise MalformedInputError("The kubeconfig has no clusters or no users.")
    cluster = kubeconfig['clusters'][0]['cluster']
    user = kubeconfig['users'][0]['user']
    return [{
        'config_file': kubeconfig['raw'],
        'host': cluster['server'],
        'cluster_ca_certificate': cluster['certificate_authority_data'],
        'token': user['token'],
    }]


#
# The inverse projections: from the declared attributes to the API payloads.
#


def _single(block: Optional[Sequence[typedefs.RawAttributes]], name: str) -> Optional[typedefs.RawAttributes]:
    if not block:
        return None
    if len(block) > 1:
        raise MalformedInputError(f"The {name} block can be declared at most once, got {len(block)}.")
    return block[0] or {}


def expand_autoscaler_config(
        block: Optional[Sequence[typedefs.RawAttributes]],
) -> Optional[bodies.RawAutoscalerConfig]:
    attrs = _single(block, 'autoscaler_config')
    if attrs is None:
        return None
    config = bodies.RawAutoscalerConfig()
    renames = {'disable_scale_down': 'scale_down_disabled'}
    for key in ['disable_scale_down', 'scale_down_delay_after_add', 'scale_down_unneeded_time',
                'estimator', 'expander', 'ignore_daemonsets_utilization',
                'balance_similar_node_groups', 'expendable_pods_priority_cutoff',
                'scale_down_utilization_threshold', 'max_graceful_termination_sec']:
        if attrs.get(key) is not None:
            config[renames.get(key, key)] = attrs[key]  # type: ignore[literal-required]
    return config


def expand_open_id_connect_config(
        block: Optional[Sequence[typedefs.RawAttributes]],
) -> Optional[bodies.RawOpenIDConnectConfig]:
    attrs = _single(block, 'open_id_connect_config')
    if attrs is None:
        return None
    config = bodies.RawOpenIDConnectConfig()
    for key in ['issuer_url', 'client_id', 'username_claim', 'username_prefix',
                'groups_claim', 'groups_prefix', 'required_claim']:
        if attrs.get(key) is not None:
            config[key] = attrs[key]  # type: ignore[literal-required]
    return config


def expand_auto_upgrade(
        block: Optional[Sequence[typedefs.RawAttributes]],
) -> Optional[bodies.RawAutoUpgrade]:
    attrs = _single(block, 'auto_upgrade')
    if attrs is None:
        return None
    return bodies.RawAutoUpgrade(
        enabled=bool(attrs.get('enable')),
        maintenance_window=bodies.RawMaintenanceWindow(
            start_hour=attrs.get('maintenance_window_start_hour') or 0,
            day=attrs.get('maintenance_window_day') or 'any',
        ),
    )


def expand_pool_upgrade_policy(
        block: Optional[Sequence[typedefs.RawAttributes]],
) -> Optional[bodies.RawUpgradePolicy]:
    attrs = _single(block, 'upgrade_policy')
    if attrs is None:
        return None
    policy = bodies.RawUpgradePolicy()
    if attrs.get('max_surge') is not None:
        policy['max_surge'] = attrs['max_surge']
    if attrs.get('max_unavailable') is not None:
        policy['max_unavailable'] = attrs['max_unavailable']
    return policy
