"""
A typed view of the kubeconfig files as issued by Kapsule for its clusters.

Only the fields that Kapsule puts into its kubeconfigs are declared:
one cluster with its CA & server, one context, one user with a token.
Everything else (if present) is ignored.
"""
import base64
import binascii
import collections.abc
from typing import Any, List

import yaml
from typing_extensions import TypedDict


class MalformedKubeconfigError(ValueError):
    pass


class KubeconfigClusterInfo(TypedDict):
    certificate_authority_data: str
    server: str


class KubeconfigCluster(TypedDict):
    name: str
    cluster: KubeconfigClusterInfo


class KubeconfigContextInfo(TypedDict):
    cluster: str
    user: str


class KubeconfigContext(TypedDict):
    name: str
    context: KubeconfigContextInfo


class KubeconfigUserInfo(TypedDict):
    token: str


class KubeconfigUser(TypedDict):
    name: str
    user: KubeconfigUserInfo


class Kubeconfig(TypedDict):
    api_version: str
    kind: str
    clusters: List[KubeconfigCluster]
    contexts: List[KubeconfigContext]
    users: List[KubeconfigUser]
    raw: str  # the original YAML text, as stored in the configuration layer


def parse_kubeconfig(text: str) -> Kubeconfig:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise MalformedKubeconfigError(f"The kubeconfig is not a valid YAML: {e}") from e
    if not isinstance(data, collections.abc.Mapping):
        raise MalformedKubeconfigError("The kubeconfig is not a YAML mapping.")

    return Kubeconfig(
        api_version=str(data.get('apiVersion') or ''),
        kind=str(data.get('kind') or ''),
        clusters=[
            KubeconfigCluster(
                name=str(item.get('name') or ''),
                cluster=KubeconfigClusterInfo(
                    certificate_authority_data=str(_get(item, 'cluster', 'certificate-authority-data')),
                    server=str(_get(item, 'cluster', 'server')),
                ),
            )
            for item in _iter_items(data, 'clusters')
        ],
        contexts=[
            KubeconfigContext(
                name=str(item.get('name') or ''),
                context=KubeconfigContextInfo(
                    cluster=str(_get(item, 'context', 'cluster')),
                    user=str(_get(item, 'context', 'user')),
                ),
            )
            for item in _iter_items(data, 'contexts')
        ],
        users=[
            KubeconfigUser(
                name=str(item.get('name') or ''),
                user=KubeconfigUserInfo(
                    token=str(_get(item, 'user', 'token')),
                ),
            )
            for item in _iter_items(data, 'users')
        ],
        raw=text,
    )


def decode_kubeconfig(content: str) -> str:
    """ Decode the base64-encoded kubeconfig, as the API returns it. """
    try:
        return base64.b64decode(content, validate=True).decode('utf-8')
    except (binascii.Error, UnicodeDecodeError) as e:
        raise MalformedKubeconfigError(f"The kubeconfig content is not decodable: {e}") from e


def _iter_items(data: Any, key: str) -> List[Any]:
    items = data.get(key) or []
    if not isinstance(items, list):
        raise MalformedKubeconfigError(f"The kubeconfig's {key!r} is not a list.")
    return [item for item in items if isinstance(item, collections.abc.Mapping)]


def _get(item: Any, section: str, field: str) -> Any:
    content = item.get(section) or {}
    if not isinstance(content, collections.abc.Mapping):
        raise MalformedKubeconfigError(f"The kubeconfig's {section!r} is not a mapping.")
    value = content.get(field)
    return value if value is not None else ''
