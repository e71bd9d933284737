import pytest

from kapsule._cogs.structs.kubeconfigs import parse_kubeconfig
from kapsule._core.actions.flattening import MalformedInputError, flatten_kubeconfig

KUBECONFIG = """\
apiVersion: v1
kind: Config
clusters:
- name: my-cluster
  cluster:
    certificate-authority-data: Q0EtREFUQQ==
    server: https://11111111-2222-3333-4444-555555555555.api.k8s.fr-par.scw.cloud:6443
contexts:
- name: admin@my-cluster
  context:
    cluster: my-cluster
    user: my-cluster-admin
current-context: admin@my-cluster
users:
- name: my-cluster-admin
  user:
    token: s3cr3t
"""


def test_connection_details():
    block = flatten_kubeconfig(parse_kubeconfig(KUBECONFIG))
    assert block == [{
        'config_file': KUBECONFIG,
        'host': 'https://11111111-2222-3333-4444-555555555555.api.k8s.fr-par.scw.cloud:6443',
        'cluster_ca_certificate': 'Q0EtREFUQQ==',
        'token': 's3cr3t',
    }]


@pytest.mark.parametrize('text', [
    pytest.param("apiVersion: v1\nusers: [{name: u, user: {token: t}}]\n", id='no-clusters'),
    pytest.param("apiVersion: v1\nclusters: [{name: c, cluster: {server: s}}]\n", id='no-users'),
])
def test_incomplete_kubeconfig(text):
    with pytest.raises(MalformedInputError):
        flatten_kubeconfig(parse_kubeconfig(text))
