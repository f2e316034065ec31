import pytest
from click.testing import CliRunner

from netpol.graph.models import NamespaceNode, PodGroupNode, PolicyConfig, PortEntry, Protocol, RuleEdge


def make_pod_group(node_id, name=None, namespace="default", labels=None,
                   deny_ingress=False, deny_egress=False, **kwargs):
    return PodGroupNode(
        id=node_id,
        name=node_id if name is None else name,
        namespace=namespace,
        labels={"app": node_id} if labels is None else labels,
        policy_config=PolicyConfig(
            deny_ingress_by_default=deny_ingress,
            deny_egress_by_default=deny_egress,
        ),
        **kwargs,
    )


def make_rule(edge_id, source, target, *ports):
    """ports are (port, protocol) tuples; entry IDs are p1, p2, ..."""
    return RuleEdge(
        id=edge_id,
        source=source,
        target=target,
        ports=[
            PortEntry(id=f"p{i}", port=port, protocol=Protocol(protocol))
            for i, (port, protocol) in enumerate(ports, start=1)
        ],
    )


@pytest.fixture
def pod_group():
    return make_pod_group


@pytest.fixture
def rule():
    return make_rule


@pytest.fixture
def frontend():
    return make_pod_group("frontend", namespace="ns1", labels={"app": "frontend"})


@pytest.fixture
def backend():
    return make_pod_group("backend", namespace="ns1", labels={"app": "backend"})


@pytest.fixture
def other_namespace():
    return NamespaceNode(id="ns-other", name="other-ns")


@pytest.fixture
def snapshot_data():
    """Store payload in the editor's camelCase shape."""
    return {
        "nodes": [
            {
                "kind": "podGroup",
                "id": "frontend",
                "metadata": {"name": "frontend", "namespace": "ns1"},
                "labels": {"app": "frontend"},
                "policyConfig": {"denyIngressByDefault": False, "denyEgressByDefault": False},
            },
            {
                "kind": "podGroup",
                "id": "backend",
                "metadata": {"name": "backend", "namespace": "ns1"},
                "labels": {"app": "backend"},
                "policyConfig": {"denyIngressByDefault": True, "denyEgressByDefault": False},
            },
            {"kind": "namespace", "id": "ns-monitoring", "label": "monitoring"},
        ],
        "edges": [
            {
                "id": "edge-frontend-backend",
                "source": "frontend",
                "target": "backend",
                "data": {"ports": [{"id": "p1", "port": "8080", "protocol": "TCP"}]},
            },
        ],
    }


@pytest.fixture
def cli_runner():
    return CliRunner()
