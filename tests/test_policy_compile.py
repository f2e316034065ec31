"""
Unit tests for the graph-to-NetworkPolicy compiler.

Covers refusal cases, default-deny policy types, ingress/egress rule
construction, cross-namespace peers and port mapping.
"""
import pytest

from netpol.graph.models import NamespaceNode, PortEntry, Protocol, RuleEdge
from netpol.policy.compile import NetworkPolicyCompiler, compile_policy, map_port, map_ports, resolve_peer
from netpol.policy.models import NetworkPolicyPort
from netpol.validation import Severity, validate_graph
from tests.conftest import make_pod_group, make_rule


def entry(port, protocol="TCP"):
    return PortEntry(id="p1", port=port, protocol=Protocol(protocol))


class TestCompileRefusal:
    """Targets that cannot anchor a policy yield None."""

    def test_unknown_target(self, backend):
        assert compile_policy("missing", [backend], []) is None

    def test_namespace_target(self, other_namespace):
        assert compile_policy("ns-other", [other_namespace], []) is None

    def test_empty_namespace(self):
        node = make_pod_group("pg1", namespace="")
        assert compile_policy("pg1", [node], []) is None


class TestPolicySkeleton:
    """Metadata, pod selector and policy types."""

    def test_basic_policy_without_rules(self):
        node = make_pod_group("pg1", name="frontend", namespace="app-ns", labels={"app": "frontend", "tier": "web"})
        policy = compile_policy("pg1", [node], [])

        assert policy.to_manifest() == {
            "apiVersion": "networking.k8s.io/v1",
            "kind": "NetworkPolicy",
            "metadata": {"name": "netpol-frontend", "namespace": "app-ns"},
            "spec": {"podSelector": {"matchLabels": {"app": "frontend", "tier": "web"}}},
        }

    def test_name_falls_back_to_id_suffix(self):
        node = make_pod_group("node-abcdef123456", name="")
        policy = compile_policy("node-abcdef123456", [node], [])
        assert policy.metadata.name == "netpol-123456"

    def test_name_prefix_is_configurable(self, backend):
        policy = NetworkPolicyCompiler(name_prefix="np-").compile("backend", [backend], [])
        assert policy.metadata.name == "np-backend"

    def test_empty_labels_still_compile(self):
        node = make_pod_group("pg1", labels={})
        issues = validate_graph([node], [])
        policy = compile_policy("pg1", [node], [])

        assert [(i.severity, i.field_key) for i in issues] == [(Severity.WARNING, "labels")]
        assert policy.to_manifest()["spec"]["podSelector"] == {"matchLabels": {}}

    def test_labels_are_copied(self, backend):
        policy = compile_policy("backend", [backend], [])
        policy.spec.pod_selector.match_labels["extra"] = "x"
        assert "extra" not in backend.labels

    def test_scenario_a_default_deny_both(self):
        node = make_pod_group(
            "backend", namespace="default", labels={"tier": "backend"}, deny_ingress=True, deny_egress=True,
        )
        spec = compile_policy("backend", [node], []).to_manifest()["spec"]

        assert spec["policyTypes"] == ["Egress", "Ingress"]
        assert spec["ingress"] == []
        assert spec["egress"] == []

    def test_deny_ingress_only(self, backend):
        node = make_pod_group("backend", deny_ingress=True)
        spec = compile_policy("backend", [node], []).to_manifest()["spec"]

        assert spec["policyTypes"] == ["Ingress"]
        assert spec["ingress"] == []
        assert "egress" not in spec

    def test_deny_flag_with_rules_keeps_rules(self, frontend):
        node = make_pod_group("backend", namespace="ns1", deny_ingress=True)
        edge = make_rule("e1", "frontend", "backend")
        spec = compile_policy("backend", [frontend, node], [edge]).to_manifest()["spec"]

        assert len(spec["ingress"]) == 1
        assert spec["policyTypes"] == ["Ingress"]


class TestIngressEgressRules:
    """Rules generated from incident rule edges."""

    def test_scenario_b_same_namespace_ingress(self, frontend, backend):
        edge = make_rule("e1", "frontend", "backend", ("8080", "TCP"))
        spec = compile_policy("backend", [frontend, backend], [edge]).to_manifest()["spec"]

        assert spec["ingress"] == [{
            "from": [{"podSelector": {"matchLabels": {"app": "frontend"}}}],
            "ports": [{"protocol": "TCP", "port": 8080}],
        }]
        assert spec["policyTypes"] == ["Ingress"]
        assert "egress" not in spec

    def test_scenario_c_cross_namespace_peer(self, backend):
        frontend = make_pod_group("frontend", namespace="ns2", labels={"app": "frontend"})
        edge = make_rule("e1", "frontend", "backend", ("8080", "TCP"))
        spec = compile_policy("backend", [frontend, backend], [edge]).to_manifest()["spec"]

        peer = spec["ingress"][0]["from"][0]
        assert peer["podSelector"] == {"matchLabels": {"app": "frontend"}}
        assert peer["namespaceSelector"]["matchLabels"]["kubernetes.io/metadata.name"] == "ns2"

    def test_egress_uses_to(self, frontend, backend):
        edge = make_rule("e1", "frontend", "backend", ("5432", "TCP"))
        spec = compile_policy("frontend", [frontend, backend], [edge]).to_manifest()["spec"]

        assert spec["egress"] == [{
            "to": [{"podSelector": {"matchLabels": {"app": "backend"}}}],
            "ports": [{"protocol": "TCP", "port": 5432}],
        }]
        assert spec["policyTypes"] == ["Egress"]

    def test_namespace_peer(self, backend, other_namespace):
        edge = make_rule("e1", "ns-other", "backend")
        spec = compile_policy("backend", [backend, other_namespace], [edge]).to_manifest()["spec"]

        assert spec["ingress"] == [{
            "from": [{"namespaceSelector": {"matchLabels": {"kubernetes.io/metadata.name": "other-ns"}}}],
        }]

    def test_one_rule_per_edge(self, frontend, backend):
        edges = [
            make_rule("e1", "frontend", "backend", ("80", "TCP")),
            make_rule("e2", "frontend", "backend", ("443", "TCP")),
        ]
        spec = compile_policy("backend", [frontend, backend], edges).to_manifest()["spec"]

        assert [rule["ports"] for rule in spec["ingress"]] == [
            [{"protocol": "TCP", "port": 80}],
            [{"protocol": "TCP", "port": 443}],
        ]

    def test_both_directions(self, frontend, backend):
        db = make_pod_group("db", namespace="ns1")
        edges = [make_rule("e1", "frontend", "backend"), make_rule("e2", "backend", "db", ("5432", "TCP"))]
        spec = compile_policy("backend", [frontend, backend, db], edges).to_manifest()["spec"]

        assert spec["policyTypes"] == ["Egress", "Ingress"]
        assert list(spec) == ["podSelector", "policyTypes", "ingress", "egress"]

    def test_rule_without_ports_allows_all_ports(self, frontend, backend):
        edge = make_rule("e1", "frontend", "backend")
        rule = compile_policy("backend", [frontend, backend], [edge]).to_manifest()["spec"]["ingress"][0]
        assert "ports" not in rule

    def test_scenario_e_dangling_edge_is_skipped(self, frontend, backend):
        edges = [make_rule("e1", "frontend", "backend"), make_rule("e2", "ghost", "backend")]
        issues = validate_graph([frontend, backend], edges)
        spec = compile_policy("backend", [frontend, backend], edges).to_manifest()["spec"]

        assert [(i.element_id, i.severity) for i in issues] == [("e2", Severity.ERROR)]
        assert len(spec["ingress"]) == 1

    def test_dangling_edge_on_other_target_ignored(self, frontend, backend):
        edge = make_rule("e1", "frontend", "nowhere")
        policy = compile_policy("backend", [frontend, backend], [edge])
        assert policy.spec.ingress is None
        assert policy.spec.policy_types is None

    def test_unnamed_namespace_peer_is_skipped(self, backend):
        ns = NamespaceNode(id="ns-blank")
        edge = make_rule("e1", "ns-blank", "backend")
        policy = compile_policy("backend", [backend, ns], [edge])
        assert policy.spec.ingress is None

    def test_non_rule_edges_ignored(self, frontend, backend):
        edge = RuleEdge(id="e1", source="frontend", target="backend", kind="annotation")
        assert compile_policy("backend", [frontend, backend], [edge]).spec.ingress is None

    def test_does_not_mutate_snapshot(self, frontend, backend):
        edges = [make_rule("e1", "frontend", "backend", ("8080", "TCP"))]
        before = [n.model_dump() for n in (frontend, backend)], [e.model_dump() for e in edges]
        compile_policy("backend", [frontend, backend], edges)
        after = [n.model_dump() for n in (frontend, backend)], [e.model_dump() for e in edges]
        assert before == after


class TestResolvePeer:
    """Peer resolution skip policy."""

    def test_same_namespace_pod_group(self, frontend):
        peer = resolve_peer(frontend, "ns1")
        assert peer.namespace_selector is None
        assert peer.pod_selector.match_labels == {"app": "frontend"}

    def test_pod_group_without_namespace_has_no_namespace_selector(self):
        peer = resolve_peer(make_pod_group("pg", namespace=""), "ns1")
        assert peer.namespace_selector is None

    def test_unnamed_namespace(self):
        assert resolve_peer(NamespaceNode(id="ns"), "ns1") is None

    def test_unknown_node_kind(self):
        assert resolve_peer(object(), "ns1") is None


class TestMapPort:
    """Port entry mapping."""

    @pytest.mark.parametrize("port,protocol,expected", [
        ("80", "TCP", {"protocol": "TCP", "port": 80}),
        ("53", "UDP", {"protocol": "UDP", "port": 53}),
        ("http", "TCP", {"protocol": "TCP", "port": "http"}),
        ("any", "SCTP", {"protocol": "SCTP"}),
        ("", "TCP", {"protocol": "TCP"}),
        ("   ", "TCP", None),
        ("443", "ANY", {"port": 443}),
        ("any", "ICMP", None),
        ("any", "ANY", None),
        ("123", "ICMP", None),
        ("100-200", "TCP", None),
        ("0", "TCP", None),
        ("70000", "UDP", None),
        ("Bad_Name", "TCP", None),
    ])
    def test_mapping(self, port, protocol, expected):
        result = map_port(entry(port, protocol))
        if expected is None:
            assert result is None
        else:
            assert result.model_dump(exclude_none=True) == expected

    def test_numeric_ports_are_integers(self):
        assert isinstance(map_port(entry("8080")).port, int)

    def test_scenario_d_icmp_port_dropped(self, frontend, backend):
        edge = make_rule("e1", "frontend", "backend", ("123", "ICMP"))
        issues = validate_graph([frontend, backend], [edge])
        rule = compile_policy("backend", [frontend, backend], [edge]).to_manifest()["spec"]["ingress"][0]

        assert [i.severity for i in issues] == [Severity.WARNING]
        assert "ports" not in rule

    def test_range_warns_but_is_dropped(self, frontend, backend):
        edge = make_rule("e1", "frontend", "backend", ("100-200", "TCP"), ("443", "TCP"))
        issues = validate_graph([frontend, backend], [edge])
        rule = compile_policy("backend", [frontend, backend], [edge]).to_manifest()["spec"]["ingress"][0]

        assert [i.severity for i in issues] == [Severity.WARNING]
        assert rule["ports"] == [{"protocol": "TCP", "port": 443}]

    def test_blank_port_is_dropped_not_widened(self, frontend, backend):
        edge = make_rule("e1", "frontend", "backend", ("   ", "TCP"), ("443", "TCP"))
        rule = compile_policy("backend", [frontend, backend], [edge]).to_manifest()["spec"]["ingress"][0]
        assert rule["ports"] == [{"protocol": "TCP", "port": 443}]

    def test_map_ports_preserves_order(self):
        entries = [
            PortEntry(id="a", port="443", protocol=Protocol.TCP),
            PortEntry(id="b", port="dns", protocol=Protocol.UDP),
            PortEntry(id="c", port="80", protocol=Protocol.TCP),
        ]
        assert [p.port for p in map_ports(entries)] == [443, "dns", 80]

    def test_map_ports_empty_result_is_none(self):
        assert map_ports([entry("100-200")]) is None
        assert map_ports([]) is None

    def test_port_model_fields(self):
        assert NetworkPolicyPort(port=80).protocol is None


class TestCompileIdempotence:
    def test_compile_twice_is_identical(self, frontend, backend):
        edges = [make_rule("e1", "frontend", "backend", ("8080", "TCP"), ("dns", "UDP"))]
        first = compile_policy("backend", [frontend, backend], edges)
        second = compile_policy("backend", [frontend, backend], edges)
        assert first.to_manifest() == second.to_manifest()
