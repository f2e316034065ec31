"""
NetworkPolicy compilation and rendering.

This module compiles a graph snapshot into a NetworkPolicy for one target
pod group: incoming rule edges become ingress rules, outgoing ones egress
rules. Peers and ports that cannot be expressed are skipped rather than
failing the whole compile; the validator reports them.
"""

import logging
from typing import Dict, List, Optional, Sequence, Set, Tuple

import yaml

from netpol.config import get_settings
from netpol.graph.models import NamespaceNode, PodGroupNode, PortEntry, Protocol, RuleEdge, index_nodes
from netpol.policy.models import (
    NAMESPACE_NAME_LABEL, LabelSelector, NetworkPolicy, NetworkPolicyEgressRule,
    NetworkPolicyIngressRule, NetworkPolicyPeer, NetworkPolicyPort, NetworkPolicySpec,
    PolicyMetadata, PolicyType
)
from netpol.validation.syntax import PortFormat, classify_port, is_any_port

logger = logging.getLogger(__name__)

MISSING_POLICY_COMMENT = "# Error: NetworkPolicy object was not created."


def _namespace_selector(namespace: str) -> LabelSelector:
    return LabelSelector(match_labels={NAMESPACE_NAME_LABEL: namespace})


def resolve_peer(node, policy_namespace: str) -> Optional[NetworkPolicyPeer]:
    """
    Build the peer selector for the node on the other side of a rule.

    Args:
        node: Source node for ingress, target node for egress
        policy_namespace: Namespace of the policy being compiled

    Returns:
        Peer, or None when the node cannot be expressed as a peer
    """
    if isinstance(node, PodGroupNode):
        peer = NetworkPolicyPeer(pod_selector=LabelSelector(match_labels=dict(node.labels)))
        if node.namespace and node.namespace != policy_namespace:
            peer.namespace_selector = _namespace_selector(node.namespace)
        return peer
    if isinstance(node, NamespaceNode) and node.name:
        return NetworkPolicyPeer(namespace_selector=_namespace_selector(node.name))
    return None


def map_port(entry: PortEntry) -> Optional[NetworkPolicyPort]:
    """
    Map a rule port entry to a NetworkPolicy port.

    Returns None when the entry has no representation: ICMP with a port,
    ranges, out-of-range numbers, invalid names, or nothing left to set.
    """
    if entry.protocol == Protocol.ICMP and entry.port and not is_any_port(entry.port):
        return None

    protocol = None
    if entry.protocol not in (Protocol.ANY, Protocol.ICMP):
        protocol = entry.protocol.value

    port = None
    port_format = classify_port(entry.port)
    if port_format == PortFormat.NUMBER:
        port = int(entry.port)
    elif port_format == PortFormat.NAMED:
        port = entry.port
    elif port_format not in (PortFormat.EMPTY, PortFormat.ANY):
        # Ranges have no NetworkPolicy syntax; bad numbers and names are dropped too.
        return None

    if protocol is None and port is None:
        return None
    return NetworkPolicyPort(protocol=protocol, port=port)


def map_ports(entries: Sequence[PortEntry]) -> Optional[List[NetworkPolicyPort]]:
    """Mapped ports in entry order, or None (all ports) when nothing maps."""
    ports = []
    for entry in entries:
        port = map_port(entry)
        if port is None:
            logger.debug("Dropping port entry %s (%s/%s)", entry.id, entry.port, entry.protocol.value)
            continue
        ports.append(port)
    return ports or None


class NetworkPolicyCompiler:
    """
    Compiles graph snapshots into NetworkPolicy objects.

    The compiler is stateless between calls and never mutates the snapshot.
    """

    def __init__(self, name_prefix: Optional[str] = None):
        self.name_prefix = name_prefix if name_prefix is not None else get_settings().POLICY_NAME_PREFIX

    def compile(self, target_id: str, nodes: Sequence, edges: Sequence) -> Optional[NetworkPolicy]:
        """
        Compile the policy whose subject is the pod group target_id.

        Returns:
            NetworkPolicy, or None when the target is not a pod group or has
            no namespace
        """
        index = index_nodes(nodes)
        target = index.get(target_id)
        if not isinstance(target, PodGroupNode):
            logger.debug("Target %s is not a pod group; no policy compiled", target_id)
            return None
        if not target.namespace:
            logger.debug("Pod group %s has no namespace; no policy compiled", target_id)
            return None

        policy = NetworkPolicy(
            metadata=PolicyMetadata(
                name=f"{self.name_prefix}{target.name or target_id[-6:]}",
                namespace=target.namespace,
            ),
            spec=NetworkPolicySpec(pod_selector=LabelSelector(match_labels=dict(target.labels))),
        )

        policy_types: Set[PolicyType] = set()
        rule_edges = [edge for edge in edges if isinstance(edge, RuleEdge) and edge.is_rule]

        ingress_rules = [
            NetworkPolicyIngressRule(from_=[peer], ports=ports)
            for peer, ports in self._collect_rules(
                [edge for edge in rule_edges if edge.target == target_id], "source", index, target.namespace
            )
        ]
        has_ingress_rules = len(ingress_rules) > 0
        deny_ingress = target.policy_config.deny_ingress_by_default
        if has_ingress_rules:
            policy.spec.ingress = ingress_rules
        elif deny_ingress:
            policy.spec.ingress = []
        if has_ingress_rules or deny_ingress:
            policy_types.add(PolicyType.INGRESS)

        egress_rules = [
            NetworkPolicyEgressRule(to=[peer], ports=ports)
            for peer, ports in self._collect_rules(
                [edge for edge in rule_edges if edge.source == target_id], "target", index, target.namespace
            )
        ]
        has_egress_rules = len(egress_rules) > 0
        deny_egress = target.policy_config.deny_egress_by_default
        if has_egress_rules:
            policy.spec.egress = egress_rules
        elif deny_egress:
            policy.spec.egress = []
        if has_egress_rules or deny_egress:
            policy_types.add(PolicyType.EGRESS)

        if policy_types:
            policy.spec.policy_types = sorted(policy_types, key=lambda t: t.value)

        logger.debug(
            "Compiled %s: %d ingress rule(s), %d egress rule(s)",
            policy.metadata.name, len(ingress_rules), len(egress_rules),
        )
        return policy

    def _collect_rules(self, edges: List[RuleEdge], peer_side: str, index: Dict,
                       policy_namespace: str) -> List[Tuple[NetworkPolicyPeer, Optional[List[NetworkPolicyPort]]]]:
        """One (peer, ports) pair per edge whose peer node resolves; never merged."""
        rules = []
        for edge in edges:
            peer_id = getattr(edge, peer_side)
            node = index.get(peer_id)
            if node is None:
                logger.debug("Skipping rule %s: %s node %s not found", edge.id, peer_side, peer_id)
                continue
            peer = resolve_peer(node, policy_namespace)
            if peer is None:
                logger.debug("Skipping rule %s: node %s cannot be a peer", edge.id, peer_id)
                continue
            rules.append((peer, map_ports(edge.ports)))
        return rules


class _IndentedDumper(yaml.SafeDumper):
    """Indents block sequences under their parent key."""

    def increase_indent(self, flow=False, indentless=False):
        return super().increase_indent(flow, False)


def render_policy(policy: Optional[NetworkPolicy], indent: Optional[int] = None) -> str:
    """
    Serialize a policy as YAML in manifest key order.

    Never raises: a missing policy or a serialization fault becomes a
    diagnostic comment.
    """
    if policy is None:
        return MISSING_POLICY_COMMENT
    try:
        return yaml.dump(
            policy.to_manifest(),
            Dumper=_IndentedDumper,
            indent=indent or get_settings().YAML_INDENT,
            sort_keys=False,
            default_flow_style=False,
            allow_unicode=True,
        )
    except Exception as e:
        logger.error("Failed to render NetworkPolicy %s: %s", policy.metadata.name, e)
        return f"# Error generating YAML: {e}\n# Check the application log for details."


def compile_policy(target_id: str, nodes: Sequence, edges: Sequence) -> Optional[NetworkPolicy]:
    """
    Compile the NetworkPolicy for one pod group.

    Args:
        target_id: ID of the pod group the policy applies to
        nodes: Snapshot nodes
        edges: Snapshot edges

    Returns:
        NetworkPolicy, or None when the target cannot anchor a policy
    """
    return NetworkPolicyCompiler().compile(target_id, nodes, edges)
