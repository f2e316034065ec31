"""
Graph validator.

Re-derives every issue from the full snapshot on each call:
- PodGroup name/namespace and Namespace name must be DNS-1123 labels
- PodGroup labels must follow Kubernetes label syntax (empty map warns)
- Rule edges must reference existing nodes
- Port entries must be a number, 'any', a named port or a (warned) range
- ICMP/ANY entries should not carry a specific port
"""

import logging
from typing import List, Optional, Sequence

from netpol.graph.models import (
    GraphSnapshot, NamespaceNode, PodGroupNode, PortEntry, Protocol, RuleEdge,
    index_nodes
)
from netpol.validation.models import Issue, Severity, ValidationReport
from netpol.validation.syntax import (
    MAX_LABEL_LENGTH, MAX_PORT, MIN_PORT, PortFormat, classify_port,
    is_any_port, is_dns1123_label, is_label_part
)

logger = logging.getLogger(__name__)

PORTLESS_PROTOCOLS = (Protocol.ICMP, Protocol.ANY)


def _issue(message: str, element_id: Optional[str], field_key: Optional[str],
           severity: Severity = Severity.ERROR) -> Issue:
    return Issue(message=message, element_id=element_id, field_key=field_key, severity=severity)


def check_dns1123(value: Optional[str], value_name: str, element_name: str,
                  element_id: str, field_key: str) -> Optional[Issue]:
    """At most one error for a value that must be a DNS-1123 label."""
    if not value or not value.strip():
        return _issue(f"{value_name} is not set for {element_name}.", element_id, field_key)
    if len(value) > MAX_LABEL_LENGTH:
        return _issue(
            f"{value_name} '{value}' for {element_name} is too long (max {MAX_LABEL_LENGTH} characters).",
            element_id, field_key,
        )
    if not is_dns1123_label(value):
        return _issue(
            f"{value_name} '{value}' for {element_name} is not a valid DNS-1123 label.",
            element_id, field_key,
        )
    return None


def check_label_part(value: str, part_name: str, label_key: str, element_name: str,
                     element_id: str, field_key: str) -> Optional[Issue]:
    if len(value) > MAX_LABEL_LENGTH:
        return _issue(
            f"{part_name} '{value}' of label '{label_key}' for {element_name} is too long "
            f"(max {MAX_LABEL_LENGTH} characters).",
            element_id, field_key,
        )
    if not is_label_part(value):
        return _issue(
            f"{part_name} '{value}' of label '{label_key}' for {element_name} has an invalid format.",
            element_id, field_key,
        )
    return None


def check_port_format(port: Optional[str], entry_id: Optional[str], edge_id: Optional[str]) -> Optional[Issue]:
    """Validate one port string; ranges are accepted with a warning."""
    field_key = f"ports[{entry_id}].port" if entry_id else "ports.general"
    element_id = edge_id or "unknown-edge"
    port_format = classify_port(port)

    if port_format == PortFormat.EMPTY or not port.strip():
        return _issue("Port cannot be empty.", element_id, field_key)
    if port_format == PortFormat.NUMBER_OUT_OF_RANGE:
        return _issue(f"Port number '{port}' must be between {MIN_PORT} and {MAX_PORT}.", element_id, field_key)
    if port_format == PortFormat.RANGE:
        return _issue(
            f"Port ranges ('{port}') are not supported by NetworkPolicy and will be dropped at generation time.",
            element_id, field_key, Severity.WARNING,
        )
    if port_format == PortFormat.INVALID:
        return _issue(
            f"Invalid port format '{port}': expected a number, 'any' or a DNS-1123 port name "
            f"(max {MAX_LABEL_LENGTH} characters).",
            element_id, field_key,
        )
    return None


class GraphValidator:
    """
    Validates graph snapshots for policy generation.

    Usage:
        validator = GraphValidator()
        issues = validator.validate(nodes, edges)
        report = validator.validate_snapshot(snapshot)
    """

    def __init__(self, strict_mode: bool = False):
        self.strict_mode = strict_mode

    def validate(self, nodes: Sequence, edges: Sequence) -> List[Issue]:
        """Return every issue of the snapshot: nodes first, then edges, in input order."""
        issues: List[Issue] = []
        for node in nodes:
            if isinstance(node, PodGroupNode):
                issues.extend(self._check_pod_group(node))
            elif isinstance(node, NamespaceNode):
                issues.extend(self._check_namespace(node))

        index = index_nodes(nodes)
        for edge in edges:
            if isinstance(edge, RuleEdge) and edge.is_rule:
                issues.extend(self._check_rule_edge(edge, index))

        logger.debug("Validated %d node(s), %d edge(s): %d issue(s)", len(nodes), len(edges), len(issues))
        return issues

    def validate_snapshot(self, snapshot: GraphSnapshot) -> ValidationReport:
        issues = self.validate(snapshot.nodes, snapshot.edges)
        return ValidationReport(issues=issues, strict=self.strict_mode)

    def _check_pod_group(self, node: PodGroupNode) -> List[Issue]:
        issues: List[Issue] = []
        element_name = f"PodGroup '{node.name or node.id}'"

        for value, value_name, field_key in (
            (node.name, "Name", "metadata.name"),
            (node.namespace, "Namespace", "metadata.namespace"),
        ):
            issue = check_dns1123(value, value_name, element_name, node.id, field_key)
            if issue:
                issues.append(issue)

        issues.extend(self._check_labels(node, element_name))
        return issues

    def _check_labels(self, node: PodGroupNode, element_name: str) -> List[Issue]:
        if not node.labels:
            # An empty podSelector selects every pod in the namespace.
            return [_issue(
                f"{element_name} has no labels; its selector will match every pod in the namespace.",
                node.id, "labels", Severity.WARNING,
            )]

        issues: List[Issue] = []
        for key, value in node.labels.items():
            field_key = f'labels."{key}"'
            if not key.strip():
                issues.append(_issue(f"Label key cannot be empty for {element_name}.", node.id, field_key))
            else:
                issue = check_label_part(key, "Label key", key, element_name, node.id, field_key)
                if issue:
                    issues.append(issue)

            if value != "":
                issue = check_label_part(value, "Label value", key, element_name, node.id, field_key)
                if issue:
                    issues.append(issue)
        return issues

    def _check_namespace(self, node: NamespaceNode) -> List[Issue]:
        element_name = f"Namespace '{node.name or node.id}'"
        issue = check_dns1123(node.name, "Name", element_name, node.id, "label")
        return [issue] if issue else []

    def _check_rule_edge(self, edge: RuleEdge, index) -> List[Issue]:
        issues: List[Issue] = []
        short_id = edge.id[-6:]

        if edge.source not in index:
            issues.append(_issue(f"Source node '{edge.source}' of rule {short_id} was not found.", edge.id, "source"))
        if edge.target not in index:
            issues.append(_issue(f"Target node '{edge.target}' of rule {short_id} was not found.", edge.id, "target"))

        for entry in edge.ports:
            issues.extend(self._check_port_entry(edge, entry))
        return issues

    def _check_port_entry(self, edge: RuleEdge, entry: PortEntry) -> List[Issue]:
        issues: List[Issue] = []
        issue = check_port_format(entry.port, entry.id, edge.id)
        if issue:
            issues.append(issue)

        if entry.protocol in PORTLESS_PROTOCOLS and entry.port and not is_any_port(entry.port):
            issues.append(_issue(
                f"Protocol {entry.protocol.value} on rule {edge.id[-6:]} ignores port '{entry.port}'.",
                edge.id, f"ports[{entry.id}].port", Severity.WARNING,
            ))
        return issues


def validate_graph(nodes: Sequence, edges: Sequence) -> List[Issue]:
    """
    Validate a graph snapshot.

    Args:
        nodes: Namespace and pod group nodes
        edges: Rule edges

    Returns:
        Issues in a stable order; empty when the graph is valid
    """
    return GraphValidator().validate(nodes, edges)
