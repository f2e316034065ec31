"""
Graph snapshot models and connection rules.
"""

from .models import (
    EDGE_KIND_RULE, NODE_KIND_NAMESPACE, NODE_KIND_POD_GROUP,
    GraphSnapshot, NamespaceNode, Node, PodGroupNode, PolicyConfig,
    PortEntry, Protocol, RuleEdge, index_nodes
)
from .connections import ConnectionCheck, check_connection

__all__ = [
    "EDGE_KIND_RULE", "NODE_KIND_NAMESPACE", "NODE_KIND_POD_GROUP",
    "GraphSnapshot", "NamespaceNode", "Node", "PodGroupNode", "PolicyConfig",
    "PortEntry", "Protocol", "RuleEdge", "index_nodes",
    "ConnectionCheck", "check_connection",
]
