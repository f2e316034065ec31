"""
Graph Models (Pydantic snapshot models).

This module defines the read-only snapshot of the workload topology handed
to the validator and the policy compiler by the owning store: namespace and
pod group nodes, and directed rule edges carrying port/protocol entries.
"""

from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

NODE_KIND_NAMESPACE = "namespace"
NODE_KIND_POD_GROUP = "podGroup"
EDGE_KIND_RULE = "rule"


class Protocol(str, Enum):
    """Protocol selectable on a rule port entry."""
    TCP = "TCP"
    UDP = "UDP"
    SCTP = "SCTP"
    ICMP = "ICMP"
    ANY = "ANY"


class _SnapshotModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


# ===== Nodes =====

class PolicyConfig(_SnapshotModel):
    """Default-deny switches of a pod group."""
    deny_ingress_by_default: bool = Field(
        default=False, alias="denyIngressByDefault", description="Deny all ingress not allowed by a rule"
    )
    deny_egress_by_default: bool = Field(
        default=False, alias="denyEgressByDefault", description="Deny all egress not allowed by a rule"
    )


class NamespaceNode(_SnapshotModel):
    """Kubernetes namespace, usable only as a peer selector."""
    kind: Literal["namespace"] = Field(default=NODE_KIND_NAMESPACE, description="Node kind discriminator")
    id: str = Field(description="Node ID, unique within a snapshot")
    name: Optional[str] = Field(default=None, alias="label", description="Kubernetes namespace name")
    has_children: bool = Field(default=False, alias="hasChildren", description="Display only")


class PodGroupNode(_SnapshotModel):
    """Set of workloads selected by a label map within a namespace."""
    kind: Literal["podGroup"] = Field(default=NODE_KIND_POD_GROUP, description="Node kind discriminator")
    id: str = Field(description="Node ID, unique within a snapshot")
    name: str = Field(default="", description="Pod group name")
    namespace: str = Field(default="", description="Namespace the pods are deployed into")
    labels: Dict[str, str] = Field(default_factory=dict, description="podSelector.matchLabels source")
    policy_config: PolicyConfig = Field(default_factory=PolicyConfig, alias="policyConfig")
    parent_id: Optional[str] = Field(default=None, alias="parentId", description="Visual container, never compiled")

    @model_validator(mode="before")
    @classmethod
    def _flatten_metadata(cls, data: Any) -> Any:
        # Store payloads nest name/namespace under "metadata".
        if isinstance(data, dict) and isinstance(data.get("metadata"), dict):
            data = dict(data)
            metadata = data.pop("metadata")
            data.setdefault("name", metadata.get("name", ""))
            data.setdefault("namespace", metadata.get("namespace", ""))
        return data


Node = Annotated[Union[NamespaceNode, PodGroupNode], Field(discriminator="kind")]


# ===== Edges =====

class PortEntry(_SnapshotModel):
    """Single port/protocol entry on a rule edge."""
    id: str = Field(description="Entry ID, unique within the edge")
    port: str = Field(default="", description="Number, 'any', named port or N-M range")
    protocol: Protocol = Field(default=Protocol.TCP, description="Protocol")


class RuleEdge(_SnapshotModel):
    """Directed edge: traffic is allowed from source to target."""
    id: str = Field(description="Edge ID, unique within a snapshot")
    source: str = Field(description="Source node ID")
    target: str = Field(description="Target node ID")
    kind: str = Field(default=EDGE_KIND_RULE, description="Edge kind; only rule edges are compiled")
    ports: List[PortEntry] = Field(default_factory=list, description="Ordered port entries")
    label: Optional[str] = Field(default=None, description="Display only")

    @model_validator(mode="before")
    @classmethod
    def _flatten_data(cls, data: Any) -> Any:
        # Store payloads carry ports and the rule description under "data".
        if isinstance(data, dict) and isinstance(data.get("data"), dict):
            data = dict(data)
            payload = data.pop("data")
            data.setdefault("ports", payload.get("ports") or [])
            if payload.get("ruleApplied") is not None:
                data.setdefault("label", payload["ruleApplied"])
        return data

    @property
    def is_rule(self) -> bool:
        return self.kind == EDGE_KIND_RULE


# ===== Snapshot =====

class GraphSnapshot(_SnapshotModel):
    """Immutable view of the graph at one point in time."""
    nodes: List[Node] = Field(default_factory=list, description="Namespace and pod group nodes")
    edges: List[RuleEdge] = Field(default_factory=list, description="Rule edges")

    def node_by_id(self, node_id: str) -> Optional[Union[NamespaceNode, PodGroupNode]]:
        return index_nodes(self.nodes).get(node_id)

    def namespace_has_children(self, namespace_id: str) -> bool:
        """True when at least one pod group is visually contained by the namespace node."""
        return any(
            isinstance(node, PodGroupNode) and node.parent_id == namespace_id
            for node in self.nodes
        )


def index_nodes(nodes) -> Dict[str, Any]:
    """Map node ID to node; the first node wins when IDs collide."""
    index: Dict[str, Any] = {}
    for node in nodes:
        index.setdefault(node.id, node)
    return index
