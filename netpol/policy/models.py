"""
NetworkPolicy Models (Pydantic manifest models).

Field names and declaration order follow the Kubernetes NetworkPolicy
resource; dumping with aliases yields the manifest in canonical key order.
"""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

API_VERSION = "networking.k8s.io/v1"
KIND = "NetworkPolicy"
NAMESPACE_NAME_LABEL = "kubernetes.io/metadata.name"


class PolicyType(str, Enum):
    """NetworkPolicy policy types."""
    INGRESS = "Ingress"
    EGRESS = "Egress"


class _ManifestModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class LabelSelector(_ManifestModel):
    """Label selector limited to matchLabels."""
    match_labels: Dict[str, str] = Field(default_factory=dict, alias="matchLabels")


class NetworkPolicyPeer(_ManifestModel):
    """One side of an ingress/egress rule."""
    pod_selector: Optional[LabelSelector] = Field(default=None, alias="podSelector")
    namespace_selector: Optional[LabelSelector] = Field(default=None, alias="namespaceSelector")


class NetworkPolicyPort(_ManifestModel):
    """Port of a rule; numeric ports are integers, named ports strings."""
    protocol: Optional[Literal["TCP", "UDP", "SCTP"]] = Field(default=None)
    port: Optional[Union[int, str]] = Field(default=None)


class NetworkPolicyIngressRule(_ManifestModel):
    from_: List[NetworkPolicyPeer] = Field(default_factory=list, alias="from")
    ports: Optional[List[NetworkPolicyPort]] = Field(default=None, description="None means all ports")


class NetworkPolicyEgressRule(_ManifestModel):
    to: List[NetworkPolicyPeer] = Field(default_factory=list)
    ports: Optional[List[NetworkPolicyPort]] = Field(default=None, description="None means all ports")


class NetworkPolicySpec(_ManifestModel):
    pod_selector: LabelSelector = Field(default_factory=LabelSelector, alias="podSelector")
    policy_types: Optional[List[PolicyType]] = Field(default=None, alias="policyTypes")
    ingress: Optional[List[NetworkPolicyIngressRule]] = Field(default=None, description="[] means deny all")
    egress: Optional[List[NetworkPolicyEgressRule]] = Field(default=None, description="[] means deny all")


class PolicyMetadata(_ManifestModel):
    name: str
    namespace: str


class NetworkPolicy(_ManifestModel):
    """Compiled NetworkPolicy prior to text rendering."""
    api_version: Literal["networking.k8s.io/v1"] = Field(default=API_VERSION, alias="apiVersion")
    kind: Literal["NetworkPolicy"] = Field(default=KIND)
    metadata: PolicyMetadata
    spec: NetworkPolicySpec = Field(default_factory=NetworkPolicySpec)

    def to_manifest(self) -> Dict[str, Any]:
        """Plain ordered dict with Kubernetes field names; unset optional fields are omitted."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")
