"""
Connection rules applied by the store before it creates a rule edge.
"""

from typing import Optional, Sequence

from pydantic import BaseModel, Field

from netpol.graph.models import NamespaceNode, PodGroupNode, index_nodes

SELF_CONNECTION = "A node cannot be connected to itself."
NAMESPACE_TO_NAMESPACE = "A namespace cannot be connected directly to another namespace."
GENERAL_INVALID = "A connection between these elements is not allowed."
ENDPOINT_NOT_FOUND = "Source or target node not found."


class ConnectionCheck(BaseModel):
    """Outcome of a proposed source -> target connection."""
    valid: bool = Field(description="Whether the edge may be created")
    message: Optional[str] = Field(default=None, description="Reason the connection was rejected")
    description: Optional[str] = Field(default=None, description="Default label for the new rule edge")


def _display_name(node) -> str:
    return node.name or node.id[-4:]


def check_connection(source_id: str, target_id: str, nodes: Sequence) -> ConnectionCheck:
    """
    Decide whether a rule edge from source_id to target_id may be created.

    Pod group <-> pod group and pod group <-> namespace are allowed; self
    connections and namespace -> namespace are not.
    """
    index = index_nodes(nodes)
    source = index.get(source_id)
    target = index.get(target_id)

    if source is None or target is None:
        return ConnectionCheck(valid=False, message=ENDPOINT_NOT_FOUND)
    if source_id == target_id:
        return ConnectionCheck(valid=False, message=SELF_CONNECTION)

    source_name = _display_name(source)
    target_name = _display_name(target)

    if isinstance(source, PodGroupNode) and isinstance(target, PodGroupNode):
        return ConnectionCheck(valid=True, description=f"Rule from {source_name} to {target_name}")
    if isinstance(source, PodGroupNode) and isinstance(target, NamespaceNode):
        return ConnectionCheck(valid=True, description=f"Egress from {source_name} to namespace {target_name}")
    if isinstance(source, NamespaceNode) and isinstance(target, PodGroupNode):
        return ConnectionCheck(valid=True, description=f"Ingress to {target_name} from namespace {source_name}")
    if isinstance(source, NamespaceNode) and isinstance(target, NamespaceNode):
        return ConnectionCheck(valid=False, message=NAMESPACE_TO_NAMESPACE)

    return ConnectionCheck(valid=False, message=GENERAL_INVALID)
