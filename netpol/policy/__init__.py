"""
NetworkPolicy compilation for netpol.

This package provides:
- Pydantic models for the NetworkPolicy manifest
- The graph-to-policy compiler and YAML renderer
- The generation gate combining validation and compilation
"""

from .models import (
    NetworkPolicy, NetworkPolicyPeer, NetworkPolicyPort, NetworkPolicySpec,
    NetworkPolicyIngressRule, NetworkPolicyEgressRule, LabelSelector, PolicyType
)
from .compile import (
    NetworkPolicyCompiler, compile_policy, map_port, map_ports, render_policy,
    resolve_peer
)
from .generate import (
    GenerationResult, PolicyGenerator, explain_refusal, generate_policy_yaml,
    relevant_issues
)

__all__ = [
    "NetworkPolicy", "NetworkPolicyPeer", "NetworkPolicyPort", "NetworkPolicySpec",
    "NetworkPolicyIngressRule", "NetworkPolicyEgressRule", "LabelSelector", "PolicyType",
    "NetworkPolicyCompiler", "compile_policy", "map_port", "map_ports", "render_policy",
    "resolve_peer", "GenerationResult", "PolicyGenerator", "explain_refusal",
    "generate_policy_yaml", "relevant_issues",
]
