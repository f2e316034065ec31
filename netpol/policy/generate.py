"""
Policy generation gate.

Combines validator and compiler the way the editor uses them: generation is
refused while error issues touch the target pod group or one of its rule
edges; warnings are surfaced as comments above the rendered YAML.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from netpol.graph.models import PodGroupNode, index_nodes
from netpol.policy.compile import NetworkPolicyCompiler, render_policy
from netpol.policy.models import NetworkPolicy
from netpol.validation.models import Issue
from netpol.validation.validator import GraphValidator

logger = logging.getLogger(__name__)

NO_TARGET = "# Please select a PodGroup to generate a policy for."
NOT_A_POD_GROUP = "# The selected element is not a PodGroup. YAML is only generated for PodGroups."
BLOCKED_HEADER = (
    "# YAML cannot be generated because of blocking errors.\n"
    "# Check the element properties for details."
)
WARNINGS_FOOTER = "# --- YAML generated with the warnings above ---"


class GenerationResult(BaseModel):
    """Outcome of a generation request for one target."""
    target_id: Optional[str] = Field(default=None, description="Requested pod group ID")
    ok: bool = Field(description="A policy was compiled and rendered")
    yaml: str = Field(description="Rendered YAML, or a comment explaining the refusal")
    policy: Optional[NetworkPolicy] = Field(default=None, description="Compiled policy")
    errors: List[Issue] = Field(default_factory=list, description="Blocking issues for the target")
    warnings: List[Issue] = Field(default_factory=list, description="Non-blocking issues for the target")
    reason: Optional[str] = Field(default=None, description="Why generation was refused")


def relevant_issues(target_id: str, issues: Sequence[Issue], edges: Sequence) -> Tuple[List[Issue], List[Issue]]:
    """
    Split the issues touching target_id into (errors, warnings).

    An issue touches the target when it is reported on the target node or on
    an edge whose source or target is the target node.
    """
    touching_edges = {edge.id for edge in edges if target_id in (edge.source, edge.target)}
    errors: List[Issue] = []
    warnings: List[Issue] = []
    for issue in issues:
        if issue.element_id != target_id and issue.element_id not in touching_edges:
            continue
        if issue.is_error:
            errors.append(issue)
        else:
            warnings.append(issue)
    return errors, warnings


def explain_refusal(target_id: Optional[str], nodes: Sequence) -> str:
    """Human-readable reason why no policy can be anchored at target_id."""
    if not target_id:
        return "No pod group was selected."
    node = index_nodes(nodes).get(target_id)
    if node is None:
        return f"Node '{target_id}' does not exist."
    if not isinstance(node, PodGroupNode):
        return f"Node '{target_id}' is not a PodGroup; policies are only generated for PodGroups."
    if not node.namespace:
        return f"PodGroup '{node.name or target_id}' has no namespace; a policy cannot be anchored without one."
    return f"No policy could be compiled for '{target_id}'."


def _comment_lines(prefix: str, issues: Sequence[Issue]) -> str:
    return "\n".join(f"# {prefix}{issue.describe()}" for issue in issues)


class PolicyGenerator:
    """
    Validate-then-compile entry point used by the UI layer and the CLI.

    Usage:
        generator = PolicyGenerator()
        result = generator.generate("pg1", nodes, edges)
        if result.ok:
            print(result.yaml)
    """

    def __init__(self, compiler: Optional[NetworkPolicyCompiler] = None,
                 validator: Optional[GraphValidator] = None):
        self.compiler = compiler or NetworkPolicyCompiler()
        self.validator = validator or GraphValidator()

    def generate(self, target_id: Optional[str], nodes: Sequence, edges: Sequence,
                 issues: Optional[Sequence[Issue]] = None) -> GenerationResult:
        """
        Generate YAML for target_id.

        Args:
            target_id: Pod group the policy applies to
            nodes: Snapshot nodes
            edges: Snapshot edges
            issues: Cached validator output for the same snapshot; the
                validator runs when omitted
        """
        if not target_id:
            return self._refuse(target_id, NO_TARGET, explain_refusal(target_id, nodes))

        target = index_nodes(nodes).get(target_id)
        if not isinstance(target, PodGroupNode):
            return self._refuse(target_id, NOT_A_POD_GROUP, explain_refusal(target_id, nodes))

        if issues is None:
            issues = self.validator.validate(nodes, edges)
        errors, warnings = relevant_issues(target_id, issues, edges)

        if errors:
            text = f"{BLOCKED_HEADER}\n\n# Errors:\n{_comment_lines('- ', errors)}"
            return self._refuse(
                target_id, text, f"{len(errors)} blocking error(s) on the target or its rules.",
                errors=errors, warnings=warnings,
            )

        policy = self.compiler.compile(target_id, nodes, edges)
        if policy is None:
            reason = explain_refusal(target_id, nodes)
            return self._refuse(target_id, f"# {reason}", reason, warnings=warnings)

        rendered = render_policy(policy)
        if warnings:
            rendered = f"{_comment_lines('WARNING: ', warnings)}\n{WARNINGS_FOOTER}\n{rendered}"
        else:
            rendered = f"# YAML generated for: {target.name or target_id}\n---\n{rendered}"

        return GenerationResult(
            target_id=target_id, ok=True, yaml=rendered, policy=policy, warnings=warnings,
        )

    def _refuse(self, target_id: Optional[str], text: str, reason: str,
                errors: Optional[List[Issue]] = None,
                warnings: Optional[List[Issue]] = None) -> GenerationResult:
        logger.info("Policy generation refused for %s: %s", target_id, reason)
        return GenerationResult(
            target_id=target_id, ok=False, yaml=text, reason=reason,
            errors=errors or [], warnings=warnings or [],
        )


def generate_policy_yaml(target_id: Optional[str], nodes: Sequence, edges: Sequence,
                         issues: Optional[Sequence[Issue]] = None) -> GenerationResult:
    """Run the generation gate with default compiler and validator."""
    return PolicyGenerator().generate(target_id, nodes, edges, issues)
