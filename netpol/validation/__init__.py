"""
Graph validation: severity-tagged issues per element and field.
"""

from .models import Issue, Severity, ValidationReport
from .validator import GraphValidator, validate_graph

__all__ = ["Issue", "Severity", "ValidationReport", "GraphValidator", "validate_graph"]
