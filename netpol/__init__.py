"""
netpol: compile workload topology graphs into Kubernetes NetworkPolicy manifests.

The graph (namespaces, pod groups and rule edges) is owned by an external
store. This package validates snapshots of that graph and compiles them into
NetworkPolicy objects and YAML.
"""

__version__ = "0.1.0"
