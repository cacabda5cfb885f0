"""Declarative Kubernetes deployments from a tree of units.

A deployment file describes shell commands, manifests and Helm releases
(optionally nested in groups) together with their dependencies. The
``kubeunits up`` command validates that tree, computes a safe execution
order and applies the selected units against the current cluster.
"""

__version__ = "0.1.0"
