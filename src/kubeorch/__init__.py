"""Kubernetes Cluster Orchestrator (kubeorch).

Create, inspect and destroy managed Kubernetes clusters and node groups across
cloud providers through one provider-agnostic API.
"""

__version__ = "0.1.0"
__author__ = "Platform Engineering Team"
__license__ = "Apache-2.0"
