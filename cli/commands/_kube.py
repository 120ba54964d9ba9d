"""Kubernetes client setup shared by commands."""

from typing import Optional, Tuple

import kubernetes

from binding_operator.cluster import DynamicCluster
from binding_operator.type_lookup import K8sTypeLookup


def connect(context: Optional[str] = None) -> Tuple[DynamicCluster, K8sTypeLookup]:
    """Load kubeconfig (or in-cluster config) and return cluster access objects."""
    try:
        kubernetes.config.load_kube_config(context=context)
    except kubernetes.config.ConfigException:
        kubernetes.config.load_incluster_config()
    cluster = DynamicCluster.from_api_client()
    return cluster, K8sTypeLookup(cluster.dyn)
