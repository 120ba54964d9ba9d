"""
Kubernetes side of the binding operator: kopf handlers, API access,
configuration, logging and metrics.
"""
