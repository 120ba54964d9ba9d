"""
Operator configuration read from the environment.

Environment Variables:
    SBO_NAMING_TEMPLATE: Template for variable names
    SBO_OWNED_RESOURCE_TYPES: Comma-separated group/version/resource list
        scanned for owned resources (core group: version/resource)
    SBO_REQUEUE_DELAY_SECONDS: Delay before retrying a failed binding - default: 30
    METRICS_ENABLED: Enable metrics server (true/false) - default: false
    METRICS_PORT: HTTP port for /metrics endpoint - default: 8080
"""

import os
from dataclasses import dataclass, field
from typing import Tuple

from binding_engine.context import DEFAULT_OWNED_RESOURCE_TYPES
from binding_engine.core import GroupVersionResource

DEFAULT_NAMING_TEMPLATE = "{{ .service.kind | upper }}_{{ .name | upper }}"

BINDING_GROUP = "binding.operators.coreos.com"
BINDING_VERSION = "v1alpha1"
BINDING_PLURAL = "servicebindings"

OLM_GROUP = "operators.coreos.com"
OLM_VERSION = "v1alpha1"
CSV_PLURAL = "clusterserviceversions"


def _parse_resource_types(value: str) -> Tuple[GroupVersionResource, ...]:
    return tuple(GroupVersionResource.parse(v) for v in value.split(",") if v.strip())


@dataclass
class OperatorConfig:
    naming_template: str = DEFAULT_NAMING_TEMPLATE
    owned_resource_types: Tuple[GroupVersionResource, ...] = field(
        default_factory=lambda: tuple(DEFAULT_OWNED_RESOURCE_TYPES)
    )
    requeue_delay_seconds: int = 30
    metrics_enabled: bool = False
    metrics_port: int = 8080

    @staticmethod
    def from_env() -> "OperatorConfig":
        owned = os.getenv("SBO_OWNED_RESOURCE_TYPES")
        return OperatorConfig(
            naming_template=os.getenv("SBO_NAMING_TEMPLATE", DEFAULT_NAMING_TEMPLATE),
            owned_resource_types=(
                _parse_resource_types(owned) if owned else tuple(DEFAULT_OWNED_RESOURCE_TYPES)
            ),
            requeue_delay_seconds=int(os.getenv("SBO_REQUEUE_DELAY_SECONDS", "30")),
            metrics_enabled=os.getenv("METRICS_ENABLED", "false").lower() == "true",
            metrics_port=int(os.getenv("METRICS_PORT", "8080")),
        )
