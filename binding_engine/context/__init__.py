"""Service context construction: single services, owned resources, selector lists."""

from .builder import build_service_contexts
from .owned import DEFAULT_OWNED_RESOURCE_TYPES, find_owned_resource_contexts
from .service import build_service_context, collect_service_annotations, run_handler

__all__ = [
    "build_service_contexts",
    "build_service_context",
    "collect_service_annotations",
    "run_handler",
    "find_owned_resource_contexts",
    "DEFAULT_OWNED_RESOURCE_TYPES",
]
