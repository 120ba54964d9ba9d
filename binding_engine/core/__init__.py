"""
Core service binding primitives.

- model: selectors, GVK/GVR, ServiceContext
- errors: error classes and their skip/abort classification
- annotations: layered annotation collection
- merge: object and variable merge policies
- ports: capabilities consumed from the controller
- canonical: deterministic serialization
"""

from .model import (
    AnnotationOutcome,
    GroupVersionKind,
    GroupVersionResource,
    HandlerResult,
    OwnedResourceQuery,
    ServiceContext,
    ServiceContextList,
    ServiceSelector,
    SkippedSelector,
)
from .errors import (
    BindingError,
    ClusterError,
    EmptyAnnotationNameError,
    HandlerExecutionError,
    HandlerNotFoundError,
    InvalidAnnotationValueError,
    MergeError,
    OwnedResourceListError,
    ResourceNotFoundError,
    TypeNotFoundError,
    WatchRegistrationError,
    is_skippable_selector_error,
)
from .ports import Cluster, TypeLookup

__all__ = [
    "AnnotationOutcome",
    "GroupVersionKind",
    "GroupVersionResource",
    "HandlerResult",
    "OwnedResourceQuery",
    "ServiceContext",
    "ServiceContextList",
    "ServiceSelector",
    "SkippedSelector",
    "BindingError",
    "ClusterError",
    "EmptyAnnotationNameError",
    "HandlerExecutionError",
    "HandlerNotFoundError",
    "InvalidAnnotationValueError",
    "MergeError",
    "OwnedResourceListError",
    "ResourceNotFoundError",
    "TypeNotFoundError",
    "WatchRegistrationError",
    "is_skippable_selector_error",
    "Cluster",
    "TypeLookup",
]
