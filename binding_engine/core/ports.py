"""
Capabilities the engine consumes from the surrounding controller.

Implementations talk to the API server (binding_operator.cluster) or keep
documents in memory (tests).
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence

from .model import GroupVersionKind, GroupVersionResource, ServiceSelector


class TypeLookup(ABC):
    """Maps selectors and kinds to served resource types."""

    @abstractmethod
    def resource_for_selector(self, selector: ServiceSelector) -> GroupVersionResource:
        """
        Raises:
            TypeNotFoundError: If the selector matches no served type
        """
        ...

    @abstractmethod
    def kind_for_resource(self, gvr: GroupVersionResource) -> GroupVersionKind:
        ...

    @abstractmethod
    def resource_for_kind(self, gvk: GroupVersionKind) -> GroupVersionResource:
        ...


class Cluster(ABC):
    """
    Object access used while building contexts.

    NotFound conditions raise ResourceNotFoundError; every other failure
    raises ClusterError.
    """

    @abstractmethod
    def fetch_object(self, namespace: str, gvr: GroupVersionResource, name: str) -> Dict[str, Any]:
        ...

    @abstractmethod
    def fetch_type_definition(self, gvr: GroupVersionResource) -> Dict[str, Any]:
        """Return the CustomResourceDefinition serving gvr."""
        ...

    @abstractmethod
    def fetch_type_description(
        self, namespace: str, gvk: GroupVersionKind, crd: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Return the OLM CRDDescription describing crd for gvk."""
        ...

    @abstractmethod
    def list_owned(
        self, namespace: str, owner_uid: str, resource_types: Sequence[GroupVersionResource]
    ) -> List[Dict[str, Any]]:
        """
        Raises:
            OwnedResourceListError: If listing fails
        """
        ...

    @abstractmethod
    def fetch_csv(self, namespace: str, name: str) -> Dict[str, Any]:
        """Return a ClusterServiceVersion document."""
        ...
