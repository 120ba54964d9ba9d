"""Type resolution backed by API discovery."""

from kubernetes.dynamic import DynamicClient
from kubernetes.dynamic.exceptions import ResourceNotFoundError as DiscoveryNotFoundError
from kubernetes.dynamic.exceptions import ResourceNotUniqueError

from binding_engine.core import (
    GroupVersionKind,
    GroupVersionResource,
    ServiceSelector,
    TypeLookup,
    TypeNotFoundError,
)


class K8sTypeLookup(TypeLookup):
    """Resolves selectors, kinds and resources through the dynamic client's discoverer."""

    def __init__(self, dyn: DynamicClient):
        self.dyn = dyn

    def _discover(self, **kwargs):
        try:
            return self.dyn.resources.get(**kwargs)
        except (DiscoveryNotFoundError, ResourceNotUniqueError) as e:
            raise TypeNotFoundError(f"no served type matches {kwargs}: {e}") from e

    def resource_for_selector(self, selector: ServiceSelector) -> GroupVersionResource:
        probe = GroupVersionResource(group=selector.group, version=selector.version, resource="")
        if selector.resource:
            res = self._discover(api_version=probe.api_version, name=selector.resource)
        elif selector.kind:
            res = self._discover(api_version=probe.api_version, kind=selector.kind)
        else:
            raise TypeNotFoundError(f"selector for {selector.name!r} names neither kind nor resource")
        return GroupVersionResource(group=selector.group, version=selector.version, resource=res.name)

    def kind_for_resource(self, gvr: GroupVersionResource) -> GroupVersionKind:
        res = self._discover(api_version=gvr.api_version, name=gvr.resource)
        return GroupVersionKind(group=gvr.group, version=gvr.version, kind=res.kind)

    def resource_for_kind(self, gvk: GroupVersionKind) -> GroupVersionResource:
        res = self._discover(api_version=gvk.api_version, kind=gvk.kind)
        return GroupVersionResource(group=gvk.group, version=gvk.version, resource=res.name)
