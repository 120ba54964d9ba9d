"""
Cluster access for the binding engine.

Wraps kubernetes.dynamic so the engine only ever sees plain dict documents
and its own error classes.
"""

from typing import Any, Dict, List, Sequence

from kubernetes import client, dynamic
from kubernetes.client.exceptions import ApiException
from kubernetes.dynamic.exceptions import NotFoundError
from kubernetes.dynamic.exceptions import ResourceNotFoundError as DiscoveryNotFoundError

from binding_engine.core import (
    Cluster,
    ClusterError,
    GroupVersionKind,
    GroupVersionResource,
    OwnedResourceListError,
    ResourceNotFoundError,
)
from .olm import find_crd_description

CRD_API_VERSION = "apiextensions.k8s.io/v1"
CSV_API_VERSION = "operators.coreos.com/v1alpha1"


def owned_by(obj: Dict[str, Any], owner_uid: str) -> bool:
    refs = obj.get("metadata", {}).get("ownerReferences") or []
    return any(ref.get("uid") == owner_uid for ref in refs)


class DynamicCluster(Cluster):
    def __init__(self, dyn: dynamic.DynamicClient):
        self.dyn = dyn

    @classmethod
    def from_api_client(cls, api_client: client.ApiClient = None) -> "DynamicCluster":
        return cls(dynamic.DynamicClient(api_client or client.ApiClient()))

    def _resource(self, api_version: str, **kwargs):
        try:
            return self.dyn.resources.get(api_version=api_version, **kwargs)
        except DiscoveryNotFoundError as e:
            raise ResourceNotFoundError(f"{api_version} {kwargs} is not served") from e

    def _get(self, res, namespace: str, name: str) -> Dict[str, Any]:
        try:
            if res.namespaced:
                return res.get(name=name, namespace=namespace).to_dict()
            return res.get(name=name).to_dict()
        except NotFoundError as e:
            raise ResourceNotFoundError(f"{res.kind} {namespace}/{name} not found") from e
        except ApiException as e:
            raise ClusterError(f"failed to get {res.kind} {namespace}/{name}: {e.status} {e.reason}") from e

    def _list(self, res, namespace: str) -> List[Dict[str, Any]]:
        try:
            items = res.get(namespace=namespace).to_dict().get("items") or []
        except NotFoundError as e:
            raise ResourceNotFoundError(f"{res.kind} is not served in {namespace}") from e
        except ApiException as e:
            raise ClusterError(f"failed to list {res.kind} in {namespace}: {e.status} {e.reason}") from e
        # list items do not carry apiVersion/kind
        for item in items:
            item.setdefault("apiVersion", res.group_version)
            item.setdefault("kind", res.kind)
        return items

    def fetch_object(self, namespace: str, gvr: GroupVersionResource, name: str) -> Dict[str, Any]:
        res = self._resource(gvr.api_version, name=gvr.resource)
        return self._get(res, namespace, name)

    def fetch_type_definition(self, gvr: GroupVersionResource) -> Dict[str, Any]:
        if not gvr.group:
            raise ResourceNotFoundError(f"core type {gvr.resource} has no CustomResourceDefinition")
        res = self._resource(CRD_API_VERSION, kind="CustomResourceDefinition")
        return self._get(res, "", f"{gvr.resource}.{gvr.group}")

    def fetch_type_description(
        self, namespace: str, gvk: GroupVersionKind, crd: Dict[str, Any]
    ) -> Dict[str, Any]:
        res = self._resource(CSV_API_VERSION, kind="ClusterServiceVersion")
        csvs = self._list(res, namespace)
        crd_name = crd.get("metadata", {}).get("name", "")
        description = find_crd_description(csvs, crd_name, gvk)
        if description is None:
            raise ResourceNotFoundError(f"no CRDDescription for {crd_name} in {namespace}")
        return description

    def list_owned(
        self, namespace: str, owner_uid: str, resource_types: Sequence[GroupVersionResource]
    ) -> List[Dict[str, Any]]:
        owned: List[Dict[str, Any]] = []
        for gvr in resource_types:
            try:
                res = self._resource(gvr.api_version, name=gvr.resource)
                items = self._list(res, namespace)
            except ResourceNotFoundError:
                # e.g. routes on a cluster without OpenShift
                continue
            except ClusterError as e:
                raise OwnedResourceListError(f"failed listing resources owned by {owner_uid}: {e}") from e
            owned.extend(obj for obj in items if owned_by(obj, owner_uid))
        return owned

    def fetch_csv(self, namespace: str, name: str) -> Dict[str, Any]:
        res = self._resource(CSV_API_VERSION, kind="ClusterServiceVersion")
        return self._get(res, namespace, name)
