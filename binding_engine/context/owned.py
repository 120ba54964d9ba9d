"""
Owned resource discovery.

Resources whose ownerReferences point at a selected service are bound too,
each under its own kind so their variables never collide with the parent's.
Only one owner level is followed.
"""

from typing import Sequence

from ..core.annotations import owned_kind_annotations
from ..core.model import (
    GroupVersionKind,
    GroupVersionResource,
    OwnedResourceQuery,
    ServiceContextList,
)
from ..core.ports import Cluster, TypeLookup
from .service import build_service_context

DEFAULT_OWNED_RESOURCE_TYPES = (
    GroupVersionResource(group="", version="v1", resource="secrets"),
    GroupVersionResource(group="", version="v1", resource="configmaps"),
    GroupVersionResource(group="", version="v1", resource="services"),
    GroupVersionResource(group="route.openshift.io", version="v1", resource="routes"),
)


def find_owned_resource_contexts(
    cluster: Cluster,
    type_lookup: TypeLookup,
    query: OwnedResourceQuery,
    naming_template: str,
    bind_as_files: bool,
    logger,
    resource_types: Sequence[GroupVersionResource] = DEFAULT_OWNED_RESOURCE_TYPES,
) -> ServiceContextList:
    """
    Build one ServiceContext per resource owned by query.owner_uid.

    Raises:
        OwnedResourceListError: If owned resources cannot be listed
    """
    owned = cluster.list_owned(query.namespace, query.owner_uid, resource_types)
    logger.debug(f"Found {len(owned)} resources owned by {query.owner_uid} in {query.namespace}")

    contexts = ServiceContextList()
    for obj in owned:
        gvk = GroupVersionKind.from_object(obj)
        meta = obj.get("metadata", {})
        if meta.get("uid") == query.owner_uid:
            continue
        ctx = build_service_context(
            cluster,
            type_lookup,
            meta.get("namespace") or query.namespace,
            gvk,
            meta["name"],
            naming_template,
            bind_as_files,
            logger,
            name_prefix=gvk.kind,
            default_annotations=owned_kind_annotations(gvk.kind),
            outcomes=contexts.outcomes,
        )
        ctx.owned_by = query.owner_uid
        contexts.append(ctx)
    return contexts
