"""
ServiceBinding reconciliation.

Builds the service contexts of a ServiceBinding and summarizes them for the
binding's status. Projecting the variables into the workload happens
elsewhere.
"""

from typing import Any, Dict, List, Optional

from binding_engine.context import build_service_contexts
from binding_engine.core import (
    Cluster,
    GroupVersionKind,
    GroupVersionResource,
    ServiceContextList,
    ServiceSelector,
    TypeLookup,
    TypeNotFoundError,
)
from .metrics import track_build_duration, track_contexts
from .settings import OperatorConfig


def selectors_from_spec(spec: Dict[str, Any]) -> List[ServiceSelector]:
    return [ServiceSelector.from_dict(s) for s in spec.get("services") or []]


def build_binding_contexts(
    spec: Dict[str, Any],
    namespace: str,
    cluster: Cluster,
    type_lookup: TypeLookup,
    config: OperatorConfig,
    logger,
) -> ServiceContextList:
    with track_build_duration():
        contexts = build_service_contexts(
            cluster,
            type_lookup,
            namespace,
            selectors_from_spec(spec),
            include_owned_resources=bool(spec.get("detectBindingResources", False)),
            bind_as_files=bool(spec.get("bindAsFiles", False)),
            naming_template=spec.get("namingStrategy") or config.naming_template,
            logger=logger,
            owned_resource_types=config.owned_resource_types,
        )
    track_contexts(contexts)
    return contexts


def summarize(contexts: ServiceContextList) -> Dict[str, Any]:
    """Status summary of built contexts; variable values are never included."""
    return {
        "services": [
            {
                "kind": ctx.kind,
                "name": ctx.name,
                "namespace": ctx.namespace,
                "prefix": ctx.name_prefix,
                "variables": sorted(ctx.env_vars.keys()),
            }
            for ctx in contexts
        ],
        "skippedSelectors": [
            {"name": s.selector.name, "kind": s.selector.kind or s.selector.resource, "reason": s.reason}
            for s in contexts.skipped
        ],
    }


def reconcile_binding(
    spec: Dict[str, Any],
    name: str,
    namespace: str,
    cluster: Cluster,
    type_lookup: TypeLookup,
    config: OperatorConfig,
    logger,
) -> Dict[str, Any]:
    """
    Build service contexts for ServiceBinding namespace/name.

    Raises:
        BindingError: For fatal build failures (the binding is retried)
    """
    logger.info(f"Building service contexts for ServiceBinding {namespace}/{name}")
    contexts = build_binding_contexts(spec, namespace, cluster, type_lookup, config, logger)
    if contexts.skipped:
        logger.warning(f"ServiceBinding {namespace}/{name}: skipped {len(contexts.skipped)} selectors")
    logger.info(f"ServiceBinding {namespace}/{name}: built {len(contexts)} service contexts")
    return summarize(contexts)


def _selected_kind(selector: ServiceSelector, type_lookup: TypeLookup) -> Optional[GroupVersionKind]:
    if selector.kind:
        return GroupVersionKind(group=selector.group, version=selector.version, kind=selector.kind)
    if not selector.resource:
        return None
    gvr = GroupVersionResource(group=selector.group, version=selector.version, resource=selector.resource)
    try:
        return type_lookup.kind_for_resource(gvr)
    except TypeNotFoundError:
        return None


def binding_references(
    spec: Dict[str, Any],
    binding_namespace: str,
    gvk: GroupVersionKind,
    namespace: str,
    name: str,
    type_lookup: TypeLookup,
) -> bool:
    """
    True if the binding selects the backing service gvk namespace/name.

    Selectors naming a resource (plural) instead of a kind are resolved
    through type_lookup.
    """
    for selector in selectors_from_spec(spec):
        if selector.name != name or selector.namespace_or(binding_namespace) != namespace:
            continue
        if _selected_kind(selector, type_lookup) == gvk:
            return True
    return False
