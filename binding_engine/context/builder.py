"""
Service context list construction for a set of selectors.

Selectors are processed strictly in declaration order. A selector whose
annotations cannot be understood is skipped; any other failure aborts the
whole build so the reconciliation is retried.
"""

from typing import Iterable, Sequence

from ..core.errors import BindingError, is_skippable_selector_error
from ..core.model import (
    GroupVersionResource,
    OwnedResourceQuery,
    ServiceContextList,
    ServiceSelector,
    SkippedSelector,
)
from ..core.ports import Cluster, TypeLookup
from .owned import DEFAULT_OWNED_RESOURCE_TYPES, find_owned_resource_contexts
from .service import build_service_context


def build_service_contexts(
    cluster: Cluster,
    type_lookup: TypeLookup,
    default_namespace: str,
    selectors: Iterable[ServiceSelector],
    include_owned_resources: bool,
    bind_as_files: bool,
    naming_template: str,
    logger,
    owned_resource_types: Sequence[GroupVersionResource] = DEFAULT_OWNED_RESOURCE_TYPES,
) -> ServiceContextList:
    """
    Build service contexts for selectors, followed by their owned resources.

    Returns:
        ServiceContextList in selector order; each selector's owned resource
        contexts directly follow its own context. Skipped selectors are
        recorded in the list's `skipped` attribute.

    Raises:
        TypeNotFoundError: If a selector's type cannot be resolved
        OwnedResourceListError: If owned resources cannot be listed
        MergeError: If handler output cannot be merged
    """
    contexts = ServiceContextList()

    for selector in selectors:
        ns = selector.namespace_or(default_namespace)
        gvr = type_lookup.resource_for_selector(selector)
        gvk = type_lookup.kind_for_resource(gvr)

        try:
            ctx = build_service_context(
                cluster,
                type_lookup,
                ns,
                gvk,
                selector.name,
                naming_template,
                bind_as_files,
                logger,
                id=selector.id,
                outcomes=contexts.outcomes,
            )
        except BindingError as e:
            # empty annotation names and missing handlers abandon this selector only
            if is_skippable_selector_error(e):
                logger.debug(f"Continuing to next selector after {gvk.kind} {ns}/{selector.name}: {e}")
                contexts.skipped.append(SkippedSelector(selector=selector, reason=str(e)))
                continue
            raise
        contexts.append(ctx)

        if include_owned_resources:
            owned = find_owned_resource_contexts(
                cluster,
                type_lookup,
                OwnedResourceQuery(namespace=ns, owner_uid=ctx.uid),
                naming_template,
                bind_as_files,
                logger,
                resource_types=owned_resource_types,
            )
            contexts.extend_from(owned)

    return contexts
