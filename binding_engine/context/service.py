"""
Service context construction for a single backing service.

The service instance, its CRD and the CRD's OLM description are inspected;
binding annotations found on them are processed in key order, each one
through its handler and the merge engine.
"""

from typing import Any, Dict, List, Optional

from ..binding.handlers import new_handler
from ..core.annotations import (
    ANNOTATION_PREFIX,
    collect_annotations,
    descriptors_to_annotations,
    object_annotations,
    sorted_keys,
)
from ..core.errors import BindingError, MergeError, ResourceNotFoundError
from ..core.merge import merge_object, merge_variables
from ..core.model import (
    AnnotationOutcome,
    GroupVersionKind,
    GroupVersionResource,
    ServiceContext,
    copy_document,
)
from ..core.ports import Cluster, TypeLookup


def run_handler(
    cluster: Cluster,
    obj: Dict[str, Any],
    output_obj: Dict[str, Any],
    key: str,
    value: str,
    env_vars: Dict[str, Any],
) -> Dict[str, Any]:
    """
    Dispatch one annotation and fold its result into the accumulated state.

    env_vars is updated in place; the new output document is returned.
    """
    handler = new_handler(cluster, key, value, obj)
    result = handler.handle()
    new_obj = merge_object(output_obj, result.raw_data)
    merge_variables(env_vars, result.data)
    return new_obj


def collect_service_annotations(
    cluster: Cluster,
    namespace: str,
    gvk: GroupVersionKind,
    gvr: GroupVersionResource,
    obj: Dict[str, Any],
    default_annotations: Optional[Dict[str, str]] = None,
) -> Dict[str, str]:
    """
    Gather binding annotations for obj, lowest priority first:
    defaults and CRDDescription descriptors, CRD annotations, own annotations.
    """
    description_anns: Dict[str, str] = dict(default_annotations or {})
    type_anns: Dict[str, str] = {}

    # without a CRD there is no CRDDescription worth looking for
    try:
        crd = cluster.fetch_type_definition(gvr)
    except ResourceNotFoundError:
        crd = None

    if crd is not None:
        try:
            description = cluster.fetch_type_description(namespace, gvk, crd)
        except ResourceNotFoundError:
            description = None
        description_anns = collect_annotations(description_anns, descriptors_to_annotations(description))
        type_anns = object_annotations(crd)

    return collect_annotations(description_anns, type_anns, object_annotations(obj))


def _is_binding_key(key: str) -> bool:
    return key == ANNOTATION_PREFIX or key.startswith(ANNOTATION_PREFIX + "/")


def build_service_context(
    cluster: Cluster,
    type_lookup: TypeLookup,
    namespace: str,
    gvk: GroupVersionKind,
    name: str,
    naming_template: str,
    bind_as_files: bool,
    logger,
    id: Optional[str] = None,
    name_prefix: Optional[str] = None,
    default_annotations: Optional[Dict[str, str]] = None,
    outcomes: Optional[List[AnnotationOutcome]] = None,
) -> ServiceContext:
    """
    Build the ServiceContext of one backing service.

    Args:
        namespace: Namespace of the service
        gvk: Kind of the service
        name: Name of the service
        id: Optional name the service is referred to by
        name_prefix: Variable name prefix; defaults to id, then kind
        default_annotations: Lowest priority annotations (owned resources)
        outcomes: When given, receives one AnnotationOutcome per annotation

    Raises:
        TypeNotFoundError: If gvk is not served
        ResourceNotFoundError: If the service does not exist
        MergeError: If handler output cannot be merged
    """
    gvr = type_lookup.resource_for_kind(gvk)
    obj = cluster.fetch_object(namespace, gvr, name)
    ref = f"{gvk.kind} {namespace}/{name}"

    anns = collect_service_annotations(cluster, namespace, gvk, gvr, obj, default_annotations)

    env_vars: Dict[str, Any] = {}
    # output_obj keeps the changes produced by handlers; obj stays untouched
    output_obj = copy_document(obj)

    for key in sorted_keys(anns):
        try:
            output_obj = run_handler(cluster, obj, output_obj, key, anns[key], env_vars)
        except MergeError:
            raise
        except BindingError as e:
            if _is_binding_key(key):
                logger.debug(f"Failed executing handler for {ref} annotation {key}: {e}")
                outcome = AnnotationOutcome(service=ref, key=key, outcome="skipped", error=str(e))
            else:
                outcome = AnnotationOutcome(service=ref, key=key, outcome="ignored")
            if outcomes is not None:
                outcomes.append(outcome)
            continue
        if outcomes is not None:
            outcomes.append(AnnotationOutcome(service=ref, key=key, outcome="applied"))

    logger.debug(f"Built service context for {ref} with {len(env_vars)} variables")
    return ServiceContext(
        service=output_obj,
        env_vars=env_vars,
        naming_template=naming_template,
        bind_as_files=bind_as_files,
        id=id,
        name_prefix=name_prefix or id or gvk.kind,
    )
