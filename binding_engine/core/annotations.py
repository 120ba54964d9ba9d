"""
Annotation collection.

Binding annotations come from up to three layers, lowest priority first:
1. derived from the OLM CRDDescription of the service's CRD
2. the CustomResourceDefinition object's own annotations
3. the service instance's own annotations

A higher layer replaces a lower layer's value for the same key.
"""

from typing import Any, Dict, Iterable, List, Optional

ANNOTATION_PREFIX = "service.binding"

SECRET_DESCRIPTOR = "urn:alm:descriptor:io.kubernetes:Secret"
CONFIGMAP_DESCRIPTOR = "urn:alm:descriptor:io.kubernetes:ConfigMap"

# Binding annotations applied to resources discovered through owner references.
OWNED_KIND_ANNOTATIONS: Dict[str, Dict[str, str]] = {
    "Secret": {ANNOTATION_PREFIX: "path={.data},elementType=map,valueEncoding=base64"},
    "ConfigMap": {ANNOTATION_PREFIX: "path={.data},elementType=map"},
    "Service": {f"{ANNOTATION_PREFIX}/clusterIP": "path={.spec.clusterIP}"},
    "Route": {f"{ANNOTATION_PREFIX}/host": "path={.spec.host}"},
}


def collect_annotations(*layers: Optional[Dict[str, str]]) -> Dict[str, str]:
    """
    Layer annotation maps given from lowest to highest priority.

    Missing layers (None) are treated as empty.
    """
    merged: Dict[str, str] = {}
    for layer in layers:
        if not layer:
            continue
        for key, value in layer.items():
            merged[key] = value
    return merged


def sorted_keys(annotations: Dict[str, str]) -> List[str]:
    return sorted(annotations.keys())


def owned_kind_annotations(kind: str) -> Dict[str, str]:
    return dict(OWNED_KIND_ANNOTATIONS.get(kind, {}))


def _descriptor_annotation(root: str, descriptor: Dict[str, Any]) -> Dict[str, str]:
    path = descriptor.get("path")
    x_descriptors: Iterable[str] = descriptor.get("x-descriptors") or []
    if not path:
        return {}

    object_type = None
    if SECRET_DESCRIPTOR in x_descriptors:
        object_type = "Secret"
    elif CONFIGMAP_DESCRIPTOR in x_descriptors:
        object_type = "ConfigMap"

    out: Dict[str, str] = {}
    for xd in x_descriptors:
        if xd != ANNOTATION_PREFIX and not xd.startswith(ANNOTATION_PREFIX + ":"):
            continue
        parts = xd.split(":")[1:]
        name = ""
        options = []
        for part in parts:
            if "=" in part:
                options.append(part)
            elif not name:
                name = part
        key = f"{ANNOTATION_PREFIX}/{name}" if name else ANNOTATION_PREFIX
        value = [f"path={{.{root}.{path}}}"]
        if object_type and not any(o.startswith("objectType=") for o in options):
            value.append(f"objectType={object_type}")
        value.extend(options)
        out[key] = ",".join(value)
    return out


def descriptors_to_annotations(crd_description: Optional[Dict[str, Any]]) -> Dict[str, str]:
    """
    Convert an OLM CRDDescription into binding annotations.

    An x-descriptor "service.binding:username" on the spec descriptor with
    path "user" yields {"service.binding/username": "path={.spec.user}"}.
    Secret and ConfigMap descriptors add the matching objectType option.
    """
    if not crd_description:
        return {}
    anns: Dict[str, str] = {}
    for root, field_name in (("spec", "specDescriptors"), ("status", "statusDescriptors")):
        for descriptor in crd_description.get(field_name) or []:
            anns.update(_descriptor_annotation(root, descriptor))
    return anns


def object_annotations(obj: Optional[Dict[str, Any]]) -> Dict[str, str]:
    if not obj:
        return {}
    return dict(obj.get("metadata", {}).get("annotations") or {})
