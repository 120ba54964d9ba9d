"""
Binding handler dispatch.

An annotation such as

    service.binding/username: path={.spec.user}
    service.binding/credentials: path={.status.secret},objectType=Secret
    service.binding/urls: path={.status.endpoints},elementType=sliceOfMaps,sourceKey=type,sourceValue=url

is parsed into a handler variant; each variant extracts its value from the
service instance and returns a HandlerResult.
"""

import base64
import binascii
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..core.annotations import ANNOTATION_PREFIX
from ..core.errors import (
    EmptyAnnotationNameError,
    HandlerExecutionError,
    HandlerNotFoundError,
    InvalidAnnotationValueError,
    ResourceNotFoundError,
)
from ..core.model import GroupVersionResource, HandlerResult
from ..core.ports import Cluster
from .path import get_path, nest, parse_path

SECRETS = GroupVersionResource(group="", version="v1", resource="secrets")
CONFIGMAPS = GroupVersionResource(group="", version="v1", resource="configmaps")

OBJECT_TYPES = {"Secret": SECRETS, "ConfigMap": CONFIGMAPS}
KNOWN_OPTIONS = ("path", "objectType", "elementType", "sourceKey", "sourceValue", "valueEncoding")


@dataclass
class BindingAnnotation:
    """Parsed binding annotation."""
    name: str
    path: List[str]
    options: Dict[str, str] = field(default_factory=dict)

    def option(self, key: str) -> Optional[str]:
        return self.options.get(key)


def parse_annotation_name(key: str) -> str:
    """
    Return the variable name carried by a binding annotation key.

    "service.binding" yields "" (name derived from the value later).

    Raises:
        HandlerNotFoundError: If key does not carry the binding prefix
        EmptyAnnotationNameError: If key is "service.binding/" without a name
    """
    if key == ANNOTATION_PREFIX:
        return ""
    if not key.startswith(ANNOTATION_PREFIX + "/"):
        raise HandlerNotFoundError(f"no handler for annotation {key!r}")
    name = key[len(ANNOTATION_PREFIX) + 1:].strip()
    if not name:
        raise EmptyAnnotationNameError(f"annotation {key!r} has an empty name")
    return name


def parse_annotation_value(value: str) -> Dict[str, str]:
    """
    Parse "path={.a.b},option=value,..." into a dict.

    Raises:
        InvalidAnnotationValueError: On empty value, missing path or unknown options
    """
    if not value or not value.strip():
        raise InvalidAnnotationValueError("annotation value is empty")
    options: Dict[str, str] = {}
    for part in value.split(","):
        part = part.strip()
        if not part:
            continue
        key, sep, val = part.partition("=")
        if not sep:
            raise InvalidAnnotationValueError(f"expected option=value, got {part!r}")
        key = key.strip()
        if key not in KNOWN_OPTIONS:
            raise InvalidAnnotationValueError(f"unknown option {key!r}")
        options[key] = val.strip()
    if not options.get("path"):
        raise InvalidAnnotationValueError(f"annotation value {value!r} has no path")
    return options


class Handler(ABC):
    def __init__(self, annotation: BindingAnnotation, obj: Dict[str, Any]):
        self.annotation = annotation
        self.obj = obj

    @abstractmethod
    def handle(self) -> HandlerResult:
        ...

    def _value(self) -> Any:
        return get_path(self.obj, self.annotation.path)

    def _data(self, value: Any) -> Dict[str, Any]:
        name = self.annotation.name
        if name:
            return {name: value}
        if isinstance(value, dict):
            return dict(value)
        return {self.annotation.path[-1]: value}


class AttributeHandler(Handler):
    """Binds the value found at path as-is."""

    def handle(self) -> HandlerResult:
        return HandlerResult(data=self._data(self._value()))


class MapHandler(Handler):
    def handle(self) -> HandlerResult:
        value = self._value()
        if not isinstance(value, dict):
            raise HandlerExecutionError(
                f"expected a map at {self._path_str()}, got {type(value).__name__}"
            )
        if self.annotation.option("valueEncoding") == "base64":
            value = _decode_values(value)
        return HandlerResult(data=self._data(value))

    def _path_str(self) -> str:
        return "." + ".".join(self.annotation.path)


class SliceOfMapsHandler(Handler):
    """Turns [{sourceKey: k, sourceValue: v}, ...] into {k: v, ...}."""

    def handle(self) -> HandlerResult:
        source_key = self.annotation.option("sourceKey")
        source_value = self.annotation.option("sourceValue")
        if not source_key or not source_value:
            raise HandlerExecutionError("sliceOfMaps requires sourceKey and sourceValue")
        items = _list_at(self._value(), self.annotation.path)
        out: Dict[str, Any] = {}
        for item in items:
            if not isinstance(item, dict) or source_key not in item or source_value not in item:
                raise HandlerExecutionError(
                    f"item {item!r} lacks {source_key!r} or {source_value!r}"
                )
            out[str(item[source_key])] = item[source_value]
        return HandlerResult(data=self._data(out))


class SliceOfStringsHandler(Handler):
    def handle(self) -> HandlerResult:
        items = _list_at(self._value(), self.annotation.path)
        source_value = self.annotation.option("sourceValue")
        if source_value:
            values = []
            for item in items:
                if not isinstance(item, dict) or source_value not in item:
                    raise HandlerExecutionError(f"item {item!r} lacks {source_value!r}")
                values.append(item[source_value])
        else:
            values = list(items)
        return HandlerResult(data=self._data([str(v) for v in values]))


class ResourceHandler(Handler):
    """
    Resolves a Secret or ConfigMap referenced by name at path.

    The resolved data replaces the reference in the returned patch.
    """

    def __init__(self, annotation: BindingAnnotation, obj: Dict[str, Any], cluster: Cluster, gvr: GroupVersionResource):
        super().__init__(annotation, obj)
        self.cluster = cluster
        self.gvr = gvr

    def handle(self) -> HandlerResult:
        ref = self._value()
        if not isinstance(ref, str) or not ref:
            raise HandlerExecutionError(f"expected a resource name, got {ref!r}")
        namespace = self.obj.get("metadata", {}).get("namespace", "")
        try:
            referenced = self.cluster.fetch_object(namespace, self.gvr, ref)
        except ResourceNotFoundError as e:
            raise HandlerExecutionError(f"{self.gvr.resource} {namespace}/{ref} not found") from e

        data = dict(referenced.get("data") or {})
        if self.gvr == SECRETS:
            data = _decode_values(data)
        return HandlerResult(
            raw_data=nest(self.annotation.path, data),
            data=self._data(data),
        )


def _list_at(value: Any, path: List[str]) -> List[Any]:
    if not isinstance(value, list):
        raise HandlerExecutionError(
            f"expected a list at .{'.'.join(path)}, got {type(value).__name__}"
        )
    return value


def _b64decode(value: Any) -> Any:
    """
    Decode a base64 Secret value to text.

    Values that do not decode to UTF-8 text (keystores, certificates in DER
    form) are returned still encoded.
    """
    try:
        return base64.b64decode(value, validate=True).decode("utf-8")
    except (binascii.Error, TypeError, ValueError):
        return value


def _decode_values(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: _b64decode(v) for k, v in data.items()}


def new_handler(cluster: Cluster, key: str, value: str, obj: Dict[str, Any]) -> Handler:
    """
    Select the handler variant for an annotation.

    Raises:
        HandlerNotFoundError: Key without binding prefix, unknown objectType/elementType
        EmptyAnnotationNameError: Prefixed key without a name
        InvalidAnnotationValueError: Malformed value
    """
    name = parse_annotation_name(key)
    options = parse_annotation_value(value)
    annotation = BindingAnnotation(name=name, path=parse_path(options["path"]), options=options)

    object_type = options.get("objectType")
    if object_type:
        gvr = OBJECT_TYPES.get(object_type)
        if gvr is None:
            raise HandlerNotFoundError(f"no handler for objectType {object_type!r}")
        return ResourceHandler(annotation, obj, cluster, gvr)

    element_type = options.get("elementType")
    if element_type is None:
        return AttributeHandler(annotation, obj)
    if element_type == "map":
        return MapHandler(annotation, obj)
    if element_type == "sliceOfMaps":
        return SliceOfMapsHandler(annotation, obj)
    if element_type == "sliceOfStrings":
        return SliceOfStringsHandler(annotation, obj)
    raise HandlerNotFoundError(f"no handler for elementType {element_type!r}")
