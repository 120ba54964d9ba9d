"""
Data model for service binding.

ServiceContext is the unit handed to callers: a patched copy of the backing
service resource plus the variables derived from its binding annotations.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def _api_version(group: str, version: str) -> str:
    return f"{group}/{version}" if group else version


@dataclass(frozen=True)
class GroupVersionKind:
    group: str
    version: str
    kind: str

    @property
    def api_version(self) -> str:
        return _api_version(self.group, self.version)

    @staticmethod
    def from_object(obj: Dict[str, Any]) -> "GroupVersionKind":
        """Derive the GVK of a resource document from apiVersion/kind."""
        api_version = obj.get("apiVersion", "")
        if "/" in api_version:
            group, version = api_version.split("/", 1)
        else:
            group, version = "", api_version
        return GroupVersionKind(group=group, version=version, kind=obj.get("kind", ""))

    def __str__(self) -> str:
        return f"{self.api_version}, Kind={self.kind}"


@dataclass(frozen=True)
class GroupVersionResource:
    group: str
    version: str
    resource: str

    @property
    def api_version(self) -> str:
        return _api_version(self.group, self.version)

    @staticmethod
    def parse(value: str) -> "GroupVersionResource":
        """
        Parse "group/version/resource" or "version/resource" (core group).

        Raises:
            ValueError: If value has neither form
        """
        parts = [p.strip() for p in value.strip().split("/")]
        if len(parts) == 2:
            return GroupVersionResource(group="", version=parts[0], resource=parts[1])
        if len(parts) == 3:
            return GroupVersionResource(group=parts[0], version=parts[1], resource=parts[2])
        raise ValueError(f"invalid resource type {value!r}, expected group/version/resource")

    def __str__(self) -> str:
        return f"{self.api_version}, Resource={self.resource}"


@dataclass(frozen=True)
class ServiceSelector:
    """
    Declarative reference to a backing service.

    Either kind or resource (plural) identifies the type; namespace defaults
    to the binding's namespace and id overrides the naming prefix.
    """
    name: str
    kind: Optional[str] = None
    group: str = ""
    version: str = "v1"
    resource: Optional[str] = None
    namespace: Optional[str] = None
    id: Optional[str] = None

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "ServiceSelector":
        """Build a selector from a ServiceBinding spec.services[] entry."""
        return ServiceSelector(
            name=data["name"],
            kind=data.get("kind"),
            group=data.get("group", "") or "",
            version=data.get("version", "v1") or "v1",
            resource=data.get("resource"),
            namespace=data.get("namespace"),
            id=data.get("id"),
        )

    def namespace_or(self, default: str) -> str:
        if self.namespace:
            return self.namespace
        return default


@dataclass
class HandlerResult:
    """Output of one binding handler: a document patch and derived variables."""
    raw_data: Dict[str, Any] = field(default_factory=dict)
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class OwnedResourceQuery:
    namespace: str
    owner_uid: str


@dataclass
class ServiceContext:
    """
    Resolved binding data for one backing service.

    Fields:
        service: Patched copy of the service resource (never the fetched object)
        env_vars: Variables contributed by the service's binding annotations
        naming_template: Template used later to derive variable names
        bind_as_files: Project variables as files instead of env vars
        id: Name the service can be referred to by in custom variables
        name_prefix: Prefix that keeps variable names of different services apart
        owned_by: UID of the selected service when discovered as an owned resource
    """
    service: Dict[str, Any]
    env_vars: Dict[str, Any]
    naming_template: str
    bind_as_files: bool = False
    id: Optional[str] = None
    name_prefix: str = ""
    owned_by: Optional[str] = None

    @property
    def kind(self) -> str:
        return self.service.get("kind", "")

    @property
    def name(self) -> str:
        return self.service.get("metadata", {}).get("name", "")

    @property
    def namespace(self) -> str:
        return self.service.get("metadata", {}).get("namespace", "")

    @property
    def uid(self) -> str:
        return self.service.get("metadata", {}).get("uid", "")

    def qualified_env_vars(self) -> Dict[str, Any]:
        """
        Top-level variables keyed by PREFIX_NAME (upper case).

        Nested values are kept as-is; rendering of the naming template happens
        outside the engine.
        """
        prefix = (self.name_prefix or self.kind).upper()
        out = {}
        for key, value in self.env_vars.items():
            name = f"{prefix}_{key}" if prefix else key
            out[name.upper()] = value
        return out


@dataclass(frozen=True)
class AnnotationOutcome:
    """What happened to one annotation of one service."""
    service: str
    key: str
    outcome: str  # applied | skipped | ignored
    error: Optional[str] = None


@dataclass(frozen=True)
class SkippedSelector:
    selector: ServiceSelector
    reason: str


class ServiceContextList(list):
    """Ordered ServiceContext values: selector order, then owned discovery order."""

    def __init__(self, contexts=()):
        super().__init__(contexts)
        self.skipped: List[SkippedSelector] = []
        self.outcomes: List[AnnotationOutcome] = []

    def extend_from(self, other: "ServiceContextList") -> None:
        self.extend(other)
        self.skipped.extend(other.skipped)
        self.outcomes.extend(other.outcomes)

    def services(self) -> List[Dict[str, Any]]:
        """Return the patched service documents held by the contexts."""
        return [ctx.service for ctx in self]


def copy_document(obj: Dict[str, Any]) -> Dict[str, Any]:
    """Deep copy a resource document."""
    return copy.deepcopy(obj)
