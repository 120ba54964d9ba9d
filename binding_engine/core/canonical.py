"""
Canonical serialization of service contexts.

Two builds from the same inputs must serialize to identical bytes, which is
how determinism of annotation processing is checked and how the CLI prints
contexts.
"""

import json
from typing import Any, Dict, Iterable, List

from .model import ServiceContext


def canonicalize(obj: Any) -> Any:
    """
    Convert arbitrary nested dict/list to canonical form.

    Rules:
    - dict keys sorted alphabetically
    - tuples converted to lists
    - recursive normalization
    """
    if isinstance(obj, dict):
        return {k: canonicalize(obj[k]) for k in sorted(obj.keys())}
    if isinstance(obj, (list, tuple)):
        return [canonicalize(x) for x in obj]
    return obj


def context_to_dict(ctx: ServiceContext) -> Dict[str, Any]:
    return {
        "service": ctx.service,
        "envVars": ctx.env_vars,
        "namingTemplate": ctx.naming_template,
        "bindAsFiles": ctx.bind_as_files,
        "id": ctx.id,
        "namePrefix": ctx.name_prefix,
        "ownedBy": ctx.owned_by,
    }


def contexts_to_canonical(contexts: Iterable[ServiceContext]) -> List[Any]:
    """Canonical form of a context list; list order is preserved."""
    return [canonicalize(context_to_dict(ctx)) for ctx in contexts]


def canonical_json_str(obj: Any) -> str:
    """Deterministic JSON string (sorted keys, no whitespace, UTF-8 kept)."""
    return json.dumps(canonicalize(obj), sort_keys=True, separators=(",", ":"), ensure_ascii=False)
