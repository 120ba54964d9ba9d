"""OLM ClusterServiceVersion helpers."""

from typing import Any, Dict, Iterable, Optional

from binding_engine.core import GroupVersionKind


def find_crd_description(
    csvs: Iterable[Dict[str, Any]], crd_name: str, gvk: GroupVersionKind
) -> Optional[Dict[str, Any]]:
    """
    Find the owned CRDDescription for crd_name and gvk among CSVs.

    Returns:
        The CRDDescription document, or None when no CSV describes the CRD
    """
    for csv in csvs:
        owned = ((csv.get("spec") or {}).get("customresourcedefinitions") or {}).get("owned") or []
        for description in owned:
            if (
                description.get("name") == crd_name
                and description.get("version") == gvk.version
                and description.get("kind") == gvk.kind
            ):
                return description
    return None
