"""
ClusterServiceVersion to watch mapping.

When a CSV changes, the CRDs it owns are new candidate backing service
kinds; each one is added to the controller's watch set. The mapper never
produces reconcile requests of its own.
"""

from typing import Any, Dict, List, Optional

from ..core.errors import BindingError, WatchRegistrationError
from ..core.model import GroupVersionKind
from ..core.ports import Cluster
from .registry import StartWatch, WatchRegistry


def kinds_from_csv(csv: Dict[str, Any]) -> List[GroupVersionKind]:
    """
    Extract GVKs of the CRDs owned by a ClusterServiceVersion.

    The group is the CRD name without its plural, e.g.
    "databases.postgresql.example.com" -> "postgresql.example.com".
    Duplicates are dropped, order is kept.
    """
    crds = ((csv.get("spec") or {}).get("customresourcedefinitions") or {}).get("owned") or []
    out: List[GroupVersionKind] = []
    for crd in crds:
        name = crd.get("name") or ""
        _, sep, group = name.partition(".")
        if not sep or not group or not crd.get("version") or not crd.get("kind"):
            continue
        gvk = GroupVersionKind(group=group, version=crd["version"], kind=crd["kind"])
        if gvk not in out:
            out.append(gvk)
    return out


class CSVWatchMapper:
    """Maps CSV notifications to new watches on the controller."""

    def __init__(self, registry: WatchRegistry, cluster: Cluster, start_watch: Optional[StartWatch], logger):
        self.registry = registry
        self.cluster = cluster
        self.start_watch = start_watch
        self.logger = logger

    def add_watch_for_gvk(self, gvk: GroupVersionKind) -> bool:
        """
        Watch gvk unless already watched.

        Raises:
            WatchRegistrationError: If the watch cannot be started
        """
        try:
            return self.registry.register_if_absent(gvk, self.start_watch)
        except WatchRegistrationError:
            raise
        except Exception as e:
            raise WatchRegistrationError(f"failed to watch {gvk}: {e}") from e

    def list_gvks(self, namespace: str, name: str) -> List[GroupVersionKind]:
        csv = self.cluster.fetch_csv(namespace, name)
        return kinds_from_csv(csv)

    def map(self, namespace: str, name: str) -> list:
        """
        Register watches for every CRD owned by CSV namespace/name.

        Returns:
            Always an empty list of reconcile requests
        """
        ref = f"{namespace}/{name}"
        try:
            gvks = self.list_gvks(namespace, name)
        except BindingError as e:
            self.logger.error(f"Failed on listing GVK for CSV {ref}: {e}")
            return []

        for gvk in gvks:
            try:
                added = self.add_watch_for_gvk(gvk)
            except WatchRegistrationError as e:
                self.logger.error(f"Failed to create a watch for {gvk} from CSV {ref}: {e}")
                continue
            if added:
                self.logger.info(f"Added watch for {gvk} from CSV {ref}")
            else:
                self.logger.debug(f"Already watching {gvk}")
        return []
