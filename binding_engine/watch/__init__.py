"""Dynamic watch registration driven by ClusterServiceVersions."""

from .mapper import CSVWatchMapper, kinds_from_csv
from .registry import WatchRegistry

__all__ = ["CSVWatchMapper", "WatchRegistry", "kinds_from_csv"]
