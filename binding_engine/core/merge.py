"""
Merge engine.

Two merge policies are applied for every processed annotation:
- merge_object folds a handler's document patch into the accumulated service
  copy: the fresh patch is taken first, then previously accumulated fields
  are reasserted wherever the patch left them missing or empty.
- merge_variables folds derived variables into the accumulated variable map:
  lists are appended, mappings are merged recursively and other values are
  overridden.
"""

import copy
from typing import Any, Dict

from .errors import MergeError


def is_empty(value: Any) -> bool:
    """Values that never override and are always filled by a merge."""
    if value is None:
        return True
    if isinstance(value, (str, list, dict)) and len(value) == 0:
        return True
    return False


def _fill_missing(dst: Dict[str, Any], src: Dict[str, Any]) -> None:
    for key, value in src.items():
        if key not in dst or is_empty(dst[key]):
            dst[key] = copy.deepcopy(value)
            continue
        current = dst[key]
        if isinstance(current, dict) and isinstance(value, dict):
            _fill_missing(current, value)


def merge_object(accumulated: Dict[str, Any], patch: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge a handler patch with the accumulated document.

    Returns a new document; neither argument is modified.

    Raises:
        MergeError: If either side is not a mapping
    """
    for name, doc in (("accumulated", accumulated), ("patch", patch)):
        if doc is not None and not isinstance(doc, dict):
            raise MergeError(f"{name} document must be a mapping, got {type(doc).__name__}")
    merged = copy.deepcopy(patch or {})
    _fill_missing(merged, accumulated or {})
    return merged


def merge_variables(target: Dict[str, Any], contribution: Dict[str, Any], path: str = "") -> Dict[str, Any]:
    """
    Merge variables into target in place and return it.

    Raises:
        MergeError: If a list meets a non-list value
    """
    for key, value in (contribution or {}).items():
        here = f"{path}.{key}" if path else key
        if key not in target:
            target[key] = copy.deepcopy(value)
            continue
        current = target[key]
        if is_empty(value):
            continue
        if isinstance(current, list) or isinstance(value, list):
            if not isinstance(current, list) or not isinstance(value, list):
                if is_empty(current):
                    target[key] = copy.deepcopy(value)
                    continue
                raise MergeError(
                    f"cannot append {type(value).__name__} to {type(current).__name__} at {here}"
                )
            current.extend(copy.deepcopy(value))
        elif isinstance(current, dict) and isinstance(value, dict):
            merge_variables(current, value, here)
        else:
            target[key] = copy.deepcopy(value)
    return target
