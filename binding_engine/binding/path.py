"""
Field path expressions used in binding annotations.

Supported forms: "{.status.dbCredentials}", ".spec.host" and bracketed keys
for names containing dots, e.g. "{.data['tls.crt']}".
"""

from typing import Any, Dict, List

from ..core.errors import HandlerExecutionError, InvalidAnnotationValueError


def parse_path(expr: str) -> List[str]:
    """
    Split a path expression into field names.

    Raises:
        InvalidAnnotationValueError: If the expression is malformed
    """
    text = expr.strip()
    if text.startswith("{") and text.endswith("}"):
        text = text[1:-1].strip()
    if not text.startswith("."):
        raise InvalidAnnotationValueError(f"path {expr!r} must start with '.'")

    segments: List[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == ".":
            j = i + 1
            while j < len(text) and text[j] not in ".[":
                j += 1
            name = text[i + 1:j]
            if not name:
                raise InvalidAnnotationValueError(f"empty field name in path {expr!r}")
            segments.append(name)
            i = j
        elif ch == "[":
            end = text.find("]", i)
            if end < 0:
                raise InvalidAnnotationValueError(f"unterminated '[' in path {expr!r}")
            name = text[i + 1:end].strip().strip("'\"")
            if not name:
                raise InvalidAnnotationValueError(f"empty field name in path {expr!r}")
            segments.append(name)
            i = end + 1
        else:
            raise InvalidAnnotationValueError(f"unexpected {ch!r} in path {expr!r}")
    return segments


def get_path(obj: Dict[str, Any], segments: List[str]) -> Any:
    """
    Read the value at segments.

    Raises:
        HandlerExecutionError: If any segment is absent
    """
    current: Any = obj
    for idx, name in enumerate(segments):
        if not isinstance(current, dict) or name not in current:
            missing = "." + ".".join(segments[: idx + 1])
            raise HandlerExecutionError(f"field {missing} not found")
        current = current[name]
    return current


def nest(segments: List[str], value: Any) -> Dict[str, Any]:
    """Build a document holding value at segments."""
    out: Any = value
    for name in reversed(segments):
        out = {name: out}
    return out
