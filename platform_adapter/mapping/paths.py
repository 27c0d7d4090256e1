"""
Dot-path access into JSON-like data.

``"variants.0.price"`` addresses ``data["variants"][0]["price"]``. Segments
made only of ASCII digits index lists; any segment may key a dict.
"""

from typing import Any, Dict, List, Union

JsonValue = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]


class _Missing:
    """Sentinel for a path that does not resolve to a value."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return "MISSING"


MISSING: Any = _Missing()


def split_path(path: str) -> List[str]:
    return path.split(".")


def is_index_segment(segment: str) -> bool:
    return bool(segment) and segment.isascii() and segment.isdigit()


def get_path(data: JsonValue, path: str) -> Any:
    """
    Read the value at ``path``.

    Returns:
        The value, or MISSING when a key is absent, an index is out of range
        or not an index, traversal hits a scalar, or a null is encountered
    """
    current: Any = data
    for segment in split_path(path):
        if isinstance(current, dict):
            if segment not in current:
                return MISSING
            current = current[segment]
        elif isinstance(current, list):
            if not is_index_segment(segment):
                return MISSING
            index = int(segment)
            if index >= len(current):
                return MISSING
            current = current[index]
        else:
            return MISSING

        if current is None:
            return MISSING

    return current


def _set_node(current: Any, segments: List[str], value: Any) -> Any:
    if not segments:
        return value

    segment, rest = segments[0], segments[1:]

    if is_index_segment(segment):
        index = int(segment)
        items = current if isinstance(current, list) else []
        if len(items) <= index:
            items.extend([None] * (index + 1 - len(items)))
        items[index] = _set_node(items[index], rest, value)
        return items

    obj = current if isinstance(current, dict) else {}
    obj[segment] = _set_node(obj.get(segment), rest, value)
    return obj


def set_path(target: Dict[str, Any], path: str, value: Any) -> None:
    """
    Write ``value`` at ``path`` inside ``target``, creating containers as needed.

    Below the root a list is created for an index segment and a dict for
    anything else; an existing node of the wrong kind is replaced. ``target``
    itself is always treated as a dict, so a leading index segment is a key.
    """
    segments = split_path(path)
    head, rest = segments[0], segments[1:]
    target[head] = _set_node(target.get(head), rest, value)
