"""Small dict/list/path helpers shared by the schema generation modules."""
import copy
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from ..config import PathReplacement

# Keys that may legitimately hold an empty object.
KEEP_EMPTY_KEYS = ("default", "example", "security")


def delete_empty_properties(obj: Dict[str, Any]) -> Dict[str, Any]:
    """Drop keys holding None, [] or {} (in place). default/example/security keep empty values."""
    for key in list(obj.keys()):
        value = obj[key]
        if value is None:
            del obj[key]
            continue
        if key in KEEP_EMPTY_KEYS:
            continue
        if isinstance(value, (list, dict)) and len(value) == 0:
            del obj[key]
    return obj


def replace_value(values: Optional[List[Any]], current: Any, replacement: Any) -> Optional[List[Any]]:
    """Return a copy of ``values`` with ``current`` removed and ``replacement`` appended. Order is not kept."""
    if values and current and replacement:
        values = list(values)
        if current in values:
            values.remove(current)
            values.append(replacement)
    return values


def sort_first_item(values: Sequence[Any], first: Any) -> List[Any]:
    """Move ``first`` to the front of ``values`` when it is set."""
    if first is None or first == "":
        return list(values)
    return [first] + [value for value in values if value != first]


def remove_props(obj: Dict[str, Any], allowed: Iterable[str]) -> Dict[str, Any]:
    """Drop every key not in ``allowed`` (in place). ``x-*`` keys always survive."""
    allowed = set(allowed)
    for key in list(obj.keys()):
        if key not in allowed and not key.startswith("x-"):
            del obj[key]
    return obj


def apply_to_defaults(defaults: Mapping[str, Any], options: Mapping[str, Any]) -> Dict[str, Any]:
    """Deep-merge ``options`` over a copy of ``defaults``. A None option leaves the default."""
    merged = copy.deepcopy(dict(defaults))
    for key, value in options.items():
        if value is None:
            continue
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = apply_to_defaults(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def to_title_case(word: str) -> str:
    return re.sub(r"\w\S*", lambda m: m.group(0)[0].upper() + m.group(0)[1:].lower(), word)


def create_id(method: str, path: str) -> str:
    """Build an operationId such as ``getUsersId`` from a method and a path template."""
    if "/" in path:
        items = [to_title_case(re.sub(r"[^\w\s]", "", item)) for item in path.split("/")]
        path = "".join(items)
    else:
        path = to_title_case(path)
    return method.lower() + path


def replace_in_path(path: str, apply_to: Sequence[str], replacements: Sequence[PathReplacement]) -> str:
    for option in replacements:
        if option.replace_in in apply_to or option.replace_in == "all":
            path = re.sub(option.pattern, option.replacement, path)
    return path


def has_path_prefix(path: str, prefix: str) -> bool:
    """True when ``prefix`` covers whole leading segments of ``path``: ``/api`` matches ``/api/x``, not ``/apiary``."""
    prefix = prefix.rstrip("/")
    return path == prefix or path.startswith(prefix + "/")


def remove_base_path(path: str, base_path: str, replacements: Sequence[PathReplacement]) -> str:
    if base_path != "/" and has_path_prefix(path, base_path):
        path = path[len(base_path.rstrip("/")):]
        path = replace_in_path(path, ["endpoints"], replacements)
    return path


def group_name_for_path(path_prefix_size: int, base_path: str, path: str,
                        replacements: Sequence[PathReplacement]) -> str:
    """Group name made from the first ``path_prefix_size`` non-empty path segments, minus the base path."""
    path = replace_in_path(path, ["groups"], replacements)
    head: List[str] = []
    for item in path.split("/"):
        if item != "":
            head.append(item)
        if len(head) >= path_prefix_size:
            break
    name = "/".join(head)

    if base_path != "/" and has_path_prefix("/" + name, base_path):
        name = ("/" + name)[len(base_path.rstrip("/")):]
        if name.startswith("/"):
            name = name[1:]
    return name


def assign_vendor_extensions(target: Dict[str, Any], source: Mapping[str, Any]) -> Dict[str, Any]:
    """Copy ``x-*`` keys from ``source`` onto ``target`` (in place)."""
    for key, value in source.items():
        if key.startswith("x-") and len(key) > 2:
            target[key] = copy.deepcopy(value)
    return target
