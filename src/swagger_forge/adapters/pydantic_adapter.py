"""
Build SchemaNode trees from pydantic model classes.

One node tree is produced per model class and reused on later calls, so a
model shared by several endpoints keeps a single node identity and the
translator's identity cache can reuse its definition.
"""
import datetime
import decimal
import enum
import threading
import types
import uuid
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Type, Union, get_args, get_origin

import structlog
from pydantic import BaseModel
from pydantic.fields import FieldInfo
from pydantic_core import PydanticUndefined

from ..models.common import NodeKind, Presence
from ..models.nodes import ObjectField, Rule, SchemaNode, UnionMatch

logger = structlog.get_logger(__name__)

_model_nodes: Dict[Type[BaseModel], SchemaNode] = {}
_in_progress: set = set()
_lock = threading.RLock()

# annotated_types constraint class name -> rule name
_CONSTRAINT_RULES = {
    "Gt": ("greater", "gt"),
    "Ge": ("min", "ge"),
    "Lt": ("less", "lt"),
    "Le": ("max", "le"),
    "MinLen": ("min", "min_length"),
    "MaxLen": ("max", "max_length"),
    "MultipleOf": ("multiple", "multiple_of"),
}

_SCALAR_KINDS: Dict[Any, NodeKind] = {
    str: NodeKind.STRING,
    int: NodeKind.NUMBER,
    float: NodeKind.NUMBER,
    decimal.Decimal: NodeKind.NUMBER,
    bool: NodeKind.BOOLEAN,
    bytes: NodeKind.BINARY,
    datetime.date: NodeKind.DATE,
    datetime.datetime: NodeKind.DATE,
    uuid.UUID: NodeKind.STRING,
}


def is_model_class(value: Any) -> bool:
    return isinstance(value, type) and issubclass(value, BaseModel)


def model_label(model: Type[BaseModel]) -> str:
    return model.model_config.get("title") or model.__name__


def node_from_model(model: Type[BaseModel]) -> SchemaNode:
    """Object node for ``model``, built once per class."""
    with _lock:
        cached = _model_nodes.get(model)
        if cached is not None:
            return cached
        if model in _in_progress:
            # Self-referencing model: stop at a childless object carrying the label.
            logger.debug("Recursive model reference cut", model=model.__name__)
            return SchemaNode(kind=NodeKind.OBJECT.value, label=model_label(model))

        _in_progress.add(model)
        try:
            children = [
                ObjectField(key=field.alias or name, node=node_from_field(field))
                for name, field in model.model_fields.items()
            ]
        finally:
            _in_progress.discard(model)

        node = SchemaNode(
            kind=NodeKind.OBJECT.value,
            label=model_label(model),
            description=model.__doc__.strip() if model.__doc__ else None,
            children=children,
        )
        _model_nodes[model] = node
        return node


def node_from_field(field: FieldInfo) -> SchemaNode:
    node = node_from_annotation(field.annotation, field.metadata)
    updates: Dict[str, Any] = {
        "presence": Presence.REQUIRED if field.is_required() else Presence.OPTIONAL,
    }
    if field.description:
        updates["description"] = field.description
    if field.title:
        updates["label"] = field.title
    if field.examples:
        updates["examples"] = list(field.examples)
    if isinstance(field.json_schema_extra, dict):
        updates["meta"] = [dict(field.json_schema_extra)]
    if field.default_factory is not None:
        updates["default"] = _plain_default(field.default_factory())
    elif field.default is not PydanticUndefined and field.default is not None:
        updates["default"] = _plain_default(field.default)
    return _with(node, **updates)


def node_from_annotation(annotation: Any, metadata: Optional[List[Any]] = None) -> SchemaNode:
    """Map a type annotation (plus annotated_types metadata) to a SchemaNode."""
    metadata = list(metadata or [])
    origin = get_origin(annotation)

    if origin is Annotated:
        inner, *extra = get_args(annotation)
        return node_from_annotation(inner, metadata + list(extra))

    if origin in (Union, types.UnionType):
        options = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(options) == 1:
            return node_from_annotation(options[0], metadata)
        matches = [UnionMatch(node=node_from_annotation(option)) for option in options]
        return SchemaNode(kind=NodeKind.ALTERNATIVES.value, matches=matches)

    if origin is Literal:
        values = list(get_args(annotation))
        kind = NodeKind.NUMBER if all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in values) \
            else NodeKind.STRING
        return SchemaNode(kind=kind.value, allowed=values, rules=_rules(metadata))

    if origin in (list, set, frozenset, tuple):
        args = [arg for arg in get_args(annotation) if arg is not Ellipsis]
        items = [node_from_annotation(args[0])] if args else []
        rules = _rules(metadata)
        if origin in (set, frozenset):
            rules.append(Rule(name="unique", arg=None))
        return SchemaNode(kind=NodeKind.ARRAY.value, items=items, rules=rules)

    if origin in (dict, Dict) or annotation in (dict, Dict):
        return SchemaNode(kind=NodeKind.OBJECT.value)

    if annotation in (list, set, tuple):
        return SchemaNode(kind=NodeKind.ARRAY.value, rules=_rules(metadata))

    if is_model_class(annotation):
        return node_from_model(annotation)

    if isinstance(annotation, type) and issubclass(annotation, enum.Enum):
        values = [member.value for member in annotation]
        kind = NodeKind.NUMBER if all(isinstance(v, (int, float)) for v in values) else NodeKind.STRING
        return SchemaNode(kind=kind.value, allowed=values, label=annotation.__name__)

    kind = _SCALAR_KINDS.get(annotation, NodeKind.ANY)
    rules = _rules(metadata)
    if annotation is int:
        rules.append(Rule(name="integer", arg=None))
    if annotation is uuid.UUID:
        rules.append(Rule(name="guid", arg=None))
    return SchemaNode(kind=kind.value, rules=rules)


def _rules(metadata: List[Any]) -> List[Rule]:
    rules: List[Rule] = []
    for item in metadata:
        mapped: Optional[Tuple[str, str]] = _CONSTRAINT_RULES.get(type(item).__name__)
        if mapped is not None:
            rule_name, attr = mapped
            rules.append(Rule(name=rule_name, arg=getattr(item, attr)))
            continue
        pattern = getattr(item, "pattern", None)
        if isinstance(pattern, str):
            rules.append(Rule(name="pattern", arg=pattern))
    return rules


def _with(node: SchemaNode, **updates: Any) -> SchemaNode:
    """Apply field-level flags. Shared model nodes are copied shallowly so the class node stays untouched."""
    if any(shared is node for shared in _model_nodes.values()):
        node = node.model_copy()
    for key, value in updates.items():
        setattr(node, key, value)
    return node


def _plain_default(value: Any) -> Any:
    """Enum members become their values and sets become lists, so defaults serialize as JSON."""
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (set, frozenset, tuple)):
        return [_plain_default(item) for item in value]
    return value
