"""
Adapters that turn host-supplied validators into SchemaNode trees.
"""
from typing import Any, Mapping, Optional

from ..models.common import NodeKind
from ..models.nodes import ObjectField, SchemaNode
from .pydantic_adapter import is_model_class, node_from_annotation, node_from_model


def to_schema_node(value: Any) -> Optional[SchemaNode]:
    """Coerce a SchemaNode, pydantic model class or mapping of name -> validator into a SchemaNode.

    Returns None for anything else.
    """
    if isinstance(value, SchemaNode):
        return value
    if is_model_class(value):
        return node_from_model(value)
    if isinstance(value, Mapping):
        children = []
        for key, child in value.items():
            node = to_schema_node(child)
            if node is None and isinstance(child, type):
                node = node_from_annotation(child)
            if node is not None:
                children.append(ObjectField(key=str(key), node=node))
        return SchemaNode(kind=NodeKind.OBJECT.value, children=children)
    return None


__all__ = ["is_model_class", "node_from_annotation", "node_from_model", "to_schema_node"]
