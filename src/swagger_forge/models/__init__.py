"""
Pydantic models for swagger-forge.
"""
from .common import BasePydanticModel, DefinitionPool, NodeKind, ParameterLocation, Presence
from .endpoint import HTTP_METHODS, Endpoint, EndpointOptions, EndpointValidation
from .nodes import ObjectField, Rule, SchemaNode, UnionMatch

__all__ = [
    "BasePydanticModel",
    "DefinitionPool",
    "Endpoint",
    "EndpointOptions",
    "EndpointValidation",
    "HTTP_METHODS",
    "NodeKind",
    "ObjectField",
    "ParameterLocation",
    "Presence",
    "Rule",
    "SchemaNode",
    "UnionMatch",
]
