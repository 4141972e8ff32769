"""Flatten translated object descriptors into Swagger parameter lists."""
import copy
from typing import Any, Dict, List, Optional

from ..models.common import ParameterLocation
from .utilities import delete_empty_properties, remove_props

ALLOWED_PARAMETER_KEYS = [
    "name", "in", "description", "required", "schema", "type", "format",
    "allowEmptyValue", "items", "collectionFormat", "default",
    "maximum", "exclusiveMaximum", "minimum", "exclusiveMinimum",
    "maxLength", "minLength", "pattern", "maxItems", "minItems",
    "uniqueItems", "enum", "multipleOf",
]

# Keys that stay on a body parameter instead of moving into its schema.
BODY_PARAMETER_KEYS = ("description",)


def project(descriptor: Optional[Dict[str, Any]], location: str) -> List[Dict[str, Any]]:
    """
    Turn a translated descriptor into parameters for ``location``.

    A pointer, or any body descriptor without ``properties``, is documented
    as one ``body`` parameter carrying it as ``schema``. An inline object
    yields one parameter per property, with ``required`` taken from the
    object's required/optional lists. Elsewhere, no properties means no
    parameters.
    """
    if not descriptor:
        return []

    if "$ref" in descriptor:
        return [_body_parameter(descriptor)]
    if "properties" not in descriptor:
        if location == ParameterLocation.BODY.value:
            return [_body_parameter(descriptor)]
        return []

    required = descriptor.get("required") or []
    optional = descriptor.get("optional") or []
    out: List[Dict[str, Any]] = []
    for key, prop in descriptor["properties"].items():
        param = copy.deepcopy(prop)
        param["name"] = key
        param["in"] = location
        if key in required:
            param["required"] = True
        elif key in optional:
            param["required"] = False
        else:
            param.pop("required", None)
        if location != ParameterLocation.BODY.value:
            remove_props(param, ALLOWED_PARAMETER_KEYS)
        out.append(delete_empty_properties(param))
    return out


def _body_parameter(descriptor: Dict[str, Any]) -> Dict[str, Any]:
    schema = copy.deepcopy(descriptor)
    param: Dict[str, Any] = {"name": "body", "in": ParameterLocation.BODY.value}
    for key in list(schema.keys()):
        if key in BODY_PARAMETER_KEYS or key.startswith("x-"):
            param[key] = schema.pop(key)
    for key in ("in", "name", "optional"):
        schema.pop(key, None)
    if not isinstance(schema.get("required"), list):
        schema.pop("required", None)
    param["schema"] = schema
    return delete_empty_properties(param)
