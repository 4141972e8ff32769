"""Response objects for one operation."""
import copy
from http import HTTPStatus
from typing import Any, Dict, Mapping, Optional

import structlog

from ..models.common import DefinitionPool, ParameterLocation
from ..models.nodes import SchemaNode
from .properties import PropertyTranslator
from .utilities import apply_to_defaults, delete_empty_properties

logger = structlog.get_logger(__name__)

DEFAULT_DESCRIPTION = "Successful"


def status_description(status: str) -> str:
    """HTTP reason phrase for ``status`` with "OK" read as "Successful"."""
    try:
        phrase = HTTPStatus(int(status)).phrase
    except ValueError:
        return DEFAULT_DESCRIPTION
    return phrase.replace("OK", DEFAULT_DESCRIPTION)


class ResponseBuilder:
    """Builds the ``responses`` map of an operation from response trees and user overrides."""

    def __init__(self, translator: PropertyTranslator):
        self.translator = translator
        self.logger = logger.bind(service="ResponseBuilder")

    def build(self, user_defined: Optional[Mapping[Any, Any]], default_schema: Optional[SchemaNode],
              status_schemas: Optional[Mapping[Any, Any]], use_definitions: bool = True,
              pool: DefinitionPool = DefinitionPool.PRIMARY) -> Dict[str, Any]:
        statuses: Dict[str, Any] = {str(key): value for key, value in (status_schemas or {}).items()}
        # A bare response schema documents the 200 status.
        if default_schema is not None and "200" not in statuses:
            statuses["200"] = default_schema

        out: Dict[str, Dict[str, Any]] = {}
        for status, node in statuses.items():
            out[status] = self.get_response(status, node, use_definitions, pool)

        for status, override in (user_defined or {}).items():
            status = str(status)
            override = dict(override or {})
            schema = override.get("schema")
            if isinstance(schema, SchemaNode):
                override["schema"] = self.translator.translate(
                    schema.label, schema, ParameterLocation.BODY.value, use_definitions, pool)
            out[status] = apply_to_defaults(out.get(status, {}), override)
            if not out[status].get("description"):
                out[status]["description"] = status_description(status)

        if "200" in out and out["200"].get("schema") is None:
            out["200"]["schema"] = {"type": "string"}

        if not out:
            out["default"] = {"schema": {"type": "string"}, "description": DEFAULT_DESCRIPTION}

        return delete_empty_properties(out)

    def get_response(self, status: str, node: Any, use_definitions: bool = True,
                     pool: DefinitionPool = DefinitionPool.PRIMARY) -> Dict[str, Any]:
        schema = self.translator.translate(None, node, ParameterLocation.BODY.value, use_definitions, pool)
        response: Dict[str, Any] = {"schema": schema}
        if isinstance(node, SchemaNode):
            response["description"] = node.description
            response["headers"] = copy.deepcopy(node.meta_property("headers"))
            response["examples"] = copy.deepcopy(node.meta_property("examples"))
        response = delete_empty_properties(response)
        if not response.get("description"):
            response["description"] = status_description(status)
        return response
