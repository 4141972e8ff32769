"""
Path assembly: one Swagger operation per endpoint and method.

Every call to :meth:`PathBuilder.build` creates its own DefinitionRegistry
and NodeCache, so independent builds never share definition pools.
"""
import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

import structlog

from ..adapters import is_model_class, to_schema_node
from ..config import BuilderSettings
from ..logging_config import DiagnosticLog, structlog_diagnostic
from ..models.common import DefinitionPool, ParameterLocation
from ..models.endpoint import Endpoint
from ..models.nodes import SchemaNode, is_custom_validator, obj, string
from .cache import NodeCache
from .definitions import DefinitionRegistry
from .parameters import project
from .properties import PropertyTranslator
from .responses import ResponseBuilder
from .utilities import (
    assign_vendor_extensions,
    create_id,
    delete_empty_properties,
    group_name_for_path,
    remove_base_path,
    replace_in_path,
    sort_first_item,
)

logger = structlog.get_logger(__name__)

FORM_URLENCODED = "application/x-www-form-urlencoded"
MULTIPART_FORM = "multipart/form-data"
HIDDEN_MODEL = "Hidden Model"


@dataclass
class RouteData:
    """Everything the assembler needs about one endpoint for one concrete method."""
    path: str
    method: str
    summary: Optional[str] = None
    notes: Any = None
    tags: List[str] = field(default_factory=list)
    groups: List[str] = field(default_factory=list)
    header_params: Optional[SchemaNode] = None
    path_params: Optional[SchemaNode] = None
    query_params: Optional[SchemaNode] = None
    payload_params: Optional[SchemaNode] = None
    response_schema: Optional[SchemaNode] = None
    response_status: Dict[str, Any] = field(default_factory=dict)
    consumes: Optional[List[str]] = None
    produces: Optional[List[str]] = None
    responses: Optional[Dict[str, Any]] = None
    payload_type: Optional[str] = None
    security: Optional[List[Dict[str, Any]]] = None
    order: Optional[int] = None
    deprecated: Optional[bool] = None
    id: Optional[str] = None
    vendor_extensions: Dict[str, Any] = field(default_factory=dict)


class PathBuilder:
    """Builds the ``paths`` section plus both definition pools from a list of endpoints."""

    def __init__(self, settings: BuilderSettings, log: Optional[DiagnosticLog] = None):
        self.settings = settings
        self.log: DiagnosticLog = log or structlog_diagnostic
        self.logger = logger.bind(service="PathBuilder")

    def build(self, endpoints: Iterable[Endpoint]) -> Dict[str, Any]:
        routes: List[RouteData] = []
        for endpoint in endpoints:
            routes.extend(self.route_data(endpoint))
        return self.build_routes(routes)

    # --- Start: endpoint -> route data ---

    def route_data(self, endpoint: Endpoint) -> List[RouteData]:
        """Normalize one endpoint. A wildcard or list method yields one entry per concrete method."""
        options = endpoint.options
        validation = endpoint.validate_
        override = options.validate_

        raw = {
            "header_params": validation.headers,
            "path_params": validation.params,
            "query_params": validation.query,
            "payload_params": validation.payload,
        }
        if override is not None:
            for attr, value in (("header_params", override.headers), ("path_params", override.params),
                                ("query_params", override.query), ("payload_params", override.payload)):
                if value is not None:
                    raw[attr] = value

        params = {attr: self._normalize_validator(attr, value) for attr, value in raw.items()}

        groups = endpoint.groups or [group_name_for_path(
            self.settings.path_prefix_size, self.settings.base_path, endpoint.path, self.settings.path_replacements)]

        base = RouteData(
            path=replace_in_path(endpoint.path, ["endpoints"], self.settings.path_replacements),
            method="GET",
            summary=endpoint.description,
            notes=endpoint.notes,
            tags=list(endpoint.tags),
            groups=groups,
            response_schema=to_schema_node(endpoint.response_schema),
            response_status={str(k): to_schema_node(v) or v for k, v in endpoint.response_status.items()},
            consumes=options.consumes or None,
            produces=options.produces or None,
            responses=self._normalize_responses(options.responses),
            payload_type=options.payload_type,
            security=options.security or None,
            order=options.order,
            deprecated=options.deprecated,
            id=options.id,
            vendor_extensions=options.vendor_extensions(),
            **params,
        )

        routes = []
        for method in endpoint.methods():
            route = copy.copy(base)
            route.method = method
            routes.append(route)
        return routes

    def _normalize_validator(self, attr: str, value: Any) -> Optional[SchemaNode]:
        if is_custom_validator(value):
            if attr == "path_params":
                self.log(["validation", "error"],
                         "Using a custom validation function for params is not supported and has been removed.")
                return None
            self.log(["validation", "warning"],
                     "Using a custom validation function for a query, header or payload is not supported.")
            if attr == "payload_params":
                return obj(label=HIDDEN_MODEL)
            return obj({HIDDEN_MODEL: string()})
        if isinstance(value, bool):
            return None
        return to_schema_node(value)

    @staticmethod
    def _normalize_responses(responses: Optional[Dict[Any, Any]]) -> Optional[Dict[str, Any]]:
        if not responses:
            return None
        out = {}
        for status, response in responses.items():
            response = dict(response or {})
            schema = response.get("schema")
            if isinstance(schema, SchemaNode) or is_model_class(schema):
                response["schema"] = to_schema_node(schema)
            out[str(status)] = response
        return out

    # --- route data -> operations ---

    def build_routes(self, routes: Iterable[RouteData]) -> Dict[str, Any]:
        registry = DefinitionRegistry(self.settings)
        cache = NodeCache()
        translator = PropertyTranslator(self.settings, registry, cache)
        responses = ResponseBuilder(translator)

        paths: Dict[str, Dict[str, Any]] = {}
        for route in routes:
            path = remove_base_path(route.path, self.settings.base_path, self.settings.path_replacements)
            out: Dict[str, Any] = {
                "summary": route.summary,
                "operationId": route.id or create_id(route.method, path),
                "description": None,
                "parameters": [],
                "consumes": [],
                "produces": [],
                "tags": None,
                "security": None,
                "responses": None,
                "deprecated": None,
            }

            if self.settings.grouping == "tags":
                out["tags"] = [tag for tag in route.tags if tag not in self.settings.tags_grouping_exclude]
            else:
                out["tags"] = route.groups

            out["description"] = "<br/><br/>".join(route.notes) if isinstance(route.notes, list) else route.notes

            if route.security:
                out["security"] = route.security

            # payload
            payload_type = (route.payload_type or self.settings.payload_type).lower()
            payload_parameters: List[Dict[str, Any]] = []
            if payload_type == "json":
                payload_parameters = self._parameters(translator, route.payload_params, ParameterLocation.BODY, True)
            else:
                if self._has_children(route.payload_params):
                    payload_parameters = self._parameters(
                        translator, route.payload_params, ParameterLocation.FORM, False)
                else:
                    self._test_parameter_error(route.payload_params, "payload form-urlencoded", path)
                out["consumes"] = [FORM_URLENCODED]

            if self._has_file_type(route):
                out["consumes"] = [MULTIPART_FORM]

            # explicit content types win over inferred ones
            if self.settings.consumes or route.consumes:
                out["consumes"] = route.consumes or self.settings.consumes
            if self.settings.produces or route.produces:
                out["produces"] = route.produces or self.settings.produces

            # path
            path_parameters: List[Dict[str, Any]] = []
            if self._has_children(route.path_params):
                path_parameters = self._parameters(translator, route.path_params, ParameterLocation.PATH, False)
                for item in path_parameters:
                    self._resolve_path_required(item, path)
            else:
                self._test_parameter_error(route.path_params, "params", path)

            # optional markers are only needed to infer required
            path = path.replace("?}", "}")

            # headers
            header_parameters: List[Dict[str, Any]] = []
            if self._has_children(route.header_params):
                header_parameters = self._parameters(
                    translator, route.header_params, ParameterLocation.HEADER, False)
            else:
                self._test_parameter_error(route.header_params, "headers", path)
            if self.settings.accept_to_produce:
                header_parameters = self._accept_to_produce(header_parameters, out)

            # query
            query_parameters: List[Dict[str, Any]] = []
            if self._has_children(route.query_params):
                query_parameters = self._parameters(translator, route.query_params, ParameterLocation.QUERY, False)
            else:
                self._test_parameter_error(route.query_params, "query", path)

            out["parameters"] = header_parameters + path_parameters + query_parameters + payload_parameters

            if self._has_content_type_header(out["parameters"]):
                out.pop("consumes", None)

            out["responses"] = responses.build(
                route.responses, route.response_schema, route.response_status, True, DefinitionPool.PRIMARY)

            if route.order:
                out["x-order"] = route.order

            assign_vendor_extensions(out, route.vendor_extensions)

            if route.deprecated is not None:
                out["deprecated"] = route.deprecated

            paths.setdefault(path, {})[route.method.lower()] = delete_empty_properties(out)

        self.logger.debug("Paths built", operations=sum(len(ops) for ops in paths.values()),
                          definitions=len(registry.pool(DefinitionPool.PRIMARY)))
        return {
            "definitions": registry.pool(DefinitionPool.PRIMARY),
            "x-alt-definitions": registry.pool(DefinitionPool.ALTERNATE),
            "paths": paths,
        }

    # --- helpers ---

    @staticmethod
    def _parameters(translator: PropertyTranslator, node: Optional[SchemaNode], location: ParameterLocation,
                    use_definitions: bool) -> List[Dict[str, Any]]:
        if node is None:
            return []
        descriptor = translator.translate(None, node, location.value, use_definitions, DefinitionPool.PRIMARY)
        return project(descriptor, location.value)

    @staticmethod
    def _has_children(node: Optional[SchemaNode]) -> bool:
        return isinstance(node, SchemaNode) and node.has_children

    def _test_parameter_error(self, node: Optional[SchemaNode], parameter_type: str, path: str) -> None:
        if node is not None and not self._has_children(node):
            self.log(["validation", "error"],
                     f"The {path} route {parameter_type} parameter was set, "
                     "but not as an object with child properties")

    def _resolve_path_required(self, item: Dict[str, Any], path: str) -> None:
        name = item["name"]
        if "required" not in item:
            if "{" + name + "}" in path:
                item["required"] = True
            if "{" + name + "?}" in path:
                item.pop("required", None)
        if item.get("required") is False:
            item.pop("required")
        if not item.get("required"):
            self.log(["validation", "warning"],
                     f"The {path} params parameter {{{name}}} is set as optional. "
                     "This will work in the UI, but is invalid in the swagger spec")

    @staticmethod
    def _accept_to_produce(headers: List[Dict[str, Any]], out: Dict[str, Any]) -> List[Dict[str, Any]]:
        kept = []
        for header in headers:
            if header["name"].lower() == "accept" and header.get("enum"):
                out["produces"] = sort_first_item(header["enum"], header.get("default"))
                continue
            kept.append(header)
        return kept

    @staticmethod
    def _has_file_type(route: RouteData) -> bool:
        if not isinstance(route.payload_params, SchemaNode):
            return False
        return any(node.meta_property("swaggerType") == "file" for node in route.payload_params.walk())

    @staticmethod
    def _has_content_type_header(parameters: List[Dict[str, Any]]) -> bool:
        return any(
            param.get("in") == ParameterLocation.HEADER.value and param.get("name", "").lower() == "content-type"
            for param in parameters
        )
