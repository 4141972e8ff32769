"""
Property translation: one SchemaNode in, one Swagger property descriptor out.

The translator recurses through object children, array items and union
alternatives, and promotes object, array and union-branch schemas into the
DefinitionRegistry when definitions are in use. Presence (required/optional)
is returned to the caller instead of being written onto a parent.
"""
import copy
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

import structlog

from ..config import BuilderSettings
from ..models.common import DefinitionPool, NodeKind, ParameterLocation, Presence
from ..models.nodes import SchemaNode
from .cache import NodeCache
from .definitions import DefinitionRegistry
from .utilities import delete_empty_properties, replace_value

logger = structlog.get_logger(__name__)

# Marker type for unions; never emitted.
ALTERNATIVES = "alternatives"

SIMPLE_TYPE_MAP: Dict[str, Dict[str, str]] = {
    NodeKind.BOOLEAN.value: {"type": "boolean"},
    NodeKind.BINARY.value: {"type": "string", "format": "binary"},
    NodeKind.DATE.value: {"type": "string", "format": "date"},
    NodeKind.NUMBER.value: {"type": "number"},
    NodeKind.STRING.value: {"type": "string"},
}

COMPLEX_TYPE_MAP: Dict[str, Dict[str, str]] = {
    NodeKind.ANY.value: {"type": "string"},
    NodeKind.ARRAY.value: {"type": "array"},
    NodeKind.FUNC.value: {"type": "string"},
    "function": {"type": "string"},
    NodeKind.OBJECT.value: {"type": "object"},
    NodeKind.ALTERNATIVES.value: {"type": ALTERNATIVES},
    "union": {"type": ALTERNATIVES},
}

TYPE_MAP: Dict[str, Dict[str, str]] = {**SIMPLE_TYPE_MAP, **COMPLEX_TYPE_MAP}

STRING_CONSTRAINT_RULES = ["insensitive", "length"]
STRING_FORMAT_RULES = [
    "creditCard", "alphanum", "token", "email", "ip",
    "uri", "guid", "hex", "hostname", "isoDate",
]
STRING_CONVERT_RULES = ["lowercase", "uppercase", "trim"]
NUMBER_CONSTRAINT_RULES = ["greater", "less", "precision", "multiple", "positive", "negative"]
ARRAY_CONSTRAINT_RULES = ["length", "unique"]

MULTI_VALUE_LOCATIONS = (ParameterLocation.QUERY.value, ParameterLocation.FORM.value)


@dataclass
class PresenceContribution:
    """A child's resolved name and presence flag, merged by the parent into its required/optional lists."""
    name: str
    presence: str


@dataclass
class PropertyResult:
    descriptor: Optional[Dict[str, Any]] = None
    presence: Optional[PresenceContribution] = None


class PropertyTranslator:
    """Translates SchemaNode trees into Swagger property descriptors for one document build."""

    def __init__(self, settings: BuilderSettings, registry: DefinitionRegistry, cache: Optional[NodeCache] = None):
        self.settings = settings
        self.registry = registry
        self.cache = cache
        self.logger = logger.bind(service="PropertyTranslator")

    def translate(self, name: Optional[str], node: Any, location: Optional[str] = None,
                  use_definitions: bool = True, pool: DefinitionPool = DefinitionPool.PRIMARY) -> Optional[Dict[str, Any]]:
        """Translate ``node`` and return only its descriptor (None when the property is omitted)."""
        return self.translate_property(name, node, location, use_definitions, pool).descriptor

    def translate_property(self, name: Optional[str], node: Any, location: Optional[str] = None,
                           use_definitions: bool = True,
                           pool: DefinitionPool = DefinitionPool.PRIMARY) -> PropertyResult:
        if not isinstance(node, SchemaNode):
            return PropertyResult()
        if node.presence == Presence.FORBIDDEN:
            return PropertyResult()

        if not name and node.label and location != ParameterLocation.PATH.value:
            name = node.label

        kind = str(node.kind).lower()
        if kind not in TYPE_MAP:
            kind = NodeKind.ANY.value
        prop: Dict[str, Any] = dict(TYPE_MAP[kind])

        contribution = None
        if name and node.presence:
            contribution = PresenceContribution(name=name, presence=Presence(node.presence).value)

        cacheable = bool(use_definitions and self.cache is not None and prop["type"] == "object")
        if cacheable:
            cached = self.cache.get(node, pool)
            if cached is not None:
                return PropertyResult(cached, contribution)

        self._parse_metadata(prop, node)
        self._parse_enum(prop, node)

        if prop["type"] == "string" and kind != NodeKind.DATE.value:
            self._parse_string(prop, node)
        if prop["type"] == "number":
            self._parse_number(prop, node)
        if kind == NodeKind.DATE.value:
            self._parse_date(prop, node)

        if prop["type"] == "object":
            prop = self._parse_object(prop, node, name, location, use_definitions, pool)
        elif prop["type"] == "array":
            prop = self._parse_array(prop, node, name, location, use_definitions, pool)
        elif prop["type"] == ALTERNATIVES:
            prop = self._parse_alternatives(node, name, location, use_definitions)
            if prop is None:
                return PropertyResult(None, contribution)

        if node.meta_property("swaggerType") == "file" and "$ref" not in prop:
            prop["type"] = "file"
            prop["in"] = ParameterLocation.FORM.value

        prop = delete_empty_properties(prop)
        if cacheable and "$ref" in prop:
            self.cache.set(node, pool, prop)
        return PropertyResult(prop, contribution)

    # --- metadata ---

    def _parse_metadata(self, prop: Dict[str, Any], node: SchemaNode) -> None:
        prop["description"] = node.description
        prop["notes"] = node.notes
        prop["tags"] = node.tags

        if self.settings.x_properties:
            self.convert_rules(prop, node, ["unit"], "x-format")
            prop["example"] = copy.deepcopy(node.examples[0]) if node.examples else None
            prop["x-meta"] = copy.deepcopy(node.meta[0]) if node.meta else None

        default = node.default
        if callable(default):
            default = default()
        prop["default"] = copy.deepcopy(default)

    def _parse_enum(self, prop: Dict[str, Any], node: SchemaNode) -> None:
        if not node.allowed or node.meta_property("disableDropdown"):
            return
        values = [v for v in node.allowed if v is not None and not (isinstance(v, str) and v == "")]
        if values:
            prop["enum"] = values

    # --- primitives ---

    def _parse_string(self, prop: Dict[str, Any], node: SchemaNode) -> None:
        prop["minLength"] = node.get_arg("min")
        prop["maxLength"] = node.get_arg("max")

        pattern = node.get_arg("pattern")
        if isinstance(pattern, re.Pattern):
            prop["pattern"] = pattern.pattern
        elif isinstance(pattern, str):
            prop["pattern"] = pattern

        if self.settings.x_properties:
            self.convert_rules(prop, node, STRING_CONSTRAINT_RULES, "x-constraint")
            self.convert_rules(prop, node, STRING_FORMAT_RULES, "x-format")
            self.convert_rules(prop, node, STRING_CONVERT_RULES, "x-convert")

    def _parse_number(self, prop: Dict[str, Any], node: SchemaNode) -> None:
        prop["minimum"] = node.get_arg("min")
        prop["maximum"] = node.get_arg("max")
        if node.has_rule("integer"):
            prop["type"] = "integer"

        if self.settings.x_properties:
            self.convert_rules(prop, node, NUMBER_CONSTRAINT_RULES, "x-constraint")

    def _parse_date(self, prop: Dict[str, Any], node: SchemaNode) -> None:
        if node.timestamp:
            prop["type"] = "number"
            prop.pop("format", None)

    # --- containers ---

    def _promote(self, name: Optional[str], schema: Dict[str, Any], pool: DefinitionPool) -> Dict[str, Any]:
        ref_name = self.registry.append(name, schema, pool)
        return {"$ref": self.registry.ref(ref_name, pool)}

    def _parse_object(self, prop: Dict[str, Any], node: SchemaNode, name: Optional[str],
                      location: Optional[str], use_definitions: bool, pool: DefinitionPool) -> Dict[str, Any]:
        if not node.has_children:
            prop["properties"] = {}
            if use_definitions:
                # Every childless object shares one canonical definition.
                return self._promote(name, {"type": "object", "properties": {}}, pool)
            return prop

        properties: Dict[str, Any] = {}
        required: List[str] = []
        optional: List[str] = []
        for field in node.children:
            key = field.key
            item_name = field.node.label or key
            result = self.translate_property(item_name, field.node, location, use_definitions, pool)
            if result.presence is not None:
                if result.presence.presence == Presence.REQUIRED.value:
                    required.append(result.presence.name)
                elif result.presence.presence == Presence.OPTIONAL.value:
                    optional.append(result.presence.name)
            if result.descriptor is not None:
                result.descriptor.pop("optional", None)
                properties[key] = result.descriptor
            if key != item_name:
                required = replace_value(required, item_name, key)
                optional = replace_value(optional, item_name, key)

        prop["properties"] = properties
        prop["required"] = required
        prop["optional"] = optional

        if use_definitions:
            return self._promote(name, prop, pool)
        return prop

    def _parse_array(self, prop: Dict[str, Any], node: SchemaNode, name: Optional[str],
                     location: Optional[str], use_definitions: bool, pool: DefinitionPool) -> Dict[str, Any]:
        prop["minItems"] = node.get_arg("min")
        prop["maxItems"] = node.get_arg("max")

        if self.settings.x_properties:
            self.convert_rules(prop, node, ARRAY_CONSTRAINT_RULES, "x-constraint")
            if node.sparse:
                self.add_to_property_object(prop, "x-constraint", "sparse", True)
            if node.single:
                self.add_to_property_object(prop, "x-constraint", "single", True)

        prop["items"] = {"type": "string"}
        if location in MULTI_VALUE_LOCATIONS:
            prop["collectionFormat"] = "multi"

        # Swagger 2.0 holds a single item type; the first one wins.
        item = node.items[0] if node.items else None
        if item is not None:
            item_descriptor = self.translate(item.label, item, location, use_definitions, pool)
            if item_descriptor is None:
                prop.pop("items")
            else:
                item_descriptor.pop("optional", None)
                prop["items"] = dict(item_descriptor)

        if use_definitions:
            return self._promote(name, prop, pool)
        return prop

    def _parse_alternatives(self, node: SchemaNode, name: Optional[str], location: Optional[str],
                            use_definitions: bool) -> Optional[Dict[str, Any]]:
        if not node.matches:
            return None

        first = node.matches[0]
        if first.node is not None:
            # "try" form
            prop = self.translate(node.label, first.node, location, use_definitions, DefinitionPool.PRIMARY)
            if prop is None:
                return None
            if self.settings.x_properties:
                branches = [match.node for match in node.matches if match.node is not None]
                prop["x-alternatives"] = self._translate_alternates(branches, name, location, use_definitions)
            return prop

        # "when" form
        child = first.then if first.then is not None else first.otherwise
        if child is None:
            return None
        prop = self.translate(child.label or name, child, location, use_definitions, DefinitionPool.PRIMARY)
        if prop is not None and self.settings.x_properties:
            branches: List[SchemaNode] = []
            for match in node.matches:
                if match.then is not None:
                    branches.append(match.then)
                if match.otherwise is not None:
                    branches.append(match.otherwise)
            prop["x-alternatives"] = self._translate_alternates(branches, name, location, use_definitions)
        return prop

    def _translate_alternates(self, branches: Iterable[SchemaNode], name: Optional[str],
                              location: Optional[str], use_definitions: bool) -> List[Dict[str, Any]]:
        out = []
        for branch in branches:
            descriptor = self.translate(branch.label or name, branch, location, use_definitions,
                                        DefinitionPool.ALTERNATE)
            if descriptor is not None:
                out.append(descriptor)
        return copy.deepcopy(out)

    # --- rule helpers ---

    def convert_rules(self, prop: Dict[str, Any], node: SchemaNode, rule_names: Iterable[str], group_name: str) -> None:
        """Mirror each present rule into ``prop[group_name][rule]``."""
        for rule_name in rule_names:
            if not node.has_rule(rule_name):
                continue
            value = node.get_arg(rule_name)
            if isinstance(value, dict) and not value:
                value = None
            self.add_to_property_object(prop, group_name, rule_name, value)

    @staticmethod
    def add_to_property_object(prop: Dict[str, Any], group_name: str, rule_name: str, value: Any) -> None:
        prop.setdefault(group_name, {})
        prop[group_name][rule_name] = value if value is not None else True
