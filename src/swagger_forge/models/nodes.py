"""
Validation-rule tree consumed by the translator.

A SchemaNode is the minimal interface the translation core needs from a
validation library: a kind, presence and metadata flags, an ordered rule
list, and kind-specific children. Adapters (see ``swagger_forge.adapters``)
build these trees from concrete libraries; the builder functions at the
bottom of this module build them by hand.
"""
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import Field

from .common import BasePydanticModel, NodeKind, Presence


class Rule(BasePydanticModel):
    name: str
    arg: Any = None

    model_config = {
        "extra": "forbid",
        "arbitrary_types_allowed": True,
    }


class ObjectField(BasePydanticModel):
    key: str
    node: "SchemaNode"


class UnionMatch(BasePydanticModel):
    """One alternative of a union node.

    A "try" alternative sets ``node``. A "when" alternative sets ``ref`` (the
    sibling field it tests) and ``then``/``otherwise`` outcomes.
    """
    node: Optional["SchemaNode"] = None
    ref: Optional[str] = None
    is_: Optional["SchemaNode"] = Field(default=None, alias="is")
    then: Optional["SchemaNode"] = None
    otherwise: Optional["SchemaNode"] = None


class SchemaNode(BasePydanticModel):
    kind: str = NodeKind.ANY.value
    presence: Optional[Presence] = None
    label: Optional[str] = None
    description: Optional[str] = None
    notes: Optional[Union[str, List[str]]] = None
    tags: Optional[List[str]] = None
    default: Any = None
    examples: List[Any] = Field(default_factory=list)
    meta: List[Dict[str, Any]] = Field(default_factory=list)
    allowed: List[Any] = Field(default_factory=list)
    rules: List[Rule] = Field(default_factory=list)
    timestamp: bool = False
    sparse: bool = False
    single: bool = False
    children: Optional[List[ObjectField]] = None
    items: List["SchemaNode"] = Field(default_factory=list)
    matches: List[UnionMatch] = Field(default_factory=list)

    model_config = {
        "extra": "forbid",
        "populate_by_name": True,
        "use_enum_values": True,
        "arbitrary_types_allowed": True,
    }

    @property
    def has_children(self) -> bool:
        return self.children is not None

    def meta_property(self, name: str) -> Any:
        """Return the last truthy value stored under ``name`` in the metadata bag."""
        for entry in reversed(self.meta):
            if entry.get(name):
                return entry[name]
        return None

    def has_rule(self, name: str) -> bool:
        return any(rule.name == name for rule in self.rules)

    def get_arg(self, name: str) -> Any:
        # Later rules override earlier ones with the same name.
        for rule in reversed(self.rules):
            if rule.name == name:
                return rule.arg
        return None

    def walk(self) -> Iterable["SchemaNode"]:
        """Yield this node and every node below it, depth first."""
        yield self
        for field in self.children or []:
            yield from field.node.walk()
        for item in self.items:
            yield from item.walk()
        for match in self.matches:
            for branch in (match.node, match.is_, match.then, match.otherwise):
                if branch is not None:
                    yield from branch.walk()


ObjectField.model_rebuild()
UnionMatch.model_rebuild()
SchemaNode.model_rebuild()


# --- Builders ---

_FLAG_KEYWORDS = {
    "label", "description", "notes", "tags", "default", "examples",
    "timestamp", "sparse", "single",
}


def _make(kind: NodeKind, *, required: bool = False, optional: bool = False, forbidden: bool = False,
          meta: Union[Mapping[str, Any], List[Mapping[str, Any]], None] = None,
          valid: Optional[Iterable[Any]] = None, example: Any = None,
          **kwargs: Any) -> SchemaNode:
    data: Dict[str, Any] = {"kind": kind.value}
    if required:
        data["presence"] = Presence.REQUIRED
    elif optional:
        data["presence"] = Presence.OPTIONAL
    elif forbidden:
        data["presence"] = Presence.FORBIDDEN
    if meta is not None:
        data["meta"] = [dict(meta)] if isinstance(meta, Mapping) else [dict(m) for m in meta]
    if valid is not None:
        data["allowed"] = list(valid)
    if example is not None:
        data["examples"] = [example]

    rules: List[Rule] = []
    for key, value in kwargs.items():
        if key in _FLAG_KEYWORDS:
            data[key] = value
        elif key in ("children", "items", "matches"):
            data[key] = value
        else:
            # Anything else is a constraint, e.g. min=1 or email=True.
            rules.append(Rule(name=key, arg=value))
    data["rules"] = rules
    return SchemaNode(**data)


def string(**kwargs: Any) -> SchemaNode:
    return _make(NodeKind.STRING, **kwargs)


def number(**kwargs: Any) -> SchemaNode:
    return _make(NodeKind.NUMBER, **kwargs)


def integer(**kwargs: Any) -> SchemaNode:
    kwargs.setdefault("integer", True)
    return _make(NodeKind.NUMBER, **kwargs)


def boolean(**kwargs: Any) -> SchemaNode:
    return _make(NodeKind.BOOLEAN, **kwargs)


def date(**kwargs: Any) -> SchemaNode:
    return _make(NodeKind.DATE, **kwargs)


def binary(**kwargs: Any) -> SchemaNode:
    return _make(NodeKind.BINARY, **kwargs)


def any_(**kwargs: Any) -> SchemaNode:
    return _make(NodeKind.ANY, **kwargs)


def func(**kwargs: Any) -> SchemaNode:
    return _make(NodeKind.FUNC, **kwargs)


def file(**kwargs: Any) -> SchemaNode:
    """An uploaded file field, flagged through the ``swaggerType`` metadata key."""
    meta = dict(kwargs.pop("meta", None) or {})
    meta["swaggerType"] = "file"
    return _make(NodeKind.ANY, meta=meta, **kwargs)


def obj(keys: Optional[Mapping[str, SchemaNode]] = None, **kwargs: Any) -> SchemaNode:
    """Object node. ``keys=None`` declares no children; ``{}`` declares an explicitly empty key set."""
    children = None
    if keys is not None:
        children = [ObjectField(key=key, node=node) for key, node in keys.items()]
    return _make(NodeKind.OBJECT, children=children, **kwargs)


def array(*items: SchemaNode, **kwargs: Any) -> SchemaNode:
    return _make(NodeKind.ARRAY, items=list(items), **kwargs)


def alternatives(*nodes: SchemaNode, **kwargs: Any) -> SchemaNode:
    """Union in "try" form: interchangeable alternatives in declaration order."""
    return _make(NodeKind.ALTERNATIVES, matches=[UnionMatch(node=n) for n in nodes], **kwargs)


def when(ref: str, *, is_: Optional[SchemaNode] = None, then: Optional[SchemaNode] = None,
         otherwise: Optional[SchemaNode] = None, **kwargs: Any) -> SchemaNode:
    """Union in "when" form: outcomes keyed on the value of sibling field ``ref``."""
    match = UnionMatch(ref=ref, is_=is_, then=then, otherwise=otherwise)
    return _make(NodeKind.ALTERNATIVES, matches=[match], **kwargs)


def add_when(node: SchemaNode, ref: str, *, is_: Optional[SchemaNode] = None,
             then: Optional[SchemaNode] = None, otherwise: Optional[SchemaNode] = None) -> SchemaNode:
    """Append another condition to a "when" union and return it."""
    node.matches.append(UnionMatch(ref=ref, is_=is_, then=then, otherwise=otherwise))
    return node


def is_custom_validator(value: Any) -> bool:
    """True for a host-supplied callable that cannot be introspected into a tree."""
    return callable(value) and not isinstance(value, (SchemaNode, type))

