"""
Endpoint descriptions read by the path builder.

These mirror what a host framework exposes about one route: its path and
methods, the validation trees declared per location, the response trees,
and free-form documentation options including ``x-*`` vendor keys.
"""
from typing import Any, Dict, List, Optional, Union

from pydantic import Field

from .common import BasePydanticModel

HTTP_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]

# A location validator may be a SchemaNode, a mapping of name -> node, a
# pydantic model class, a custom callable, or a plain bool. It is normalized
# by the path builder, so the model only stores it.
LocationValidator = Any


class EndpointValidation(BasePydanticModel):
    headers: LocationValidator = None
    params: LocationValidator = None
    query: LocationValidator = None
    payload: LocationValidator = None

    model_config = {
        "extra": "forbid",
        "arbitrary_types_allowed": True,
    }


class EndpointOptions(BasePydanticModel):
    """Per-endpoint documentation options. Extra ``x-*`` keys are kept verbatim."""
    consumes: Optional[List[str]] = None
    produces: Optional[List[str]] = None
    responses: Optional[Dict[Union[int, str], Any]] = None
    payload_type: Optional[str] = Field(default=None, alias="payloadType")
    security: Optional[List[Dict[str, Any]]] = None
    order: Optional[int] = None
    deprecated: Optional[bool] = None
    id: Optional[str] = None
    validate_: Optional[EndpointValidation] = Field(default=None, alias="validate")

    model_config = {
        "extra": "allow",
        "populate_by_name": True,
        "arbitrary_types_allowed": True,
    }

    def vendor_extensions(self) -> Dict[str, Any]:
        extra = self.model_extra or {}
        return {key: value for key, value in extra.items() if key.startswith("x-") and len(key) > 2}


class Endpoint(BasePydanticModel):
    path: str
    method: Union[str, List[str]] = "GET"
    description: Optional[str] = None
    notes: Optional[Union[str, List[str]]] = None
    tags: List[str] = Field(default_factory=list)
    groups: Optional[List[str]] = None
    validate_: EndpointValidation = Field(default_factory=EndpointValidation, alias="validate")
    response_schema: Any = None
    response_status: Dict[Union[int, str], Any] = Field(default_factory=dict)
    options: EndpointOptions = Field(default_factory=EndpointOptions)

    model_config = {
        "extra": "forbid",
        "populate_by_name": True,
        "arbitrary_types_allowed": True,
    }

    def methods(self) -> List[str]:
        """Concrete upper-case methods; ``*`` expands to every documented method."""
        raw = [self.method] if isinstance(self.method, str) else list(self.method)
        out: List[str] = []
        for method in raw:
            if method == "*":
                out.extend(m for m in HTTP_METHODS if m not in out)
            elif method.upper() not in out:
                out.append(method.upper())
        return out
