from enum import Enum

from pydantic import BaseModel


class BasePydanticModel(BaseModel):
    model_config = {
        "extra": "forbid",
        "populate_by_name": True,
        "use_enum_values": True,
    }


class NodeKind(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    BINARY = "binary"
    OBJECT = "object"
    ARRAY = "array"
    ALTERNATIVES = "alternatives"
    ANY = "any"
    FUNC = "func"


class Presence(str, Enum):
    REQUIRED = "required"
    OPTIONAL = "optional"
    FORBIDDEN = "forbidden"


class ParameterLocation(str, Enum):
    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    FORM = "formData"
    BODY = "body"


class DefinitionPool(str, Enum):
    PRIMARY = "definitions"
    ALTERNATE = "x-alt-definitions"

    @property
    def pointer_prefix(self) -> str:
        return f"#/{self.value}/"
