"""
Document assembly: wraps the path builder output into a Swagger 2.0 document
and optionally flattens every internal ``$ref`` into inline schemas.
"""
import copy
from typing import Any, Dict, Iterable, List, Optional

import structlog

from ..config import BuilderSettings
from ..exceptions import DereferenceError
from ..logging_config import DiagnosticLog
from ..models.endpoint import Endpoint
from .paths import PathBuilder

logger = structlog.get_logger(__name__)

SWAGGER_VERSION = "2.0"


class DocumentBuilder:
    """Builds complete documents. Safe to reuse: each build gets fresh definition pools."""

    def __init__(self, settings: Optional[BuilderSettings] = None, log: Optional[DiagnosticLog] = None):
        self.settings = settings or BuilderSettings()
        self.log = log
        self.logger = logger.bind(service="DocumentBuilder")

    def build_fragment(self, endpoints: Iterable[Endpoint]) -> Dict[str, Any]:
        """``{definitions, x-alt-definitions, paths}`` for ``endpoints``."""
        return PathBuilder(self.settings, self.log).build(endpoints)

    def build(self, endpoints: Iterable[Endpoint]) -> Dict[str, Any]:
        endpoints = list(endpoints)
        self.logger.info("Building document", endpoints=len(endpoints))
        fragment = self.build_fragment(endpoints)

        document: Dict[str, Any] = {
            "swagger": SWAGGER_VERSION,
            "basePath": self.settings.base_path,
        }
        if self.settings.consumes:
            document["consumes"] = list(self.settings.consumes)
        if self.settings.produces:
            document["produces"] = list(self.settings.produces)
        document["paths"] = fragment["paths"]
        document["definitions"] = fragment["definitions"]
        if fragment["x-alt-definitions"]:
            document["x-alt-definitions"] = fragment["x-alt-definitions"]

        if self.settings.de_reference:
            return dereference(document)
        return document


def build_document(endpoints: Iterable[Endpoint], settings: Optional[BuilderSettings] = None,
                   log: Optional[DiagnosticLog] = None) -> Dict[str, Any]:
    return DocumentBuilder(settings, log).build(endpoints)


# --- dereferencing ---

def _decode_pointer_token(token: str) -> str:
    """Decode a single RFC 6901 token."""
    return token.replace("~1", "/").replace("~0", "~")


def resolve_pointer(document: Dict[str, Any], pointer: str) -> Any:
    """Resolve an internal ``#/...`` JSON pointer. Raises KeyError when it cannot be followed."""
    if not pointer.startswith("#/"):
        raise KeyError(pointer)
    current: Any = document
    for raw in pointer[2:].split("/"):
        token = _decode_pointer_token(raw)
        if isinstance(current, dict) and token in current:
            current = current[token]
        elif isinstance(current, list) and token.isdigit() and int(token) < len(current):
            current = current[int(token)]
        else:
            raise KeyError(pointer)
    return current


def dereference(document: Dict[str, Any]) -> Dict[str, Any]:
    """
    Return a copy of ``document`` with every ``$ref`` replaced by the schema it
    points to, and without the ``definitions``/``x-alt-definitions`` sections.

    Keys beside a ``$ref`` (e.g. ``x-alternatives``) are kept. Unresolvable or
    circular pointers raise DereferenceError.
    """
    if not isinstance(document, dict):
        raise DereferenceError()

    def inline(value: Any, trail: List[str]) -> Any:
        if isinstance(value, dict):
            ref = value.get("$ref")
            if isinstance(ref, str):
                if ref in trail:
                    raise DereferenceError(pointer=ref)
                try:
                    target = resolve_pointer(document, ref)
                except KeyError as e:
                    raise DereferenceError(pointer=ref) from e
                resolved = inline(copy.deepcopy(target), trail + [ref])
                siblings = {k: inline(v, trail) for k, v in value.items() if k != "$ref"}
                if isinstance(resolved, dict):
                    return {**resolved, **siblings}
                return resolved
            return {key: inline(item, trail) for key, item in value.items()}
        if isinstance(value, list):
            return [inline(item, trail) for item in value]
        return value

    out = {
        key: inline(value, [])
        for key, value in document.items()
        if key not in ("definitions", "x-alt-definitions")
    }
    logger.debug("Document dereferenced")
    return out
