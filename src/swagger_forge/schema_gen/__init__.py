"""
Schema generation for swagger-forge.

Translates validation-rule trees into Swagger 2.0 property descriptors,
deduplicates promoted schemas into definition pools, projects descriptors
into parameters, and assembles per-route operations into a document.
"""

from .builder import DocumentBuilder, build_document, dereference
from .cache import NodeCache
from .definitions import DefinitionRegistry
from .parameters import project
from .paths import PathBuilder
from .properties import PresenceContribution, PropertyResult, PropertyTranslator
from .responses import ResponseBuilder

__all__ = [
    "DefinitionRegistry",
    "DocumentBuilder",
    "NodeCache",
    "PathBuilder",
    "PresenceContribution",
    "PropertyResult",
    "PropertyTranslator",
    "ResponseBuilder",
    "build_document",
    "dereference",
    "project",
]
