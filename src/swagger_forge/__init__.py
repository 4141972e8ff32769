"""swagger-forge - translate validation-rule trees into Swagger 2.0 documents.

Walks per-endpoint validation trees, maps every node to a Swagger property
descriptor, and deduplicates shared object schemas into stably-named
definitions referenced by pointer.
"""

__version__ = "0.1.0"

from .config import BuilderSettings, Config
from .schema_gen.builder import DocumentBuilder, build_document

__all__ = ["BuilderSettings", "Config", "DocumentBuilder", "build_document"]
