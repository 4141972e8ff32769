"""
Definition registry: the named, deduplicated schema pools of one document build.
"""
import copy
from typing import Any, Dict, Optional

import structlog

from ..config import BuilderSettings
from ..models.common import DefinitionPool
from .hashing import same_content
from .utilities import delete_empty_properties

logger = structlog.get_logger(__name__)

DEFAULT_PREFIX = "Model "

# Bookkeeping keys that never belong in a stored definition.
TRANSIENT_KEYS = ("optional", "name")


class DefinitionRegistry:
    """
    Owns the primary and alternate definition pools for a single build.

    Not reentrant: one build, one registry. Two concurrent builds must each
    create their own instance.
    """

    def __init__(self, settings: BuilderSettings):
        self.settings = settings
        self.pools: Dict[DefinitionPool, Dict[str, Dict[str, Any]]] = {
            DefinitionPool.PRIMARY: {},
            DefinitionPool.ALTERNATE: {},
        }
        self.logger = logger.bind(service="DefinitionRegistry")

    def pool(self, pool: DefinitionPool) -> Dict[str, Dict[str, Any]]:
        return self.pools[pool]

    @staticmethod
    def ref(name: str, pool: DefinitionPool) -> str:
        return pool.pointer_prefix + name

    def append(self, candidate_name: Optional[str], schema: Dict[str, Any],
               pool: DefinitionPool = DefinitionPool.PRIMARY) -> str:
        """Register ``schema`` in ``pool`` or reuse an equal entry. Returns the name to reference."""
        schema = self._format(schema)
        collection = self.pools[pool]

        existing = collection.get(candidate_name) if candidate_name else None
        if existing is not None:
            if same_content(existing, schema):
                return candidate_name
            return self._internal_append(candidate_name, schema, collection, force_dynamic_name=True)
        return self._internal_append(candidate_name, schema, collection, force_dynamic_name=False)

    def _format(self, schema: Dict[str, Any]) -> Dict[str, Any]:
        schema = copy.deepcopy(schema)
        for key in TRANSIENT_KEYS:
            schema.pop(key, None)
        return delete_empty_properties(schema)

    def _internal_append(self, candidate_name: Optional[str], schema: Dict[str, Any],
                         collection: Dict[str, Dict[str, Any]], force_dynamic_name: bool) -> str:
        if self.settings.reuse_definitions:
            found = self.find_equal(schema, collection)
            if found is not None:
                return found

        if force_dynamic_name:
            if self.settings.definition_prefix == "useLabel":
                name = self.next_model_name(f"{candidate_name} ", collection)
            else:
                name = self.next_model_name(DEFAULT_PREFIX, collection)
            self.logger.debug("Definition name taken by a different schema, renamed.",
                              requested=candidate_name, allocated=name)
        else:
            name = candidate_name or self.next_model_name(DEFAULT_PREFIX, collection)

        collection[name] = schema
        return name

    @staticmethod
    def find_equal(schema: Dict[str, Any], collection: Dict[str, Dict[str, Any]]) -> Optional[str]:
        """Key of the first entry with the same content as ``schema``."""
        for key, candidate in collection.items():
            if same_content(candidate, schema):
                return key
        return None

    @staticmethod
    def next_model_name(prefix: str, collection: Dict[str, Any]) -> str:
        """``prefix`` followed by one more than the highest integer suffix already used with it."""
        highest = 0
        for key in collection:
            if not key.startswith(prefix):
                continue
            suffix = key[len(prefix):]
            num = int(suffix) if suffix.isdigit() else 0
            if num > highest:
                highest = num
        return f"{prefix}{highest + 1}"
