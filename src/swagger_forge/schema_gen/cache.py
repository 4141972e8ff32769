"""Identity-keyed memo of promoted node translations, one partition per definition pool."""
import copy
from typing import Any, Dict, Optional, Tuple

from ..models.common import DefinitionPool
from ..models.nodes import SchemaNode


class NodeCache:
    """
    Maps a SchemaNode object (by identity, not content) to the pointer
    descriptor it was promoted to. Scoped to one document build.
    """

    def __init__(self) -> None:
        # id(node) -> (node, descriptor). Holding the node keeps its id from being reused mid-build.
        self._partitions: Dict[DefinitionPool, Dict[int, Tuple[SchemaNode, Dict[str, Any]]]] = {
            DefinitionPool.PRIMARY: {},
            DefinitionPool.ALTERNATE: {},
        }

    def get(self, node: SchemaNode, pool: DefinitionPool) -> Optional[Dict[str, Any]]:
        entry = self._partitions[pool].get(id(node))
        if entry is None or entry[0] is not node:
            return None
        return copy.deepcopy(entry[1])

    def set(self, node: SchemaNode, pool: DefinitionPool, descriptor: Dict[str, Any]) -> None:
        if "$ref" not in descriptor:
            return
        self._partitions[pool][id(node)] = (node, copy.deepcopy(descriptor))

    def __len__(self) -> int:
        return sum(len(partition) for partition in self._partitions.values())
