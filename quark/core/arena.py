"""
Index-based arena owning every AST node of one compilation unit.

Nodes are appended to one growable store per AST level and addressed by
their integer index in that store. Nothing is freed individually: the
whole arena is released at once when the compilation unit is done.
"""
import logging
from dataclasses import fields, is_dataclass
from typing import Any, Dict, List

from ..utils.errors import ArenaError

logger = logging.getLogger(__name__)

WORD_SIZE = 8
DEFAULT_CAPACITY = 4 * 1024 * 1024

STORES = ('terms', 'exprs', 'stmts', 'scopes')


def node_footprint(node: Any) -> int:
    """Bytes charged for a node: a tag word, one word per field, one per sequence element."""
    if not is_dataclass(node):
        raise TypeError(f"cannot allocate {type(node).__name__} in an arena")
    words = 1
    for f in fields(node):
        words += 1
        value = getattr(node, f.name)
        if isinstance(value, (tuple, list)):
            words += len(value)
    return words * WORD_SIZE


class Arena:
    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity <= 0:
            raise ArenaError(f"Arena capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.used = 0
        self.released = False
        self._stores: Dict[str, List[Any]] = {name: [] for name in STORES}

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False

    def __len__(self):
        return sum(len(store) for store in self._stores.values())

    @property
    def remaining(self) -> int:
        return self.capacity - self.used

    def _check_alive(self):
        if self.released:
            raise ArenaError("Arena used after release")

    def alloc(self, node: Any) -> int:
        self._check_alive()
        store_name = getattr(node, 'STORE', None)
        if store_name not in self._stores:
            raise TypeError(f"{type(node).__name__} is not an arena node")
        size = node_footprint(node)
        if self.used + size > self.capacity:
            raise ArenaError(
                f"Arena capacity exceeded: {self.used} of {self.capacity} bytes used, "
                f"{size} more requested"
            )
        self.used += size
        store = self._stores[store_name]
        store.append(node)
        return len(store) - 1

    def get(self, store_name: str, index: int) -> Any:
        self._check_alive()
        store = self._stores[store_name]
        if index < 0 or index >= len(store):
            raise ArenaError(f"Invalid {store_name} handle {index}")
        return store[index]

    def term(self, index: int):
        return self.get('terms', index)

    def expr(self, index: int):
        return self.get('exprs', index)

    def stmt(self, index: int):
        return self.get('stmts', index)

    def scope(self, index: int):
        return self.get('scopes', index)

    def release(self):
        if self.released:
            return
        logger.debug("releasing arena: %d nodes, %d/%d bytes", len(self), self.used, self.capacity)
        for store in self._stores.values():
            store.clear()
        self.released = True
