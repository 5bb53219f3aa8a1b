from __future__ import annotations

from collections import OrderedDict
from types import MappingProxyType
from typing import Any, Dict, Generic, Iterator, List, Mapping, Optional, TypeVar

from .types import MISSING

T = TypeVar("T")


class LayeredMap(Generic[T]):
    """
    Base mapping plus an ordered stack of numbered optimistic overlays.

    - Layers are kept newest-first; opening a layer puts it in front.
    - At most one overlay exists per layer id. Writing to an open layer
      merges into it.
    - ``get`` returns the value from the first layer that holds the key,
      even when that value is the ``MISSING`` tombstone, and falls back to
      the base mapping otherwise.
    - ``clear`` drops a whole layer. Base is never touched by layer writes.
    """

    __slots__ = ("base", "_layers")

    def __init__(self) -> None:
        self.base: Dict[str, T] = {}
        self._layers: "OrderedDict[int, Dict[str, Any]]" = OrderedDict()

    # ------------------------------------------------------------------ #
    # Core operations
    # ------------------------------------------------------------------ #

    def set(self, key: str, value: Any, layer_id: Optional[int] = None) -> None:
        if layer_id is not None:
            layer = self._layers.get(layer_id)
            if layer is None:
                layer = self._layers[layer_id] = {}
                self._layers.move_to_end(layer_id, last=False)
            # MISSING stays in the layer as a tombstone
            layer[key] = value
        elif value is MISSING:
            self.base.pop(key, None)
        else:
            self.base[key] = value

    def get(self, key: str) -> Any:
        for layer in self._layers.values():
            if key in layer:
                return layer[key]
        return self.base.get(key, MISSING)

    def clear(self, layer_id: int) -> None:
        self._layers.pop(layer_id, None)

    def stack(self, key: str) -> Iterator[Any]:
        """
        Yield every stored value for ``key``, newest layer first, base last.

        Iteration stops after the first tombstone, since nothing below it
        is visible.
        """
        for layer in self._layers.values():
            if key in layer:
                value = layer[key]
                yield value
                if value is MISSING:
                    return
        if key in self.base:
            yield self.base[key]

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #

    @property
    def layer_ids(self) -> List[int]:
        return list(self._layers)

    def layer(self, layer_id: int) -> Mapping[str, Any]:
        return MappingProxyType(self._layers.get(layer_id, {}))

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not MISSING

    def __repr__(self) -> str:
        return f"LayeredMap(base={len(self.base)} keys, layers={self.layer_ids})"


def make() -> LayeredMap[Any]:
    return LayeredMap()
