"""Parameter store referenced by expression trees."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .types import MissingParamError, ParamHandle, StaleParamRefError


@dataclass
class Param:
    """A solver unknown: a handle and its current value."""

    h: ParamHandle
    val: float = 0.0


class ParamList:
    """Ordered list of parameters keyed by handle.

    ``generation`` changes on every structural edit (add, remove, clear).
    Value edits through :class:`Param` objects do not change it, so resolved
    references survive solver iterations but not a rebuild of the table.
    """

    def __init__(self, params: Iterable[Tuple[ParamHandle, float]] = ()):
        self._elems: List[Param] = []
        self._index: Dict[ParamHandle, int] = {}
        self.generation = 0
        for h, val in params:
            self.add(h, val)

    def add(self, h: ParamHandle, val: float = 0.0) -> Param:
        if h in self._index:
            raise ValueError(f"duplicate parameter handle {h}")
        param = Param(h, float(val))
        self._index[h] = len(self._elems)
        self._elems.append(param)
        self.generation += 1
        return param

    def remove(self, h: ParamHandle) -> None:
        idx = self._index.pop(h)
        del self._elems[idx]
        self._index = {p.h: i for i, p in enumerate(self._elems)}
        self.generation += 1

    def clear(self) -> None:
        self._elems.clear()
        self._index.clear()
        self.generation += 1

    def find(self, h: ParamHandle) -> Optional[Param]:
        idx = self._index.get(h)
        return None if idx is None else self._elems[idx]

    def get(self, h: ParamHandle) -> Param:
        param = self.find(h)
        if param is None:
            raise MissingParamError(h, f"parameter {h} not in store")
        return param

    def index_of(self, h: ParamHandle) -> int:
        try:
            return self._index[h]
        except KeyError:
            raise MissingParamError(h, f"parameter {h} not in store") from None

    def at(self, index: int) -> Param:
        return self._elems[index]

    def handles(self) -> List[ParamHandle]:
        return [p.h for p in self._elems]

    def values(self) -> Dict[ParamHandle, float]:
        return {p.h: p.val for p in self._elems}

    def __getitem__(self, h: ParamHandle) -> Param:
        return self.get(h)

    def __contains__(self, h: object) -> bool:
        return h in self._index

    def __iter__(self) -> Iterator[Param]:
        return iter(self._elems)

    def __len__(self) -> int:
        return len(self._elems)

    def __repr__(self) -> str:
        return f"ParamList(n={len(self._elems)}, generation={self.generation})"


@dataclass(frozen=True)
class ParamRef:
    """Direct reference to a slot of a :class:`ParamList`.

    Valid only while the store keeps the generation it had when the reference
    was taken.
    """

    store: ParamList
    index: int
    generation: int

    @classmethod
    def to(cls, store: ParamList, h: ParamHandle) -> "ParamRef":
        return cls(store, store.index_of(h), store.generation)

    @property
    def param(self) -> Param:
        if self.store.generation != self.generation:
            raise StaleParamRefError(
                f"parameter store changed (generation {self.generation} -> "
                f"{self.store.generation}) while a resolved reference was live"
            )
        return self.store.at(self.index)

    @property
    def h(self) -> ParamHandle:
        return self.param.h

    def __repr__(self) -> str:
        return f"ParamRef(index={self.index}, generation={self.generation})"


__all__ = ["Param", "ParamList", "ParamRef"]
