"""Selector evaluation results."""

from typing import Iterable, List, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field


class SelectorValue(BaseModel):
    """Uniform result of a selector expression.

    Arity-1 values represent atom sets as singleton tuples. Tuples are
    de-duplicated and keep the order in which they were produced.

    Attributes:
        arity: Number of columns
        tuples: Rows of atom ids
    """

    model_config = ConfigDict(frozen=True)

    arity: int = Field(..., ge=0)
    tuples: Tuple[Tuple[str, ...], ...] = Field(default_factory=tuple)

    @classmethod
    def of(cls, arity: int, rows: Iterable[Sequence[str]]) -> "SelectorValue":
        """Build a value, dropping duplicate rows."""
        seen = set()
        unique = []
        for row in rows:
            row = tuple(row)
            if row not in seen:
                seen.add(row)
                unique.append(row)
        return cls(arity=arity, tuples=tuple(unique))

    @classmethod
    def empty(cls, arity: int = 1) -> "SelectorValue":
        return cls(arity=arity, tuples=())

    def is_empty(self) -> bool:
        return not self.tuples

    def contains(self, row: Sequence[str]) -> bool:
        return tuple(row) in self.tuples

    def selected_atoms(self) -> List[str]:
        """Atoms of an arity-1 value; empty for any other arity."""
        if self.arity != 1:
            return []
        return [row[0] for row in self.tuples]

    def selected_pairs(self) -> List[Tuple[str, str]]:
        """First and last atom of every tuple with arity two or more."""
        return [(row[0], row[-1]) for row in self.tuples if len(row) > 1]

    def selected_tuples(self) -> List[Tuple[str, ...]]:
        """Full tuples with arity two or more."""
        return [row for row in self.tuples if len(row) > 1]

    def pretty(self) -> str:
        if not self.tuples:
            return "none"
        return ", ".join("->".join(row) for row in self.tuples)
