"""Region constraints: "exactly N of these candidate points are mines"."""

from dataclasses import dataclass
from typing import FrozenSet, Iterable, Iterator, List, Set

from .utils import Point, sort_points


@dataclass(frozen=True)
class RegionConstraint:
    """
    A required mine count over a set of candidate points.

    Differences of two constraints are themselves ``RegionConstraint`` values
    and may carry a zero or negative count or an empty candidate set; only
    ``RegionSet`` insists on a well-formed constraint.
    """
    required: int
    candidates: FrozenSet[Point]

    @classmethod
    def of(cls, required: int, candidates: Iterable[Point]) -> "RegionConstraint":
        return cls(required, frozenset(candidates))

    def contains(self, other: "RegionConstraint") -> bool:
        """A contains B iff A.required >= B.required and A.candidates >= B.candidates."""
        return (
            self.required >= other.required
            and self.candidates >= other.candidates
        )

    def __sub__(self, other: "RegionConstraint") -> "RegionConstraint":
        return RegionConstraint(
            self.required - other.required, self.candidates - other.candidates
        )

    @property
    def all_safe(self) -> bool:
        return self.required == 0

    @property
    def all_mines(self) -> bool:
        return self.required == len(self.candidates)

    def __str__(self) -> str:
        points = ", ".join(str(p) for p in sort_points(self.candidates))
        return f"{self.required} in {{{points}}}"


class RegionSet:
    """
    Insertion-ordered, de-duplicated collection of constraints.

    Iteration follows first-seen order so that which deduction fires first is
    reproducible from run to run.
    """

    def __init__(self, constraints: Iterable[RegionConstraint] = ()) -> None:
        self._order: List[RegionConstraint] = []
        self._members: Set[RegionConstraint] = set()
        for constraint in constraints:
            self.add(constraint)

    def add(self, constraint: RegionConstraint) -> bool:
        """
        Insert a constraint unless an identical one is already present.

        Returns:
            True if the constraint was new.

        Raises:
            ValueError: If the constraint has no required mine or no candidates.
        """
        if constraint.required <= 0 or not constraint.candidates:
            raise ValueError(
                f"region constraints need required > 0 and candidates, got {constraint}."
            )
        if constraint in self._members:
            return False
        self._members.add(constraint)
        self._order.append(constraint)
        return True

    def __contains__(self, constraint: object) -> bool:
        return constraint in self._members

    def __iter__(self) -> Iterator[RegionConstraint]:
        return iter(self._order)

    def __len__(self) -> int:
        return len(self._order)

    def __repr__(self) -> str:
        return f"RegionSet([{', '.join(str(c) for c in self._order)}])"
