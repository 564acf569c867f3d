"""Actions and moves exchanged between the solver and the game engine."""

from dataclasses import dataclass
from enum import Enum
from typing import AbstractSet, FrozenSet, Iterable, List, Optional, Tuple

from .utils import Point, row_major_key, sort_points


class Operation(Enum):
    """A single player interaction with a cell."""
    REVEAL = "reveal"
    CHORD = "chord"
    FLAG = "flag"


_OPERATION_ORDER = {Operation.REVEAL: 0, Operation.CHORD: 1, Operation.FLAG: 2}


@dataclass(frozen=True)
class Action:
    point: Point
    operation: Operation

    def sort_key(self) -> Tuple[int, int, int]:
        y, x = row_major_key(self.point)
        return y, x, _OPERATION_ORDER[self.operation]

    def __str__(self) -> str:
        return f"{self.operation.value} {self.point}"


class Logic(Enum):
    """The deduction rules that can justify a move."""
    CHORD = "the amount of flags around the cell matches its number"
    FLAG_CHORD = "the amount of flaggable cells around the cell matches its number"
    OVERFLAGGED = "there are more flags around the cell than its number"
    REGION_DEDUCTION_REVEAL = "the surrounding cells force the cells to be safe"
    REGION_DEDUCTION_FLAG = "the surrounding cells force the cells to be a mine"
    ZERO_MINES_REMAINING = "0 mines remaining, all unknown cells must be safe"
    BRUTE_FORCE = "in every possible mine configuration the cells are safe/mines"
    BRUTE_FORCE_EXHAUSTION = (
        "in every possible mine configuration every mine is determined, "
        "all unused cells must be safe"
    )

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Reason:
    """The rule that produced a move and the points that justified it."""
    logic: Logic
    related: FrozenSet[Point] = frozenset()

    def __str__(self) -> str:
        if not self.related:
            return str(self.logic)
        points = ", ".join(str(p) for p in sort_points(self.related))
        return f"{self.logic} [{points}]"


@dataclass(frozen=True)
class Move:
    """
    A non-empty set of independently applicable actions plus an optional reason.

    Actions within one move are unordered; ``ordered_actions`` gives the
    canonical row-major order used whenever they have to be applied one by one.
    """
    actions: FrozenSet[Action]
    reason: Optional[Reason] = None

    def __post_init__(self) -> None:
        if not self.actions:
            raise ValueError("a move needs at least one action.")

    @classmethod
    def single(cls, action: Action, reason: Optional[Reason] = None) -> "Move":
        return cls(frozenset((action,)), reason)

    @classmethod
    def multi(
        cls, actions: Iterable[Action], reason: Optional[Reason] = None
    ) -> "Move":
        return cls(frozenset(actions), reason)

    @classmethod
    def of(
        cls,
        points: Iterable[Point],
        operation: Operation,
        logic: Logic,
        related: AbstractSet[Point] = frozenset(),
    ) -> "Move":
        """Build a move applying ``operation`` to every point, citing ``related``."""
        return cls.multi(
            (Action(p, operation) for p in points),
            Reason(logic, frozenset(related)),
        )

    def __str__(self) -> str:
        actions = ", ".join(str(a) for a in self.ordered_actions())
        if self.reason is None:
            return actions
        return f"{actions}: {self.reason}"

    def ordered_actions(self) -> List[Action]:
        return sorted(self.actions, key=Action.sort_key)

    @property
    def logic(self) -> Optional[Logic]:
        return self.reason.logic if self.reason is not None else None

    def points(self, operation: Optional[Operation] = None) -> List[Point]:
        return sort_points(
            a.point
            for a in self.actions
            if operation is None or a.operation == operation
        )


class GameResult(Enum):
    """Coarse outcome of an automated game."""
    WON = "won"
    LOST = "lost"
    RESIGNED = "resigned"
