from __future__ import annotations

from enum import Enum, IntEnum, StrEnum


class SourceKind(StrEnum):
    """Which provider produced a Tournament, and therefore what `Game.id` means."""

    LOCAL_OVERRIDE = "local_override"
    TOPOLOGY = "topology"
    LIVE = "live"
    EMBEDDED_SNAPSHOT = "embedded_snapshot"


class GameStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    FINAL = "FINAL"
    POSTPONED = "POSTPONED"


class Slot(StrEnum):
    TOP = "top"
    BOTTOM = "bottom"

    @property
    def other(self) -> Slot:
        return Slot.BOTTOM if self is Slot.TOP else Slot.TOP


class RoundKind(IntEnum):
    """Round of the bracket, numbered the way position ids are (id // 100)."""

    FIRST_FOUR = 1
    FIRST = 2
    SECOND = 3
    SWEET_16 = 4
    ELITE_8 = 5
    FINAL_FOUR = 6
    CHAMPIONSHIP = 7

    @classmethod
    def from_number(cls, number: int) -> RoundKind:
        try:
            return cls(number)
        except ValueError:
            return cls.FIRST

    @property
    def label(self) -> str:
        return _ROUND_LABELS[self]

    @property
    def is_final_four(self) -> bool:
        return self in (RoundKind.FINAL_FOUR, RoundKind.CHAMPIONSHIP)

    def prev(self) -> RoundKind | None:
        if self is RoundKind.FIRST_FOUR:
            return None
        return RoundKind(self.value - 1)

    def next(self) -> RoundKind | None:
        if self is RoundKind.CHAMPIONSHIP:
            return None
        return RoundKind(self.value + 1)


_ROUND_LABELS: dict[RoundKind, str] = {
    RoundKind.FIRST_FOUR: "First Four",
    RoundKind.FIRST: "1st Round",
    RoundKind.SECOND: "2nd Round",
    RoundKind.SWEET_16: "Sweet 16",
    RoundKind.ELITE_8: "Elite Eight",
    RoundKind.FINAL_FOUR: "Final Four",
    RoundKind.CHAMPIONSHIP: "Championship",
}
