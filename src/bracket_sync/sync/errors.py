from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bracket_sync.sync.merge import MergeResult


class FetchError(RuntimeError):
    """A bracket load could not produce a Tournament."""


class AllSourcesFailed(FetchError):
    """Every source in the fetch chain failed; `errors` maps source name to its failure."""

    def __init__(self, errors: Mapping[str, BaseException]) -> None:
        self.errors = dict(errors)
        detail = "; ".join(f"{name}: {err}" for name, err in self.errors.items())
        super().__init__(f"all bracket sources failed ({detail or 'no sources configured'})")


class MergeError(RuntimeError):
    """A live update could not be folded into the bracket consistently."""


class AdvancementConflict(MergeError):
    """A winner would overwrite a different, already-resolved team downstream.

    The rest of the update is still applied; `result` describes what was.
    """

    def __init__(self, conflicts: list[str], result: MergeResult) -> None:
        self.conflicts = conflicts
        self.result = result
        super().__init__("; ".join(conflicts))


class StaleUpdate(MergeError):
    """An update computed against a Tournament that has since been replaced."""

    def __init__(self, expected_stamp: int, current_stamp: int) -> None:
        self.expected_stamp = expected_stamp
        self.current_stamp = current_stamp
        super().__init__(
            f"update computed for bracket #{expected_stamp}, current is #{current_stamp}"
        )
