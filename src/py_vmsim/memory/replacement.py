"""Page replacement algorithms — choosing which resident page to evict.

When a process has used up its RAM frames and touches a page that is
not in memory, one of its resident pages must make room.  Which one is
the **replacement policy**:

    - **FIFO** — evict the page that has been resident longest.  A plain
      queue; cheap, but blind to how often a page is used.
    - **Clock** — second chance.  A hand sweeps the resident pages in a
      circle: a page with its referenced bit set gets the bit cleared
      and is skipped, the first page found with the bit clear is the
      victim.  A page used since the last sweep survives one more.
    - **Random** — evict any resident page, uniformly.  A useful
      baseline: a good algorithm should beat it.

Each algorithm is a plain function that returns the *index* of the
victim within the resident set.  They never touch the resident set
itself (the page table does the removal and insertion), and the only
side effect is Clock clearing referenced bits.  That keeps them easy to
test without a page table or a log around them.

The resident set is passed as a sequence of VPNs plus the page table's
entry storage, since the resident set only holds keys into it.
"""

from __future__ import annotations

import contextlib
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import random
    from collections.abc import Sequence

    from py_vmsim.memory.entry import PageTableEntry


class EmptyResidentSetError(IndexError):
    """Raise when asked to pick a victim from an empty resident set."""


class ReplacementAlgorithm(StrEnum):
    """The implemented page replacement policies."""

    CLOCK = "clock"
    FIFO = "fifo"
    RANDOM = "random"

    @property
    def display_name(self) -> str:
        """Return the name used in diagnostic lines."""
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    ReplacementAlgorithm.CLOCK: "Clock",
    ReplacementAlgorithm.FIFO: "FIFO",
    ReplacementAlgorithm.RANDOM: "Random",
}


def resolve_algorithm(value: object) -> ReplacementAlgorithm:
    """Map a configuration value to a replacement algorithm.

    Accepts an enum member or its name in any case.  Anything that is
    not recognised falls back to ``RANDOM``.
    """
    if isinstance(value, ReplacementAlgorithm):
        return value
    if isinstance(value, str):
        with contextlib.suppress(ValueError):
            return ReplacementAlgorithm(value.strip().lower())
    return ReplacementAlgorithm.RANDOM


def _require_nonempty(resident: Sequence[int]) -> None:
    if not resident:
        msg = "No resident pages to evict"
        raise EmptyResidentSetError(msg)


def select_fifo(resident: Sequence[int]) -> int:
    """Return the index of the oldest resident page (the head)."""
    _require_nonempty(resident)
    return 0


def select_clock(
    resident: Sequence[int],
    entries: Sequence[PageTableEntry],
    hand: int,
) -> int:
    """Sweep from *hand* and return the index of the first unreferenced page.

    Every referenced page passed on the way has its bit cleared and the
    hand moves exactly one slot, wrapping at the end.  If all pages are
    referenced the sweep clears every bit once and comes back to where
    it started, so the victim is the page under the starting hand.

    Raises:
        EmptyResidentSetError: If *resident* is empty.

    """
    _require_nonempty(resident)
    size = len(resident)
    hand %= size
    while entries[resident[hand]].referenced:
        # Second chance: clear the bit, move on
        entries[resident[hand]].referenced = False
        hand = (hand + 1) % size
    return hand


def select_random(resident: Sequence[int], rng: random.Random) -> int:
    """Return a uniformly random index into *resident*."""
    _require_nonempty(resident)
    return rng.randrange(len(resident))


def select_victim_index(
    algorithm: ReplacementAlgorithm,
    resident: Sequence[int],
    entries: Sequence[PageTableEntry],
    *,
    hand: int,
    rng: random.Random,
) -> int:
    """Dispatch to the selection function for *algorithm*."""
    match algorithm:
        case ReplacementAlgorithm.FIFO:
            return select_fifo(resident)
        case ReplacementAlgorithm.CLOCK:
            return select_clock(resident, entries, hand)
        case ReplacementAlgorithm.RANDOM:
            return select_random(resident, rng)
