"""Per-process page table and resident set.

The page table is the record of every virtual page a process has ever
touched.  It is a plain list indexed by VPN: entry ``i`` describes
virtual page ``i``.  It only grows; pages that get evicted from RAM
keep their entry (marked invalid), so a later access finds it again.

Alongside it lives the **resident set** — the pages of this process
that currently occupy RAM frames.  The resident set holds VPNs, not
entries: it is a view into the page table, so the two can never
disagree about a page's state.

When the process needs a frame and has none left, the driver calls
``select_victim_and_replace``.  The page table asks its operating
system which replacement algorithm is configured, picks a victim,
swaps it for the incoming page in the resident set, and hands the
victim back so the driver can write it out.

Clock hand persistence::

    resident = [a, b, c, d]   hand = 1, victim = c (index 2)
    remove c, append new  ->  [a, b, d, new]   hand = 2 (now d)

The hand stays at the victim's index, which after the removal is the
page that followed the victim.  If the victim was the last page the
hand wraps to 0.
"""

from __future__ import annotations

import contextlib
import random
from collections import deque
from typing import TYPE_CHECKING, Protocol

from py_vmsim.memory.entry import PageTableEntry
from py_vmsim.memory.replacement import (
    EmptyResidentSetError,
    ReplacementAlgorithm,
    resolve_algorithm,
    select_victim_index,
)

if TYPE_CHECKING:
    from collections.abc import Iterator


class PageTableError(ValueError):
    """Raise when a page table precondition is violated."""


class ReplacementHost(Protocol):
    """What a page table needs from the operating system that owns it."""

    @property
    def replacement_algorithm(self) -> object:
        """Return the configured replacement algorithm (any value)."""
        ...

    def test_out(self, message: str) -> None:
        """Record a diagnostic line."""
        ...


class PageTable:
    """The page table of one process, plus its resident set.

    Args:
        host: The operating system supplying the policy and the log.
        pid: The owning process's id (used in diagnostics).
        rng: Random source for the Random policy.  Pass a seeded
            ``random.Random`` for reproducible runs.

    """

    def __init__(
        self,
        host: ReplacementHost,
        *,
        pid: int,
        rng: random.Random | None = None,
    ) -> None:
        """Create an empty page table with an empty resident set."""
        self._host = host
        self._pid = pid
        self._rng = rng if rng is not None else random.Random()
        self._entries: list[PageTableEntry] = []
        self._resident: deque[int] = deque()
        self._hand = 0

    @property
    def pid(self) -> int:
        """Return the owning process's id."""
        return self._pid

    # -- Lookup & growth -----------------------------------------------------

    def lookup(self, vpn: int) -> PageTableEntry | None:
        """Return the entry for *vpn*, or None if the page was never touched."""
        if vpn < 0 or vpn >= len(self._entries):
            return None
        return self._entries[vpn]

    def append(self, entry: PageTableEntry) -> None:
        """Append *entry* at the end of the table.

        Raises:
            PageTableError: If ``entry.vpn`` is not the next free VPN.

        """
        if entry.vpn != len(self._entries):
            msg = f"Expected entry for VPN {len(self._entries)}, got VPN {entry.vpn}"
            raise PageTableError(msg)
        self._entries.append(entry)

    def new_entry(self) -> PageTableEntry:
        """Create, append, and return the entry for the next VPN."""
        entry = PageTableEntry(len(self._entries))
        self._entries.append(entry)
        return entry

    @property
    def size(self) -> int:
        """Return the number of entries ever appended."""
        return len(self._entries)

    def entries(self) -> list[PageTableEntry]:
        """Return all entries in VPN order."""
        return list(self._entries)

    def __len__(self) -> int:
        """Return the number of entries ever appended."""
        return len(self._entries)

    def __iter__(self) -> Iterator[PageTableEntry]:
        """Iterate over entries in VPN order."""
        return iter(list(self._entries))

    # -- Resident set ----------------------------------------------------------

    @property
    def resident(self) -> tuple[int, ...]:
        """Return the resident VPNs in resident-set order."""
        return tuple(self._resident)

    @property
    def resident_size(self) -> int:
        """Return the number of frames the process currently holds."""
        return len(self._resident)

    @property
    def clock_hand(self) -> int:
        """Return the Clock algorithm's current position in the resident set."""
        return self._hand

    def resident_entries(self) -> list[PageTableEntry]:
        """Return the resident entries in resident-set order."""
        return [self._entries[vpn] for vpn in self._resident]

    def is_resident(self, vpn: int) -> bool:
        """Return True if *vpn* is in the resident set."""
        return vpn in self._resident

    def mark_resident(self, entry: PageTableEntry) -> None:
        """Add *entry* to the tail of the resident set.

        Raises:
            PageTableError: If the entry does not belong to this table
                or is already resident.

        """
        self._check_owned(entry)
        if entry.vpn in self._resident:
            msg = f"VPN {entry.vpn} is already resident"
            raise PageTableError(msg)
        self._resident.append(entry.vpn)

    # -- Replacement -------------------------------------------------------------

    def select_victim_and_replace(self, new_entry: PageTableEntry) -> PageTableEntry:
        """Evict one resident page in favour of *new_entry*.

        The configured algorithm is read once from the host.  The victim
        leaves the resident set, *new_entry* joins it at the tail, and
        the victim is returned.  Entry fields other than ``referenced``
        are left for the caller to update.

        Raises:
            EmptyResidentSetError: If no page is resident.
            PageTableError: If *new_entry* is not in this table or is
                already resident.

        """
        algorithm = resolve_algorithm(self._host.replacement_algorithm)
        if not self._resident:
            msg = f"Process {self._pid}: no resident pages to evict"
            raise EmptyResidentSetError(msg)
        self._check_owned(new_entry)
        if new_entry.vpn in self._resident:
            msg = f"VPN {new_entry.vpn} is already resident"
            raise PageTableError(msg)

        index = select_victim_index(
            algorithm,
            self._resident,
            self._entries,
            hand=self._hand,
            rng=self._rng,
        )
        victim = self._entries[self._resident[index]]
        del self._resident[index]
        if algorithm is ReplacementAlgorithm.CLOCK:
            self._hand = index if index < len(self._resident) else 0
        elif index < self._hand:
            # Keep the hand on the same page for a later Clock sweep
            self._hand -= 1
        self._resident.append(new_entry.vpn)

        self._emit(
            f"Process {self._pid}: {algorithm.display_name} algorithm selected pte: {victim.vpn}"
        )
        return victim

    # -- Helpers -------------------------------------------------------------------

    def _check_owned(self, entry: PageTableEntry) -> None:
        if self.lookup(entry.vpn) is not entry:
            msg = f"Entry for VPN {entry.vpn} does not belong to process {self._pid}"
            raise PageTableError(msg)

    def _emit(self, message: str) -> None:
        # A broken log must never change what the simulation does
        with contextlib.suppress(Exception):
            self._host.test_out(message)
