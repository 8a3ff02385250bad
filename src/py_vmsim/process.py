"""Processes and demand paging.

A process owns one page table and generates memory accesses.  Pages
are loaded lazily: the first access to a page creates its entry, and
any access to a page that is not in RAM is a **page fault**.

Handling a fault::

    process has a free slot and RAM has a free frame?
        yes -> load the page into that frame, mark it resident
        no  -> page table picks a victim (FIFO / Clock / Random)
               victim written back if dirty, loses its frame
               the faulting page takes the frame over

Every access sets the page's referenced bit (the Clock algorithm reads
and clears it), and a write also sets the dirty bit.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from py_vmsim.logging import LogLevel
from py_vmsim.memory.page_table import PageTable

if TYPE_CHECKING:
    from collections.abc import Iterable

    from py_vmsim.kernel import OperatingSystem
    from py_vmsim.memory.entry import PageTableEntry


class PageFaultError(Exception):
    """Raise when an address lies outside the process's address space."""


class OutOfMemoryError(Exception):
    """Raise when no frame can be found for a page."""


@dataclass(frozen=True)
class PagingStats:
    """Counters for one process's paging activity."""

    accesses: int = 0
    page_faults: int = 0
    evictions: int = 0
    write_backs: int = 0

    @property
    def fault_rate(self) -> float:
        """Return page faults per access (0.0 before any access)."""
        if self.accesses == 0:
            return 0.0
        return self.page_faults / self.accesses


# A reference is a bare address (read) or an (address, is_write) pair.
Reference = int | tuple[int, bool]


class Process:
    """A simulated process with its own page table.

    Processes are created by ``OperatingSystem.create_process``, which
    passes itself in as *system*.
    """

    def __init__(self, *, pid: int, name: str, system: OperatingSystem) -> None:
        """Create a process with an empty page table."""
        self._pid = pid
        self._name = name
        self._os = system
        self._page_table = PageTable(system, pid=pid, rng=system.rng)
        self._terminated = False
        self._accesses = 0
        self._page_faults = 0
        self._evictions = 0
        self._write_backs = 0

    @property
    def pid(self) -> int:
        """Return the process id."""
        return self._pid

    @property
    def name(self) -> str:
        """Return the process name."""
        return self._name

    @property
    def page_table(self) -> PageTable:
        """Return this process's page table."""
        return self._page_table

    @property
    def terminated(self) -> bool:
        """Return True once the process has released its memory."""
        return self._terminated

    @property
    def stats(self) -> PagingStats:
        """Return a snapshot of the paging counters."""
        return PagingStats(
            accesses=self._accesses,
            page_faults=self._page_faults,
            evictions=self._evictions,
            write_backs=self._write_backs,
        )

    # -- Memory access -------------------------------------------------------

    def read(self, virtual_address: int) -> PageTableEntry:
        """Read from *virtual_address*; return the entry of its page."""
        return self.access(self._vpn_for(virtual_address))

    def write(self, virtual_address: int) -> PageTableEntry:
        """Write to *virtual_address*; return the entry of its page."""
        return self.access(self._vpn_for(virtual_address), write=True)

    def access(self, vpn: int, *, write: bool = False) -> PageTableEntry:
        """Touch virtual page *vpn*, faulting it into RAM if needed.

        Raises:
            RuntimeError: If the process has been terminated.
            PageFaultError: If *vpn* is outside the address space.
            OutOfMemoryError: If no frame can be found or freed.

        """
        if self._terminated:
            msg = f"Process {self._pid} has terminated"
            raise RuntimeError(msg)
        if not 0 <= vpn < self._os.config.virtual_pages:
            msg = f"Virtual page {vpn} beyond address space (max {self._os.config.virtual_pages - 1})"
            raise PageFaultError(msg)

        entry = self._page_table.lookup(vpn)
        while entry is None:
            # First touch: grow the table up to vpn
            created = self._page_table.new_entry()
            if created.vpn == vpn:
                entry = created

        if not entry.valid:
            self._handle_fault(entry)
            self._page_faults += 1
        self._accesses += 1
        entry.referenced = True
        if write:
            entry.dirty = True
        return entry

    def run(self, references: Iterable[Reference]) -> PagingStats:
        """Replay a reference string and return the resulting stats.

        Each item is a virtual address (a read) or an
        ``(address, is_write)`` pair.
        """
        for ref in references:
            if isinstance(ref, tuple):
                address, is_write = ref
            else:
                address, is_write = ref, False
            if is_write:
                self.write(address)
            else:
                self.read(address)
        return self.stats

    def release(self) -> int:
        """Give all frames back to the OS; return how many were freed."""
        freed = 0
        for entry in self._page_table.resident_entries():
            if entry.frame is not None:
                self._os.free_frame(entry.frame)
                freed += 1
            entry.valid = False
            entry.frame = None
        self._terminated = True
        return freed

    # -- Helpers ---------------------------------------------------------------

    def _vpn_for(self, virtual_address: int) -> int:
        if not 0 <= virtual_address < self._os.config.virtual_address_space:
            msg = (
                f"Address {virtual_address} beyond address space "
                f"({self._os.config.virtual_address_space} bytes)"
            )
            raise PageFaultError(msg)
        return virtual_address // self._os.config.page_size

    def _handle_fault(self, entry: PageTableEntry) -> None:
        self._log(LogLevel.DEBUG, f"Page fault on VPN {entry.vpn}")

        if self._page_table.resident_size < self._os.config.max_ram_pages_per_process:
            frame = self._os.allocate_frame()
            if frame is not None:
                self._load(entry, frame)
                self._page_table.mark_resident(entry)
                return

        if self._page_table.resident_size == 0:
            msg = f"Process {self._pid}: no free frame and nothing to evict for VPN {entry.vpn}"
            raise OutOfMemoryError(msg)

        victim = self._page_table.select_victim_and_replace(entry)
        frame = victim.frame
        if frame is None:
            msg = f"Resident VPN {victim.vpn} has no frame"
            raise RuntimeError(msg)
        self._evict(victim)
        self._load(entry, frame)

    def _evict(self, victim: PageTableEntry) -> None:
        self._evictions += 1
        if victim.dirty:
            self._write_backs += 1
            self._log(LogLevel.DEBUG, f"Writing back dirty VPN {victim.vpn}")
            victim.dirty = False
        self._log(LogLevel.DEBUG, f"Evicted VPN {victim.vpn} from frame {victim.frame}")
        victim.valid = False
        victim.frame = None

    def _load(self, entry: PageTableEntry, frame: int) -> None:
        entry.frame = frame
        entry.valid = True
        entry.dirty = False
        self._log(LogLevel.DEBUG, f"Loaded VPN {entry.vpn} into frame {frame}")

    def _log(self, level: LogLevel, message: str) -> None:
        self._os.logger.log(level, message, source="pager", pid=self._pid)
