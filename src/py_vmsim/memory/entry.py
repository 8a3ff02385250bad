"""Page table entries — one record per virtual page of a process.

An entry is created the first time a process touches a virtual page and
lives as long as the process does.  The fields mirror what an MMU keeps
per page:

- ``vpn`` — the virtual page number.  Fixed at creation; it doubles as
  the entry's position in the page table.
- ``valid`` — the page currently occupies a RAM frame.
- ``frame`` — which frame (only meaningful while valid).
- ``referenced`` — set on every access, cleared by the Clock algorithm.
- ``dirty`` — the page was written since it was loaded.
"""

from __future__ import annotations

from typing import Any


class PageTableEntry:
    """A single virtual page's bookkeeping record.

    Entries are compared by identity: the page table and its resident
    set refer to the *same* object, never to copies.
    """

    __slots__ = ("_vpn", "dirty", "frame", "referenced", "valid")

    def __init__(self, vpn: int) -> None:
        """Create an entry for virtual page *vpn* (not yet in RAM).

        Raises:
            ValueError: If *vpn* is negative.

        """
        if vpn < 0:
            msg = f"Virtual page number must be non-negative, got {vpn}"
            raise ValueError(msg)
        self._vpn = vpn
        self.valid = False
        self.frame: int | None = None
        self.referenced = False
        self.dirty = False

    @property
    def vpn(self) -> int:
        """Return the virtual page number (read-only)."""
        return self._vpn

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly snapshot of the entry."""
        return {
            "vpn": self._vpn,
            "valid": self.valid,
            "frame": self.frame,
            "referenced": self.referenced,
            "dirty": self.dirty,
        }

    def __repr__(self) -> str:
        """Show the VPN and the status bits."""
        bits = "".join(
            flag if on else "-"
            for flag, on in (("V", self.valid), ("R", self.referenced), ("D", self.dirty))
        )
        return f"PageTableEntry(vpn={self._vpn}, frame={self.frame}, {bits})"
