"""Paging event log.

A simulation run is only useful if you can see what the pager did:
which page faulted, which frame it landed in, which victim a
replacement algorithm picked and whether it had to be written back.
All of that is recorded here, in order, as small immutable records.

Three sources write to the log:

- ``kernel``: process creation and termination, policy switches.
- ``pager``: page faults, loads, evictions, write-backs (per process).
- ``replacement``: the one-line verdict of FIFO, Clock or Random.

Replacement verdicts are DEBUG unless the run is in test mode, so a
normal INFO view shows the lifecycle of processes and nothing else.
"""

from dataclasses import dataclass
from enum import IntEnum


class LogLevel(IntEnum):
    """How loud an event is; higher values survive stricter views."""

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass(frozen=True)
class LogEntry:
    """One recorded paging event.

    Attributes:
        level: How loud the event is.
        message: What happened, e.g. ``"Page fault on VPN 3"``.
        source: Which part of the simulator reported it.
        pid: The process it concerns; 0 for the simulator as a whole.

    """

    level: LogLevel
    message: str
    source: str
    pid: int = 0

    def __str__(self) -> str:
        """Render as ``[LEVEL] source: message`` for the log view."""
        return f"[{self.level.name}] {self.source}: {self.message}"


class Logger:
    """Ordered record of everything the simulator reported."""

    def __init__(self) -> None:
        """Start with no events."""
        self._entries: list[LogEntry] = []

    @property
    def entries(self) -> list[LogEntry]:
        """Return a copy of every event, oldest first."""
        return list(self._entries)

    def log(self, level: LogLevel, message: str, *, source: str, pid: int = 0) -> None:
        """Record one event from *source*, optionally tied to process *pid*."""
        self._entries.append(LogEntry(level, message, source, pid))

    def filter(
        self,
        *,
        min_level: LogLevel | None = None,
        source: str | None = None,
        pid: int | None = None,
    ) -> list[LogEntry]:
        """Return the events that pass every given criterion.

        Args:
            min_level: Drop events quieter than this.
            source: Keep only events from this part of the simulator.
            pid: Keep only events about this process.

        """

        def keep(entry: LogEntry) -> bool:
            return (
                (min_level is None or entry.level >= min_level)
                and (source is None or entry.source == source)
                and (pid is None or entry.pid == pid)
            )

        return [entry for entry in self._entries if keep(entry)]

    def lines(self, *, min_level: LogLevel = LogLevel.DEBUG) -> list[str]:
        """Return the rendered events at *min_level* or louder."""
        return [str(entry) for entry in self.filter(min_level=min_level)]

    def clear(self) -> None:
        """Forget every event, e.g. between two runs on the same system."""
        self._entries.clear()

    def __len__(self) -> int:
        """Return how many events have been recorded."""
        return len(self._entries)
